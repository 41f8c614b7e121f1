"""
Export models - optimization results and their metadata.
"""
from typing import Any, Optional

from pydantic import BaseModel, Field

from .grading import GradeResult


class SimilarListing(BaseModel):
    """A corpus listing close to the graded one."""
    identifier: str
    title: str
    category: str
    price: Optional[float] = None
    similarity: float = Field(ge=0, le=1)
    shared_tags: list[str] = Field(default_factory=list)


class TitleSuggestion(BaseModel):
    text: str
    rationale: Optional[str] = None


class TagSuggestion(BaseModel):
    tag: str
    rationale: Optional[str] = None


class AISuggestions(BaseModel):
    """Narrative suggestions returned by the language model."""
    titles: list[TitleSuggestion] = Field(default_factory=list)
    tags: list[TagSuggestion] = Field(default_factory=list)
    short_description: Optional[str] = None
    long_description: Optional[str] = None
    summary: Optional[str] = Field(default=None, description="One-paragraph coaching note")


class OptimizationMetadata(BaseModel):
    """How an optimization result was produced."""
    coaching_method: str = Field(description="'exemplar-based', 'similarity-based' or 'heuristic-only'")
    ai_used: bool = False
    vocabulary_categories: int = 0
    exemplar_count: int = 0
    similar_listings_found: int = 0
    listing_age_days: Optional[int] = None
    warnings: list[str] = Field(default_factory=list)


class OptimizationResult(BaseModel):
    """Grade plus heuristic and optional AI suggestions for one listing."""
    grade: GradeResult
    suggested_tags: list[str] = Field(default_factory=list)
    suggested_keywords: list[str] = Field(default_factory=list)
    similar_listings: list[SimilarListing] = Field(default_factory=list)
    nearest_exemplars: list[SimilarListing] = Field(default_factory=list)
    ai_suggestions: Optional[AISuggestions] = None
    metadata: OptimizationMetadata

    def to_minimal_export(self) -> dict[str, Any]:
        """Export the fields the listing editor shows."""
        return {
            "score": self.grade.overall_score,
            "letter": self.grade.letter,
            "breakdown": self.grade.breakdown,
            "recommendations": self.grade.recommendations,
            "suggested_tags": self.suggested_tags,
            "used_fallback": self.grade.used_fallback,
            "ai_used": self.metadata.ai_used,
        }
