"""
Grading models - extracted features, recommendation signals, and grade results.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .vocabulary import TermFrequency


class ListingFeatures(BaseModel):
    """Observable features of a listing."""
    model_config = ConfigDict(frozen=True)

    title_length: int
    description_length: int
    word_count: int
    tag_count: int
    price: Optional[float] = None
    tags: tuple[str, ...] = Field(default_factory=tuple, description="Lowercased tags")
    term_vector: dict[str, int] = Field(default_factory=dict)

    # Category targets, filled from the vocabulary used for grading
    title_target: Optional[float] = None
    description_target: Optional[float] = None
    description_unit: str = Field(default="words", description="'words' or 'characters'")
    tag_target: Optional[float] = None
    price_target: Optional[float] = None
    alignment: Optional[float] = None


class ExemplarGap(BaseModel):
    """Exemplar terms and tags the listing does not use."""
    model_config = ConfigDict(frozen=True)

    missing_terms: list[TermFrequency] = Field(
        default_factory=list,
        description="Ordered by exemplar frequency, most common first",
    )
    missing_tags: list[str] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.missing_terms and not self.missing_tags


class Recommendation(BaseModel):
    """A single recommendation signal."""
    model_config = ConfigDict(frozen=True)

    feature: str
    impact: float = Field(ge=0, description="Absolute deviation driving this suggestion")
    message: str


class GradeResult(BaseModel):
    """Result of grading one listing against its category."""
    model_config = ConfigDict(frozen=True)

    overall_score: float = Field(ge=0, le=100)
    letter: str
    breakdown: dict[str, float] = Field(description="Feature -> sub-score (0-100)")
    deviations: dict[str, float] = Field(
        default_factory=dict,
        description="Feature -> signed deviation in standard deviations",
    )
    weights_used: dict[str, float] = Field(
        default_factory=dict,
        description="Renormalized weights of the sub-scores present",
    )
    recommendations: list[str] = Field(default_factory=list)
    signals: list[Recommendation] = Field(default_factory=list)
    alignment_score: Optional[float] = Field(default=None, ge=0, le=1)
    exemplar_gap: ExemplarGap = Field(default_factory=ExemplarGap)

    category: str
    used_fallback: bool = False
    fallback_source: Optional[str] = Field(default=None, description="'global' or 'default'")
    warnings: list[str] = Field(default_factory=list)
