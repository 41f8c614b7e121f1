"""
Exemplar models - top-performing listings per category and their vocabulary.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .listing import Listing
from .vocabulary import FieldStats, SkippedCategory, TermFrequency


class ExemplarEntry(BaseModel):
    """One selected exemplar with its ranking data."""
    model_config = ConfigDict(frozen=True)

    rank: int = Field(ge=1)
    identifier: str
    title: str
    quality_score: float = Field(description="Composite of z-scored engagement signals")
    is_best_seller: bool = False
    listing: Listing


class PricePattern(BaseModel):
    """Exemplar price band."""
    model_config = ConfigDict(frozen=True)

    min: float
    max: float
    mean: float
    median: float
    q1: float
    q3: float
    count: int = Field(ge=1)

    @property
    def iqr(self) -> float:
        return self.q3 - self.q1


class ExemplarPatterns(BaseModel):
    """How the exemplars of a category are written and priced."""
    model_config = ConfigDict(frozen=True)

    title_words: list[TermFrequency] = Field(default_factory=list)
    title_bigrams: list[TermFrequency] = Field(default_factory=list)
    title_length: Optional[FieldStats] = None
    description_share: float = Field(
        default=0.0,
        ge=0,
        le=1,
        description="Fraction of exemplars with a description",
    )
    common_tags: list[TermFrequency] = Field(default_factory=list)
    tag_pairs: list[TermFrequency] = Field(
        default_factory=list,
        description="Tags used together, as 'a|b' with a < b",
    )
    average_tag_count: float = 0.0
    price: Optional[PricePattern] = None


class ExemplarProfile(BaseModel):
    """Exemplars of one category and their combined term vector."""
    model_config = ConfigDict(frozen=True)

    category: str
    category_size: int = Field(ge=1, description="Listings ranked in this category")
    selection: str = Field(description="Cutoff rule, e.g. 'top 3' or 'top 10%'")
    exemplars: list[ExemplarEntry] = Field(default_factory=list)
    term_vector: dict[str, int] = Field(
        default_factory=dict,
        description="Sum of the exemplars' term vectors",
    )
    top_tags: list[TermFrequency] = Field(default_factory=list)
    patterns: Optional[ExemplarPatterns] = None

    @property
    def identifiers(self) -> list[str]:
        return [e.identifier for e in self.exemplars]


class ExemplarResult(BaseModel):
    """Output of an exemplar build over one corpus snapshot."""
    model_config = ConfigDict(frozen=True)

    profiles: dict[str, ExemplarProfile] = Field(default_factory=dict)
    skipped: list[SkippedCategory] = Field(default_factory=list)

    def get(self, category: str) -> Optional[ExemplarProfile]:
        return self.profiles.get(category)


class CategoryExemplarStats(BaseModel):
    """Summary of one category's exemplar set."""
    category: str
    count: int
    best_sellers: int
    average_quality: float
    top_quality: float


class ExemplarStats(BaseModel):
    """Summary of an exemplar build."""
    total_categories: int = 0
    total_exemplars: int = 0
    total_best_sellers: int = 0
    average_per_category: float = 0.0
    categories: list[CategoryExemplarStats] = Field(default_factory=list)
