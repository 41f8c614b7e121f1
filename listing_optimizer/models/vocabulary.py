"""
Vocabulary models - per-category distributions and common terms.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..errors import MissingVocabularyError


class FieldStats(BaseModel):
    """Population statistics of one numeric listing field."""
    model_config = ConfigDict(frozen=True)

    mean: float
    std: float = Field(ge=0, description="Population standard deviation")
    median: float
    min: float
    max: float
    count: int = Field(ge=1, description="Listings that had this field")


class TermFrequency(BaseModel):
    """A term (unigram, bigram or tag) and how often it was seen."""
    model_config = ConfigDict(frozen=True)

    term: str
    count: int = Field(ge=1)


class CategoryVocabulary(BaseModel):
    """Distributional statistics and common words for one category."""
    model_config = ConfigDict(frozen=True)

    category: str
    sample_size: int = Field(ge=1, description="Corpus listings observed")

    title_length: Optional[FieldStats] = None
    description_length: Optional[FieldStats] = None
    word_count: Optional[FieldStats] = None
    price: Optional[FieldStats] = None
    tag_count: Optional[FieldStats] = None

    top_terms: list[TermFrequency] = Field(
        default_factory=list,
        description="Most frequent unigrams and bigrams, most common first",
    )
    top_tags: list[TermFrequency] = Field(default_factory=list)

    def term_weights(self) -> dict[str, int]:
        """Common terms as a term -> count mapping."""
        return {t.term: t.count for t in self.top_terms}


class SkippedCategory(BaseModel):
    """A category left out of a build, with the reason."""
    category: str
    reason: str


class VocabularyResult(BaseModel):
    """Output of a vocabulary build over one corpus snapshot."""
    model_config = ConfigDict(frozen=True)

    categories: dict[str, CategoryVocabulary] = Field(default_factory=dict)
    global_vocabulary: Optional[CategoryVocabulary] = Field(
        default=None,
        description="All valid listings pooled; used when a category is unknown",
    )
    skipped: list[SkippedCategory] = Field(default_factory=list)
    total_listings: int = 0
    invalid_count: int = 0

    def require(self, category: str) -> CategoryVocabulary:
        """
        Look up a category vocabulary.

        Raises:
            MissingVocabularyError: if the category was not in the corpus
        """
        vocab = self.categories.get(category)
        if vocab is None:
            raise MissingVocabularyError(category)
        return vocab

    def __contains__(self, category: object) -> bool:
        return category in self.categories


# Used when neither the category nor a pooled vocabulary is available
DEFAULT_VOCABULARY = CategoryVocabulary(
    category="*default*",
    sample_size=1,
    title_length=FieldStats(mean=60, std=15, median=60, min=20, max=100, count=1),
    description_length=FieldStats(mean=1500, std=600, median=1400, min=200, max=4000, count=1),
    word_count=FieldStats(mean=300, std=100, median=300, min=50, max=800, count=1),
    tag_count=FieldStats(mean=8, std=3, median=8, min=1, max=15, count=1),
)
