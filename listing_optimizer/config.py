"""
Configuration and default tables for the listing optimizer.
"""
import os
from typing import Any, Mapping, Optional, Union

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Load environment variables
load_dotenv()


# Words too common to carry meaning for category vocabularies
STOP_WORDS: frozenset[str] = frozenset({
    "a", "an", "and", "are", "as", "at", "be", "been", "by", "for", "from",
    "has", "he", "in", "is", "it", "its", "of", "on", "that", "the",
    "to", "was", "will", "with", "you", "your", "have", "had", "this",
    "but", "not", "or", "can", "could", "would", "should", "do", "does",
    "did", "get", "got", "go", "going", "gone", "make", "made", "take",
    "taken", "come", "came", "see", "seen", "know", "known", "well",
    "also", "back", "after", "use", "used", "using", "each", "which",
    "their", "said", "if", "up", "out", "many", "then", "them", "these",
    "so", "some", "her", "there", "what", "all", "were", "when",
    "who", "now", "find", "down", "way", "may", "very", "still", "any",
    "my", "other", "such", "through", "our", "much", "before", "too",
    "where", "here", "how", "because", "between", "both", "during", "only",
    "over", "same", "those", "under", "while", "why", "without", "within",
    "about", "above", "against", "below", "into", "near", "off", "since",
    "than", "until", "upon",
})

# Letter grade table, checked top to bottom; anything below the last is "F"
GRADE_THRESHOLDS: tuple[tuple[str, float], ...] = (
    ("A", 90.0),
    ("B", 80.0),
    ("C", 70.0),
    ("D", 60.0),
)

# Tie-break order when two recommendations have the same impact
FEATURE_PRIORITY: tuple[str, ...] = ("title", "tags", "description", "price", "alignment")

# Sub-score curve: full marks within OPTIMAL_BAND_Z of the mean, then a
# Gaussian fall-off of width PENALTY_WIDTH (both in standard deviations)
OPTIMAL_BAND_Z = 0.5
PENALTY_WIDTH = 1.0

PRICE_OUTLIER_Z = 1.5
ALIGNMENT_TARGET = 0.5
# Maps alignment in [0, 1] to a deviation in [-2, 0]
ALIGNMENT_DEVIATION_SCALE = 2.0


class FeatureWeights(BaseModel):
    """Relative weight of each sub-score in the overall score."""
    model_config = ConfigDict(frozen=True)

    title: float = Field(default=0.25, ge=0)
    description: float = Field(default=0.25, ge=0)
    tags: float = Field(default=0.20, ge=0)
    price: float = Field(default=0.10, ge=0)
    alignment: float = Field(default=0.20, ge=0)


class QualityWeights(BaseModel):
    """Weights of the engagement signals in the exemplar quality score."""
    model_config = ConfigDict(frozen=True)

    rating: float = Field(default=0.5, ge=0)
    reviews: float = Field(default=0.3, ge=0)
    favorites: float = Field(default=0.2, ge=0)


class OpenAIConfig(BaseModel):
    """OpenAI API configuration. Only the AI suggestion layer reads this."""
    api_key: str = Field(default_factory=lambda: os.getenv("OPENAI_API_KEY", ""))
    model: str = Field(default_factory=lambda: os.getenv("OPENAI_MODEL", "gpt-4o-mini"))
    max_tokens: int = Field(default=2048)
    temperature: float = Field(default=0.4)


class GraderConfig(BaseModel):
    """Options shared by the vocabulary builder, exemplar selector and grader."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    debug: bool = Field(default=False, description="Verbose logging; never changes scores")
    weights: FeatureWeights = Field(default_factory=FeatureWeights)
    ignore_stop_words: bool = Field(default=True, alias="ignoreStopWords")
    stop_words: frozenset[str] = Field(default=STOP_WORDS)
    grade_thresholds: tuple[tuple[str, float], ...] = Field(default=GRADE_THRESHOLDS)
    feature_priority: tuple[str, ...] = Field(default=FEATURE_PRIORITY)

    # Vocabulary
    top_k_terms: int = Field(default=50, ge=1, description="Common terms kept per category")
    top_k_tags: int = Field(default=30, ge=1, description="Common tags kept per category")

    # Exemplars
    default_top_n: int = Field(default=20, ge=1, description="Exemplars per category if no cutoff given")
    quality_weights: QualityWeights = Field(default_factory=QualityWeights)

    # Grading and suggestions
    max_recommendations: int = Field(default=5, ge=0)
    max_gap_terms: int = Field(default=10, ge=0)
    max_suggested_tags: int = Field(default=10, ge=0)
    similar_k: int = Field(default=5, ge=1)

    openai: OpenAIConfig = Field(default_factory=OpenAIConfig)

    @field_validator("grade_thresholds")
    @classmethod
    def check_thresholds(cls, v: tuple[tuple[str, float], ...]) -> tuple[tuple[str, float], ...]:
        """Thresholds must be strictly descending so bands never overlap."""
        cutoffs = [cutoff for _, cutoff in v]
        if any(a <= b for a, b in zip(cutoffs, cutoffs[1:])):
            raise ValueError("grade thresholds must be strictly descending")
        return v

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]] = None) -> "GraderConfig":
        """
        Build a config from a plain options mapping.

        Accepts the snake_case field names as well as the short keys used by
        the web layer (`ignoreStopWords`, `apiKey`, `model`).
        """
        if not options:
            return cls()

        data = dict(options)
        api_key = data.pop("apiKey", None) or data.pop("api_key", None)
        model = data.pop("model", None)
        if api_key or model:
            openai = dict(data.pop("openai", {}) or {})
            if api_key:
                openai["api_key"] = api_key
            if model:
                openai["model"] = model
            data["openai"] = openai
        return cls.model_validate(data)

    def has_ai(self) -> bool:
        """Whether the AI suggestion layer can be used."""
        return bool(self.openai.api_key)


ConfigLike = Union[GraderConfig, Mapping[str, Any], None]


def resolve_config(config: ConfigLike = None) -> GraderConfig:
    """Accept a GraderConfig, an options mapping or None."""
    if config is None:
        return get_config()
    if isinstance(config, GraderConfig):
        return config
    return GraderConfig.from_options(config)


# Singleton config instance
_config: Optional[GraderConfig] = None


def get_config() -> GraderConfig:
    """Get or create the singleton config instance."""
    global _config
    if _config is None:
        _config = GraderConfig()
    return _config
