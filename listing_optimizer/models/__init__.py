"""
Pydantic models for the listing optimizer.
All data contracts are defined here for strict validation.
"""

from .listing import Listing, parse_listing
from .vocabulary import (
    FieldStats,
    TermFrequency,
    CategoryVocabulary,
    SkippedCategory,
    VocabularyResult,
    DEFAULT_VOCABULARY,
)
from .exemplars import (
    ExemplarEntry,
    ExemplarPatterns,
    ExemplarProfile,
    ExemplarResult,
    ExemplarStats,
    PricePattern,
)
from .grading import ListingFeatures, ExemplarGap, Recommendation, GradeResult
from .export import (
    SimilarListing,
    AISuggestions,
    OptimizationMetadata,
    OptimizationResult,
)

__all__ = [
    # Listing
    "Listing",
    "parse_listing",
    # Vocabulary
    "FieldStats",
    "TermFrequency",
    "CategoryVocabulary",
    "SkippedCategory",
    "VocabularyResult",
    "DEFAULT_VOCABULARY",
    # Exemplars
    "ExemplarEntry",
    "ExemplarProfile",
    "ExemplarResult",
    "ExemplarStats",
    "ExemplarPatterns",
    "PricePattern",
    # Grading
    "ListingFeatures",
    "ExemplarGap",
    "Recommendation",
    "GradeResult",
    # Export
    "SimilarListing",
    "AISuggestions",
    "OptimizationMetadata",
    "OptimizationResult",
]
