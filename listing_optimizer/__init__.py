"""Listing optimizer - grade marketplace listings against category norms and exemplars."""

from .config import GraderConfig, get_config
from .errors import (
    OptimizerError,
    ListingValidationError,
    InsufficientDataError,
    MissingVocabularyError,
)
from .models import Listing, GradeResult, OptimizationResult, VocabularyResult, ExemplarResult
from .pipeline import build_vocabulary, build_exemplars, grade_asset, optimize_asset

__all__ = [
    "GraderConfig",
    "get_config",
    "OptimizerError",
    "ListingValidationError",
    "InsufficientDataError",
    "MissingVocabularyError",
    "Listing",
    "GradeResult",
    "OptimizationResult",
    "VocabularyResult",
    "ExemplarResult",
    "build_vocabulary",
    "build_exemplars",
    "grade_asset",
    "optimize_asset",
]
