"""
Error taxonomy for the grading engine.
"""
from typing import Any, Optional


class OptimizerError(Exception):
    """Base class for all listing optimizer errors."""


class ListingValidationError(OptimizerError, ValueError):
    """A listing is malformed or misses a required field."""

    def __init__(self, message: str, errors: Optional[list[dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []


class InsufficientDataError(OptimizerError):
    """A category has no listings to build statistics from."""

    def __init__(self, category: str, message: Optional[str] = None):
        super().__init__(message or f"No listings for category '{category}'")
        self.category = category


class MissingVocabularyError(OptimizerError, KeyError):
    """The listing's category was never seen when the vocabulary was built."""

    def __init__(self, category: str):
        super().__init__(category)
        self.category = category

    def __str__(self) -> str:
        return f"No vocabulary for category '{self.category}'"
