"""AI modules for optional narrative listing suggestions."""

from .llm_client import LLMClient
from .suggestions import AISuggestionService

__all__ = ["LLMClient", "AISuggestionService"]
