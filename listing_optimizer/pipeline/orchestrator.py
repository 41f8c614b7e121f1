"""
Entry points - build vocabulary, build exemplars, grade, and optimize.

The first three are independent pure steps so callers can cache each stage;
`optimize_asset` composes grading with suggestions.
"""
import json
import logging
from datetime import datetime
from typing import Any, Iterable, Optional

from openai import OpenAIError
from pydantic import ValidationError

from ..ai.llm_client import LLMClient
from ..ai.suggestions import AISuggestionService
from ..config import ConfigLike, resolve_config
from ..models.exemplars import ExemplarResult
from ..models.export import AISuggestions, OptimizationMetadata, OptimizationResult
from ..models.grading import GradeResult
from ..models.listing import parse_listing
from ..models.vocabulary import VocabularyResult
from .exemplars import ExemplarSelector
from .grading import ExemplarsLike, GradingEngine, VocabularyLike, _as_profiles, _as_vocabulary_result
from .recommendations import suggest_keywords, suggest_tags
from .similarity import find_nearest_exemplars, find_similar_listings
from .stats import days_since
from .vocabulary import VocabularyBuilder


logger = logging.getLogger(__name__)


def build_vocabulary(
    corpus: Iterable[Any],
    config: ConfigLike = None,
    categories: Optional[Iterable[str]] = None,
) -> VocabularyResult:
    """Build per-category vocabularies from a corpus snapshot."""
    return VocabularyBuilder(resolve_config(config)).build(corpus, categories)


def build_exemplars(
    corpus: Iterable[Any],
    top_n: Optional[int] = None,
    top_percent: Optional[float] = None,
    config: ConfigLike = None,
    best_sellers: Optional[Iterable[str]] = None,
) -> ExemplarResult:
    """Select exemplars per category; `top_n` wins over `top_percent`."""
    return ExemplarSelector(resolve_config(config)).select(
        corpus, top_n=top_n, top_percent=top_percent, best_sellers=best_sellers
    )


def grade_asset(
    listing: Any,
    vocabulary: VocabularyLike,
    config: ConfigLike = None,
    exemplars: ExemplarsLike = None,
) -> GradeResult:
    """Grade one listing against its category."""
    return GradingEngine(resolve_config(config)).grade(listing, vocabulary, exemplars)


def optimize_asset(
    listing: Any,
    vocabulary: VocabularyLike,
    exemplars: ExemplarsLike = None,
    use_ai: bool = False,
    config: ConfigLike = None,
    corpus: Optional[Iterable[Any]] = None,
    llm_client: Optional[Any] = None,
    now: Optional[datetime] = None,
) -> OptimizationResult:
    """
    Grade a listing and collect suggestions for improving it.

    Pipeline steps:
    1. Grade against the category vocabulary and exemplar profile
    2. Heuristic tag and keyword suggestions
    3. Similar listings, when a corpus is given
    4. AI rewrites, when requested and configured

    Args:
        listing: The listing to optimize
        vocabulary: Output of build_vocabulary
        exemplars: Output of build_exemplars
        use_ai: Forward the listing and grade to the language model
        config: GraderConfig or options mapping
        corpus: Listings to search for similar ones
        llm_client: Client used instead of the configured OpenAI client
        now: Reference time for the listing age in the metadata

    Returns:
        OptimizationResult; AI failures are reported as warnings
    """
    config = resolve_config(config)
    listing = parse_listing(listing)
    vocab_result = _as_vocabulary_result(vocabulary)
    profiles = _as_profiles(exemplars)

    logger.info(f"Optimizing '{listing.title}' (category {listing.category}, use_ai={use_ai})")

    # Step 1: Grade
    grade = GradingEngine(config).grade(listing, vocab_result, profiles)
    warnings = list(grade.warnings)

    # Step 2: Heuristic suggestions
    category_vocab = vocab_result.categories.get(listing.category) or vocab_result.global_vocabulary
    profile = profiles.get(listing.category)
    suggested_tags = suggest_tags(listing, category_vocab, profile, config.max_suggested_tags)
    suggested_keywords = suggest_keywords(listing, category_vocab, config=config)

    # Step 3: Similar listings and nearest exemplars
    similar = []
    if corpus is not None:
        similar = find_similar_listings(listing, corpus, config.similar_k, config)
    nearest = find_nearest_exemplars(listing, profile, config=config) if profile is not None else []

    # Step 4: AI suggestions
    ai_suggestions: Optional[AISuggestions] = None
    if use_ai:
        ai_suggestions = _ai_suggestions(listing, grade, category_vocab, profile, config, llm_client, warnings)

    if profile is not None:
        coaching_method = "exemplar-based"
    elif corpus is not None:
        coaching_method = "similarity-based"
    else:
        coaching_method = "heuristic-only"

    metadata = OptimizationMetadata(
        coaching_method=coaching_method,
        ai_used=ai_suggestions is not None,
        vocabulary_categories=len(vocab_result.categories),
        exemplar_count=len(profile.exemplars) if profile else 0,
        similar_listings_found=len(similar),
        listing_age_days=days_since(listing.last_activity, now) if now else None,
        warnings=warnings,
    )

    logger.info(
        f"Optimization completed: {grade.overall_score} ({grade.letter}), "
        f"{len(grade.recommendations)} recommendations, method {coaching_method}"
    )
    return OptimizationResult(
        grade=grade,
        suggested_tags=suggested_tags,
        suggested_keywords=suggested_keywords,
        similar_listings=similar,
        nearest_exemplars=nearest,
        ai_suggestions=ai_suggestions,
        metadata=metadata,
    )


def _ai_suggestions(listing, grade, vocabulary, profile, config, llm_client, warnings) -> Optional[AISuggestions]:
    """Call the AI suggestion service, recording failures as warnings."""
    if llm_client is None:
        if not config.has_ai():
            warnings.append("AI suggestions requested but no API key is configured")
            return None
        llm_client = LLMClient(config.openai)

    service = AISuggestionService(llm_client, max_tags=config.max_suggested_tags)
    if not service.is_available():
        warnings.append("AI suggestions requested but the LLM client is unavailable")
        return None

    try:
        return service.suggest(listing, grade, vocabulary, profile)
    except (OpenAIError, ValidationError, json.JSONDecodeError, RuntimeError) as e:
        logger.warning(f"AI suggestions failed: {e}")
        warnings.append(f"AI suggestions failed: {e}")
        return None
