"""
Similar-listing search over a corpus using term-vector cosine similarity.
"""
import logging
from typing import Any, Iterable, Optional

from ..config import GraderConfig, get_config
from ..models.exemplars import ExemplarProfile
from ..models.export import SimilarListing
from ..models.listing import Listing, parse_listing
from .vectors import cosine_similarity, term_vector
from .vocabulary import parse_corpus


logger = logging.getLogger(__name__)


def _rank_neighbors(
    target: Listing,
    candidates: Iterable[Listing],
    k: int,
    config: GraderConfig,
) -> list[SimilarListing]:
    """Top `k` candidates by cosine similarity, ties broken by identity."""
    target_vector = term_vector(target.text, config.ignore_stop_words, config.stop_words)
    target_tags = {t.lower() for t in target.tags}

    scored = []
    for candidate in candidates:
        if candidate.identity == target.identity:
            continue
        vector = term_vector(candidate.text, config.ignore_stop_words, config.stop_words)
        similarity = cosine_similarity(target_vector, vector)
        shared = sorted(target_tags & {t.lower() for t in candidate.tags})
        scored.append((candidate, similarity, shared))

    scored.sort(key=lambda x: (-x[1], x[0].identity))
    return [
        SimilarListing(
            identifier=candidate.identity,
            title=candidate.title,
            category=candidate.category,
            price=candidate.price,
            similarity=round(similarity, 4),
            shared_tags=shared,
        )
        for candidate, similarity, shared in scored[:k]
    ]


def find_similar_listings(
    listing: Any,
    corpus: Iterable[Any],
    k: Optional[int] = None,
    config: Optional[GraderConfig] = None,
) -> list[SimilarListing]:
    """
    Find the corpus listings closest to `listing`.

    Args:
        listing: Target listing
        corpus: Listings or raw listing mappings to search
        k: Number of neighbors (defaults to config.similar_k)

    Returns:
        Neighbors ordered by similarity, most similar first
    """
    config = config or get_config()
    k = k if k is not None else config.similar_k
    target: Listing = parse_listing(listing)
    candidates, _ = parse_corpus(corpus)

    results = _rank_neighbors(target, candidates, k, config)

    logger.info(
        f"Similarity search for '{target.title}': {len(candidates)} candidates, "
        f"returned {len(results)}"
    )
    return results


def find_nearest_exemplars(
    listing: Any,
    profile: ExemplarProfile,
    k: Optional[int] = None,
    config: Optional[GraderConfig] = None,
) -> list[SimilarListing]:
    """Exemplars of the listing's category closest to it, most similar first."""
    config = config or get_config()
    k = k if k is not None else config.similar_k
    target: Listing = parse_listing(listing)

    results = _rank_neighbors(target, (e.listing for e in profile.exemplars), k, config)
    logger.debug(f"Nearest exemplars for '{target.title}': {[r.identifier for r in results]}")
    return results
