"""
Exemplar selector - pick the top-performing listings of each category.
"""
import logging
import math
import re
from collections import Counter
from datetime import timezone
from typing import Any, Iterable, Optional

from ..config import GraderConfig, get_config
from ..errors import InsufficientDataError
from ..models.exemplars import (
    CategoryExemplarStats,
    ExemplarEntry,
    ExemplarProfile,
    ExemplarResult,
    ExemplarStats,
)
from ..models.listing import Listing
from ..models.vocabulary import SkippedCategory
from .patterns import extract_patterns
from .stats import top_frequencies, zscores
from .vectors import add_vectors, term_vector
from .vocabulary import parse_corpus, partition_by_category


logger = logging.getLogger(__name__)


def normalize_key(value: str) -> str:
    """Normalize an id, url or title for best-seller matching."""
    value = value.strip().lower()
    value = re.sub(r"[?#].*$", "", value).rstrip("/")
    return re.sub(r"\s+", " ", value)


def _log_count(value: Optional[int]) -> Optional[float]:
    return math.log1p(value) if value is not None else None


def _recency_key(listing: Listing) -> float:
    """Sort key placing the most recent listing first and undated ones last."""
    ts = listing.last_activity
    if ts is None:
        return math.inf
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return -ts.timestamp()


class ExemplarSelector:
    """
    Ranks each category's listings by a composite engagement score and keeps
    the top ones as exemplars.
    """

    def __init__(self, config: Optional[GraderConfig] = None):
        self.config = config or get_config()

    def select(
        self,
        corpus: Iterable[Any],
        top_n: Optional[int] = None,
        top_percent: Optional[float] = None,
        best_sellers: Optional[Iterable[str]] = None,
        categories: Optional[Iterable[str]] = None,
    ) -> ExemplarResult:
        """
        Select exemplars for every category in the corpus.

        Args:
            corpus: Listings or raw listing mappings
            top_n: Exemplars per category; wins over `top_percent`
            top_percent: Fraction (0, 1] of each category, rounded up, minimum 1
            best_sellers: Listing ids, urls or titles always kept as exemplars
            categories: Categories the caller expects; empty ones are reported

        Returns:
            ExemplarResult with one profile per non-empty category
        """
        if top_n is not None and top_n < 1:
            raise ValueError("top_n must be at least 1")
        if top_n is None and top_percent is not None and not 0 < top_percent <= 1:
            raise ValueError("top_percent must be a fraction in (0, 1]")
        if top_n is None and top_percent is None:
            top_n = self.config.default_top_n

        listings, _ = parse_corpus(corpus)
        best_keys = {normalize_key(b) for b in (best_sellers or []) if b}
        selection = f"top {top_n}" if top_n is not None else f"top {top_percent:.0%}"
        logger.info(
            f"Selecting exemplars from {len(listings)} listings using {selection}, "
            f"{len(best_keys)} best sellers"
        )

        groups = partition_by_category(listings)
        expected = sorted(set(categories or []) | set(groups))

        profiles: dict[str, ExemplarProfile] = {}
        skipped: list[SkippedCategory] = []
        for category in expected:
            members = groups.get(category, [])
            try:
                profiles[category] = self.select_category(
                    category, members, top_n, top_percent, best_keys, selection
                )
            except InsufficientDataError as e:
                logger.warning(f"Skipping category: {e}")
                skipped.append(SkippedCategory(category=category, reason=str(e)))

        return ExemplarResult(profiles=profiles, skipped=skipped)

    def select_category(
        self,
        category: str,
        listings: list[Listing],
        top_n: Optional[int],
        top_percent: Optional[float],
        best_keys: Optional[set[str]] = None,
        selection: str = "",
    ) -> ExemplarProfile:
        """
        Rank one category and build its exemplar profile.

        Raises:
            InsufficientDataError: if `listings` is empty
        """
        if not listings:
            raise InsufficientDataError(category)

        if top_n is not None:
            cutoff = min(top_n, len(listings))
        else:
            # 100 * 0.07 is 7.000000000000001 in floating point
            cutoff = max(1, math.ceil(round(len(listings) * top_percent, 9)))

        scores = self.quality_scores(listings)
        ranked = sorted(
            zip(listings, scores),
            key=lambda pair: (-pair[1], _recency_key(pair[0]), pair[0].identity),
        )

        best_keys = best_keys or set()
        best = [(l, s) for l, s in ranked if self._is_best_seller(l, best_keys)]
        regular = [(l, s) for l, s in ranked if not self._is_best_seller(l, best_keys)]
        chosen = best + regular[: max(0, cutoff - len(best))]

        entries = [
            ExemplarEntry(
                rank=rank,
                identifier=listing.identity,
                title=listing.title,
                quality_score=round(score, 6),
                is_best_seller=self._is_best_seller(listing, best_keys),
                listing=listing,
            )
            for rank, (listing, score) in enumerate(chosen, 1)
        ]

        vectors = [
            term_vector(l.text, self.config.ignore_stop_words, self.config.stop_words)
            for l, _ in chosen
        ]
        tags = Counter(t for l, _ in chosen for t in {tag.lower() for tag in l.tags})

        logger.info(
            f"Category {category}: {len(listings)} listings, "
            f"selected {len(entries)} exemplars ({len(best)} best sellers)"
        )
        return ExemplarProfile(
            category=category,
            category_size=len(listings),
            selection=selection or f"top {cutoff}",
            exemplars=entries,
            term_vector=add_vectors(vectors),
            top_tags=top_frequencies(tags, self.config.top_k_tags),
            patterns=extract_patterns([l for l, _ in chosen], self.config),
        )

    def quality_scores(self, listings: list[Listing]) -> list[float]:
        """
        Composite engagement score per listing.

        Weighted sum of the category z-scores of rating, log review count
        and log favorite count. A missing signal contributes 0.
        """
        w = self.config.quality_weights
        rating_z = zscores([l.rating for l in listings])
        review_z = zscores([_log_count(l.review_count) for l in listings])
        favorite_z = zscores([_log_count(l.favorite_count) for l in listings])

        scores = []
        for listing, rz, vz, fz in zip(listings, rating_z, review_z, favorite_z):
            score = w.rating * rz + w.reviews * vz + w.favorites * fz
            scores.append(score)
            if self.config.debug:
                logger.debug(f"Quality {listing.identity}: {score:.3f}")
        return scores

    def _is_best_seller(self, listing: Listing, best_keys: set[str]) -> bool:
        if not best_keys:
            return False
        candidates = [listing.listing_id, listing.url, listing.title]
        return any(c and normalize_key(c) in best_keys for c in candidates)


def exemplar_stats(result: ExemplarResult) -> ExemplarStats:
    """Summarize an exemplar build per category."""
    categories = []
    for category, profile in result.profiles.items():
        scores = [e.quality_score for e in profile.exemplars]
        categories.append(CategoryExemplarStats(
            category=category,
            count=len(scores),
            best_sellers=sum(1 for e in profile.exemplars if e.is_best_seller),
            average_quality=round(sum(scores) / len(scores), 4) if scores else 0.0,
            top_quality=max(scores) if scores else 0.0,
        ))

    categories.sort(key=lambda c: (-c.count, c.category))
    total = sum(c.count for c in categories)
    return ExemplarStats(
        total_categories=len(categories),
        total_exemplars=total,
        total_best_sellers=sum(c.best_sellers for c in categories),
        average_per_category=round(total / len(categories), 2) if categories else 0.0,
        categories=categories,
    )
