"""
Vocabulary builder - per-category statistics and common words from a corpus.
"""
import logging
from collections import Counter
from typing import Any, Iterable, Optional

from ..config import GraderConfig, get_config
from ..errors import InsufficientDataError, ListingValidationError
from ..models.listing import Listing, parse_listing
from ..models.vocabulary import CategoryVocabulary, SkippedCategory, VocabularyResult
from .stats import field_stats, top_frequencies
from .vectors import term_vector


logger = logging.getLogger(__name__)

GLOBAL_CATEGORY = "*"


def parse_corpus(corpus: Iterable[Any]) -> tuple[list[Listing], int]:
    """
    Validate corpus items, skipping the malformed ones.

    Returns:
        Tuple of (valid listings, number of skipped items)
    """
    listings: list[Listing] = []
    invalid = 0
    for item in corpus:
        try:
            listings.append(parse_listing(item))
        except ListingValidationError as e:
            invalid += 1
            logger.debug(f"Skipping invalid corpus item: {e}")
    if invalid:
        logger.warning(f"Skipped {invalid} invalid corpus items")
    return listings, invalid


def partition_by_category(listings: Iterable[Listing]) -> dict[str, list[Listing]]:
    """Group listings by category, categories in sorted order."""
    groups: dict[str, list[Listing]] = {}
    for listing in listings:
        groups.setdefault(listing.category, []).append(listing)
    return {category: groups[category] for category in sorted(groups)}


class VocabularyBuilder:
    """
    Builds category vocabularies from a corpus snapshot.
    Each category is reduced independently, so callers can fan out
    `build_category` across workers.
    """

    def __init__(self, config: Optional[GraderConfig] = None):
        self.config = config or get_config()

    def build(
        self,
        corpus: Iterable[Any],
        categories: Optional[Iterable[str]] = None,
    ) -> VocabularyResult:
        """
        Build vocabularies for every category in the corpus.

        Args:
            corpus: Listings or raw listing mappings
            categories: Categories the caller expects; ones without listings
                are reported in `skipped`

        Returns:
            VocabularyResult with per-category and pooled vocabularies
        """
        listings, invalid = parse_corpus(corpus)
        logger.info(f"Building vocabulary from {len(listings)} listings")

        groups = partition_by_category(listings)
        expected = sorted(set(categories or []) | set(groups))

        result: dict[str, CategoryVocabulary] = {}
        skipped: list[SkippedCategory] = []
        for category in expected:
            try:
                result[category] = self.build_category(category, groups.get(category, []))
            except InsufficientDataError as e:
                logger.warning(f"Skipping category: {e}")
                skipped.append(SkippedCategory(category=category, reason=str(e)))

        global_vocab = self.build_category(GLOBAL_CATEGORY, listings) if listings else None

        logger.info(f"Vocabulary built for {len(result)} categories ({len(skipped)} skipped)")
        return VocabularyResult(
            categories=result,
            global_vocabulary=global_vocab,
            skipped=skipped,
            total_listings=len(listings),
            invalid_count=invalid,
        )

    def build_category(self, category: str, listings: list[Listing]) -> CategoryVocabulary:
        """
        Reduce one category's listings to a vocabulary.

        Listings missing a field are left out of that field's statistic
        but still contribute terms.

        Raises:
            InsufficientDataError: if `listings` is empty
        """
        if not listings:
            raise InsufficientDataError(category)

        terms: Counter = Counter()
        tags: Counter = Counter()
        for listing in listings:
            terms.update(term_vector(
                listing.text,
                self.config.ignore_stop_words,
                self.config.stop_words,
            ))
            tags.update({t.lower() for t in listing.tags})

        described = [l for l in listings if l.description]
        vocab = CategoryVocabulary(
            category=category,
            sample_size=len(listings),
            title_length=field_stats(len(l.title) for l in listings),
            description_length=field_stats(len(l.description) for l in described),
            word_count=field_stats(l.word_count for l in described),
            price=field_stats(l.price for l in listings),
            tag_count=field_stats(len(l.tags) for l in listings),
            top_terms=top_frequencies(terms, self.config.top_k_terms),
            top_tags=top_frequencies(tags, self.config.top_k_tags),
        )

        if self.config.debug:
            logger.debug(
                f"Category {category}: n={vocab.sample_size}, "
                f"terms={len(terms)}, tags={len(tags)}"
            )
        return vocab
