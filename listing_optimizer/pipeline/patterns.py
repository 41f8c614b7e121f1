"""
Exemplar patterns - title vocabulary, tag usage and price band of a category's exemplars.
"""
import logging
import math
from collections import Counter
from itertools import combinations
from typing import Optional

import numpy as np

from ..config import GraderConfig, get_config
from ..models.exemplars import ExemplarPatterns, PricePattern
from ..models.listing import Listing
from .stats import field_stats, top_frequencies
from .tokenizer import tokenize


logger = logging.getLogger(__name__)

# Minimum share of exemplars a tag or tag pair must appear in
COMMON_TAG_SHARE = 0.15
TAG_PAIR_SHARE = 0.10


def _min_count(n: int, share: float) -> int:
    return max(1, math.floor(n * share))


def price_pattern(listings: list[Listing]) -> Optional[PricePattern]:
    """Price band of the listings with a positive price."""
    prices = [l.price for l in listings if l.price is not None and l.price > 0]
    if not prices:
        return None

    prices_array = np.array(prices)
    return PricePattern(
        min=float(np.min(prices_array)),
        max=float(np.max(prices_array)),
        mean=float(np.mean(prices_array)),
        median=float(np.median(prices_array)),
        q1=float(np.percentile(prices_array, 25)),
        q3=float(np.percentile(prices_array, 75)),
        count=len(prices),
    )


def extract_patterns(
    exemplars: list[Listing],
    config: Optional[GraderConfig] = None,
) -> ExemplarPatterns:
    """
    Summarize how a set of exemplars is written.

    Tags and tag pairs are kept only when they appear in at least 15% and
    10% of the exemplars respectively (minimum one).
    """
    config = config or get_config()
    if not exemplars:
        return ExemplarPatterns()

    n = len(exemplars)
    words: Counter = Counter()
    bigrams: Counter = Counter()
    tags: Counter = Counter()
    pairs: Counter = Counter()
    for listing in exemplars:
        tokens = tokenize(listing.title, config.ignore_stop_words, config.stop_words)
        words.update(set(tokens.unigrams))
        bigrams.update(set(tokens.bigrams))

        listing_tags = sorted({t.lower() for t in listing.tags})
        tags.update(listing_tags)
        pairs.update(f"{a}|{b}" for a, b in combinations(listing_tags, 2))

    min_tag = _min_count(n, COMMON_TAG_SHARE)
    min_pair = _min_count(n, TAG_PAIR_SHARE)

    patterns = ExemplarPatterns(
        title_words=top_frequencies(words, config.top_k_terms),
        title_bigrams=top_frequencies(bigrams, config.top_k_terms),
        title_length=field_stats(len(l.title) for l in exemplars),
        description_share=sum(1 for l in exemplars if l.description) / n,
        common_tags=[t for t in top_frequencies(tags, config.top_k_tags) if t.count >= min_tag],
        tag_pairs=[t for t in top_frequencies(pairs, config.top_k_tags) if t.count >= min_pair],
        average_tag_count=sum(len(l.tags) for l in exemplars) / n,
        price=price_pattern(exemplars),
    )

    if config.debug:
        logger.debug(
            f"Patterns from {n} exemplars: {len(patterns.common_tags)} common tags, "
            f"{len(patterns.tag_pairs)} tag pairs"
        )
    return patterns
