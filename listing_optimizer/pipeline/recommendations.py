"""
Recommendation heuristics - map feature deviations and exemplar gaps to suggestions.

Each rule is a pure function of (features, deviations, gap) returning a
Recommendation or None. Rules never look at each other's output, so adding
a rule leaves the existing suggestions unchanged.
"""
import logging
from typing import Callable, Iterable, Mapping, Optional, Sequence

from ..config import (
    ALIGNMENT_TARGET,
    FEATURE_PRIORITY,
    OPTIMAL_BAND_Z,
    PRICE_OUTLIER_Z,
    GraderConfig,
    get_config,
)
from ..models.exemplars import ExemplarProfile
from ..models.grading import ExemplarGap, ListingFeatures, Recommendation
from ..models.listing import Listing
from ..models.vocabulary import CategoryVocabulary
from .tokenizer import tokenize


logger = logging.getLogger(__name__)

Rule = Callable[[ListingFeatures, Mapping[str, float], ExemplarGap], Optional[Recommendation]]

MAX_LISTED_TERMS = 5


def _fmt(value: Optional[float]) -> str:
    return f"{value:.0f}" if value is not None else "the category norm"


def _gap_tags(gap: ExemplarGap) -> list[str]:
    """Tag ideas: exemplar tags first, single-word exemplar terms otherwise."""
    if gap.missing_tags:
        return gap.missing_tags[:MAX_LISTED_TERMS]
    return [t.term for t in gap.missing_terms if " " not in t.term][:MAX_LISTED_TERMS]


def title_length_rule(
    features: ListingFeatures,
    deviations: Mapping[str, float],
    gap: ExemplarGap,
) -> Optional[Recommendation]:
    z = deviations.get("title")
    if z is None or abs(z) <= OPTIMAL_BAND_Z:
        return None

    verb = "Lengthen" if z < 0 else "Shorten"
    return Recommendation(
        feature="title",
        impact=abs(z),
        message=(
            f"{verb} the title toward {_fmt(features.title_target)} characters "
            f"(currently {features.title_length})"
        ),
    )


def description_length_rule(
    features: ListingFeatures,
    deviations: Mapping[str, float],
    gap: ExemplarGap,
) -> Optional[Recommendation]:
    z = deviations.get("description")
    if z is None or abs(z) <= OPTIMAL_BAND_Z:
        return None

    verb = "Expand" if z < 0 else "Tighten"
    if features.description_unit == "words":
        current = features.word_count
    else:
        current = features.description_length
    return Recommendation(
        feature="description",
        impact=abs(z),
        message=(
            f"{verb} the description toward about {_fmt(features.description_target)} "
            f"{features.description_unit} (currently {current})"
        ),
    )


def tag_count_rule(
    features: ListingFeatures,
    deviations: Mapping[str, float],
    gap: ExemplarGap,
) -> Optional[Recommendation]:
    z = deviations.get("tags")
    ideas = _gap_tags(gap)

    if features.tag_count == 0:
        # No tags at all is always worth flagging, even with zero variance
        message = f"Add tags; listings in this category use about {_fmt(features.tag_target)}"
        if ideas:
            message += f", e.g. {', '.join(ideas)}"
        return Recommendation(feature="tags", impact=max(abs(z or 0.0), 1.0), message=message)

    if z is None or abs(z) <= OPTIMAL_BAND_Z:
        return None

    if z < 0:
        message = (
            f"Add more tags (currently {features.tag_count}, "
            f"category typical {_fmt(features.tag_target)})"
        )
        if ideas:
            message += f", e.g. {', '.join(ideas)}"
    else:
        message = (
            f"Trim tags to the {_fmt(features.tag_target)} most relevant "
            f"(currently {features.tag_count})"
        )
    return Recommendation(feature="tags", impact=abs(z), message=message)


def price_outlier_rule(
    features: ListingFeatures,
    deviations: Mapping[str, float],
    gap: ExemplarGap,
) -> Optional[Recommendation]:
    z = deviations.get("price")
    if z is None or features.price is None or abs(z) <= PRICE_OUTLIER_Z:
        return None

    direction = "above" if z > 0 else "below"
    mean = f"{features.price_target:.2f}" if features.price_target is not None else "n/a"
    return Recommendation(
        feature="price",
        impact=abs(z),
        message=(
            f"Price {features.price:.2f} is {abs(z):.1f} std devs {direction} "
            f"the category mean of {mean}; review your pricing"
        ),
    )


def keyword_gap_rule(
    features: ListingFeatures,
    deviations: Mapping[str, float],
    gap: ExemplarGap,
) -> Optional[Recommendation]:
    z = deviations.get("alignment")
    if z is None or features.alignment is None or features.alignment >= ALIGNMENT_TARGET:
        return None
    if not gap.missing_terms:
        return None

    terms = [t.term for t in gap.missing_terms[:MAX_LISTED_TERMS]]
    return Recommendation(
        feature="alignment",
        impact=abs(z),
        message=(
            f"Work top-seller vocabulary into the title and description "
            f"(alignment {features.alignment:.0%}): {', '.join(terms)}"
        ),
    )


DEFAULT_RULES: tuple[Rule, ...] = (
    title_length_rule,
    tag_count_rule,
    description_length_rule,
    price_outlier_rule,
    keyword_gap_rule,
)


def rank_recommendations(
    features: ListingFeatures,
    deviations: Mapping[str, float],
    exemplar_gap: ExemplarGap,
    max_count: int = 5,
    rules: Sequence[Rule] = DEFAULT_RULES,
    priority: Sequence[str] = FEATURE_PRIORITY,
) -> list[Recommendation]:
    """
    Run every rule and order the signals by impact.

    Ties in impact are broken by `priority` (earlier feature first).
    """
    signals = []
    for rule in rules:
        signal = rule(features, deviations, exemplar_gap)
        if signal is not None:
            signals.append(signal)

    order = {feature: i for i, feature in enumerate(priority)}
    signals.sort(key=lambda s: (-round(s.impact, 9), order.get(s.feature, len(order))))
    return signals[:max_count]


def build_recommendations(
    features: ListingFeatures,
    deviations: Mapping[str, float],
    exemplar_gap: ExemplarGap,
    max_count: int = 5,
    rules: Sequence[Rule] = DEFAULT_RULES,
    priority: Sequence[str] = FEATURE_PRIORITY,
) -> list[str]:
    """Ordered suggestion strings, most impactful first."""
    return [
        s.message
        for s in rank_recommendations(features, deviations, exemplar_gap, max_count, rules, priority)
    ]


def _unique(items: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out


def suggest_tags(
    listing: Listing,
    vocabulary: Optional[CategoryVocabulary],
    profile: Optional[ExemplarProfile] = None,
    limit: int = 10,
) -> list[str]:
    """Exemplar and category tags the listing does not carry yet."""
    current = {t.lower() for t in listing.tags}
    candidates = []
    if profile is not None:
        candidates.extend(t.term for t in profile.top_tags)
    if vocabulary is not None:
        candidates.extend(t.term for t in vocabulary.top_tags)
    return [t for t in _unique(candidates) if t not in current][:limit]


def suggest_keywords(
    listing: Listing,
    vocabulary: Optional[CategoryVocabulary],
    limit: int = 5,
    config: Optional[GraderConfig] = None,
) -> list[str]:
    """Common category terms missing from the title."""
    if vocabulary is None:
        return []

    config = config or get_config()
    tokens = tokenize(listing.title, config.ignore_stop_words, config.stop_words)
    present = set(tokens.unigrams) | set(tokens.bigrams)
    return [t.term for t in vocabulary.top_terms if t.term not in present][:limit]
