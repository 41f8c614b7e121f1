"""
Grading engine - deterministic listing grades with a transparent breakdown.
"""
import logging
import math
from typing import Any, Mapping, Optional, Union

from ..config import (
    ALIGNMENT_DEVIATION_SCALE,
    OPTIMAL_BAND_Z,
    PENALTY_WIDTH,
    GraderConfig,
    get_config,
)
from ..errors import MissingVocabularyError
from ..models.exemplars import ExemplarProfile, ExemplarResult
from ..models.grading import ExemplarGap, GradeResult, ListingFeatures
from ..models.listing import Listing, parse_listing
from ..models.vocabulary import (
    DEFAULT_VOCABULARY,
    CategoryVocabulary,
    FieldStats,
    TermFrequency,
    VocabularyResult,
)
from .recommendations import rank_recommendations
from .stats import clamp, zscore
from .vectors import cosine_similarity, term_vector


logger = logging.getLogger(__name__)

VocabularyLike = Union[VocabularyResult, Mapping[str, CategoryVocabulary], None]
ExemplarsLike = Union[ExemplarResult, Mapping[str, ExemplarProfile], None]


def proximity_score(z: float) -> float:
    """
    Map a z-score to a 0-100 sub-score.

    Full marks inside the optimal band, then a Gaussian fall-off. Symmetric,
    so too short and too long are penalized alike.
    """
    excess = abs(z) - OPTIMAL_BAND_Z
    if excess <= 0:
        return 100.0
    score = 100.0 * math.exp(-(excess ** 2) / (2 * PENALTY_WIDTH ** 2))
    return clamp(score, 0.0, 100.0)


def letter_grade(score: float, thresholds: tuple[tuple[str, float], ...]) -> str:
    """Letter for a 0-100 score; anything below the last cutoff is F."""
    for letter, cutoff in thresholds:
        if score >= cutoff:
            return letter
    return "F"


def _as_vocabulary_result(vocabulary: VocabularyLike) -> VocabularyResult:
    if isinstance(vocabulary, VocabularyResult):
        return vocabulary
    return VocabularyResult(categories=dict(vocabulary or {}))


def _as_profiles(exemplars: ExemplarsLike) -> Mapping[str, ExemplarProfile]:
    if isinstance(exemplars, ExemplarResult):
        return exemplars.profiles
    return exemplars or {}


class GradingEngine:
    """
    Grades a listing against its category vocabulary and exemplar profile.
    All sub-scores are 0-100, higher is better.
    """

    def __init__(self, config: Optional[GraderConfig] = None):
        self.config = config or get_config()

    def grade(
        self,
        listing: Union[Listing, Mapping[str, Any]],
        vocabulary: VocabularyLike,
        exemplars: ExemplarsLike = None,
    ) -> GradeResult:
        """
        Calculate the grade of a listing.

        Args:
            listing: The listing to grade (model or raw mapping)
            vocabulary: Category vocabularies from the vocabulary builder
            exemplars: Exemplar profiles; without one, alignment is omitted

        Returns:
            GradeResult with breakdown and recommendations

        Raises:
            ListingValidationError: if the listing is malformed
        """
        listing = parse_listing(listing)
        warnings: list[str] = []

        vocab, fallback_source = self._resolve_vocabulary(
            _as_vocabulary_result(vocabulary), listing.category
        )
        if fallback_source:
            warnings.append(
                f"No vocabulary for category '{listing.category}'; "
                f"graded against the {fallback_source} vocabulary"
            )

        profile = _as_profiles(exemplars).get(listing.category)
        features = self.extract_features(listing)

        breakdown, deviations = self._score_numeric(features, vocab)

        alignment = None
        if profile is not None and profile.term_vector:
            alignment = cosine_similarity(features.term_vector, profile.term_vector)
            breakdown["alignment"] = alignment * 100
            deviations["alignment"] = (alignment - 1) * ALIGNMENT_DEVIATION_SCALE
        elif profile is None:
            warnings.append(f"No exemplar profile for '{listing.category}'; alignment omitted")

        overall, weights_used = self.combine(breakdown)
        letter = letter_grade(overall, self.config.grade_thresholds)

        features = self._with_targets(features, vocab, alignment)
        gap = self.exemplar_gap(features, profile, vocab)
        signals = rank_recommendations(
            features,
            deviations,
            gap,
            max_count=self.config.max_recommendations,
            priority=self.config.feature_priority,
        )

        if self.config.debug:
            logger.info(
                f"Breakdown for '{listing.title}': "
                + ", ".join(f"{k}={v:.1f} (z={deviations[k]:+.2f})" for k, v in breakdown.items())
            )
        logger.debug(f"Graded '{listing.title}': {overall} ({letter})")

        return GradeResult(
            overall_score=overall,
            letter=letter,
            breakdown={k: round(v, 1) for k, v in breakdown.items()},
            deviations={k: round(v, 3) for k, v in deviations.items()},
            weights_used={k: round(v, 4) for k, v in weights_used.items()},
            recommendations=[s.message for s in signals],
            signals=signals,
            alignment_score=round(alignment, 4) if alignment is not None else None,
            exemplar_gap=gap,
            category=listing.category,
            used_fallback=fallback_source is not None,
            fallback_source=fallback_source,
            warnings=warnings,
        )

    def extract_features(self, listing: Listing) -> ListingFeatures:
        """Observable features of a listing."""
        return ListingFeatures(
            title_length=len(listing.title),
            description_length=len(listing.description),
            word_count=listing.word_count,
            tag_count=len(listing.tags),
            price=listing.price,
            tags=tuple(t.lower() for t in listing.tags),
            term_vector=term_vector(
                listing.text,
                self.config.ignore_stop_words,
                self.config.stop_words,
            ),
        )

    def combine(self, breakdown: Mapping[str, float]) -> tuple[float, dict[str, float]]:
        """
        Weighted mean of the sub-scores present.

        Weights of missing sub-scores are dropped and the rest renormalized.
        """
        weights = self.config.weights.model_dump()
        present = {k: weights.get(k, 0.0) for k in breakdown}
        total = sum(present.values())
        if total <= 0:
            logger.warning("No weighted sub-scores available; overall score is 0")
            return 0.0, {}

        normalized = {k: w / total for k, w in present.items()}
        overall = sum(breakdown[k] * w for k, w in normalized.items())
        return round(clamp(overall, 0.0, 100.0), 1), normalized

    def exemplar_gap(
        self,
        features: ListingFeatures,
        profile: Optional[ExemplarProfile],
        vocab: Optional[CategoryVocabulary] = None,
    ) -> ExemplarGap:
        """
        Exemplar terms and tags the listing lacks, most common first.

        Without a profile, the category's common tags stand in for the
        exemplar tags and no terms are reported.
        """
        current_tags = set(features.tags)
        if profile is None:
            category_tags = vocab.top_tags if vocab is not None else []
            return ExemplarGap(
                missing_tags=[t.term for t in category_tags if t.term not in current_tags],
            )

        missing = sorted(
            ((term, count) for term, count in profile.term_vector.items()
             if term not in features.term_vector),
            key=lambda item: (-item[1], item[0]),
        )
        return ExemplarGap(
            missing_terms=[
                TermFrequency(term=term, count=count)
                for term, count in missing[: self.config.max_gap_terms]
            ],
            missing_tags=[t.term for t in profile.top_tags if t.term not in current_tags],
        )

    def _resolve_vocabulary(
        self,
        vocabulary: VocabularyResult,
        category: str,
    ) -> tuple[CategoryVocabulary, Optional[str]]:
        """Category vocabulary, or a fallback and the fallback's name."""
        try:
            return vocabulary.require(category), None
        except MissingVocabularyError as e:
            if vocabulary.global_vocabulary is not None:
                logger.warning(f"{e}; using the global vocabulary")
                return vocabulary.global_vocabulary, "global"
            logger.warning(f"{e}; using the default vocabulary")
            return DEFAULT_VOCABULARY, "default"

    def _score_numeric(
        self,
        features: ListingFeatures,
        vocab: CategoryVocabulary,
    ) -> tuple[dict[str, float], dict[str, float]]:
        """Sub-scores and z-scores for the numeric features."""
        breakdown: dict[str, float] = {}
        deviations: dict[str, float] = {}

        def score(value: Optional[float], stats: Optional[FieldStats]) -> Optional[float]:
            if value is None or stats is None:
                return None
            return zscore(value, stats.mean, stats.std)

        title_z = score(features.title_length, vocab.title_length)
        if title_z is not None:
            breakdown["title"] = proximity_score(title_z)
            deviations["title"] = title_z

        # Description blends character length and word count
        desc_zs = [
            z for z in (
                score(features.description_length, vocab.description_length),
                score(features.word_count, vocab.word_count),
            )
            if z is not None
        ]
        if desc_zs:
            breakdown["description"] = sum(proximity_score(z) for z in desc_zs) / len(desc_zs)
            deviations["description"] = max(desc_zs, key=abs)

        tags_z = score(features.tag_count, vocab.tag_count)
        if tags_z is not None:
            breakdown["tags"] = proximity_score(tags_z)
            deviations["tags"] = tags_z

        price_z = score(features.price, vocab.price)
        if price_z is not None:
            breakdown["price"] = proximity_score(price_z)
            deviations["price"] = price_z

        return breakdown, deviations

    def _with_targets(
        self,
        features: ListingFeatures,
        vocab: CategoryVocabulary,
        alignment: Optional[float],
    ) -> ListingFeatures:
        """Attach the category means the recommendations refer to."""
        if vocab.word_count is not None:
            description_target, unit = vocab.word_count.mean, "words"
        elif vocab.description_length is not None:
            description_target, unit = vocab.description_length.mean, "characters"
        else:
            description_target, unit = None, "words"

        return features.model_copy(update={
            "title_target": vocab.title_length.mean if vocab.title_length else None,
            "description_target": description_target,
            "description_unit": unit,
            "tag_target": vocab.tag_count.mean if vocab.tag_count else None,
            "price_target": vocab.price.mean if vocab.price else None,
            "alignment": alignment,
        })
