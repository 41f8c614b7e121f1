"""
Statistics utilities shared by the vocabulary builder, exemplar selector and grader.
"""
import math
from collections import Counter
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

import numpy as np

from ..models.vocabulary import FieldStats, TermFrequency


def _valid(values: Iterable[Optional[float]]) -> list[float]:
    """Keep finite numbers only."""
    return [
        float(v) for v in values
        if v is not None and not isinstance(v, bool) and math.isfinite(v)
    ]


def _population_std(arr: np.ndarray) -> float:
    """Population std, exactly 0.0 when all values are equal."""
    if np.ptp(arr) == 0:
        return 0.0
    return float(np.std(arr))


def mean_std(values: Iterable[Optional[float]]) -> tuple[Optional[float], Optional[float]]:
    """Mean and population standard deviation, (None, None) when empty."""
    x = _valid(values)
    if not x:
        return None, None
    arr = np.array(x)
    return float(np.mean(arr)), _population_std(arr)


def median(values: Iterable[Optional[float]]) -> Optional[float]:
    x = _valid(values)
    if not x:
        return None
    return float(np.median(np.array(x)))


def field_stats(values: Iterable[Optional[float]]) -> Optional[FieldStats]:
    """Full distribution summary, None when no listing had the field."""
    x = _valid(values)
    if not x:
        return None

    arr = np.array(x)
    return FieldStats(
        mean=float(np.mean(arr)),
        std=_population_std(arr),
        median=float(np.median(arr)),
        min=float(np.min(arr)),
        max=float(np.max(arr)),
        count=len(x),
    )


def zscore(value: Optional[float], mean: Optional[float], std: Optional[float]) -> float:
    """Standardized deviation; 0.0 for zero variance or missing inputs."""
    if value is None or mean is None or std is None or std == 0:
        return 0.0
    return (value - mean) / std


def zscores(values: Sequence[Optional[float]]) -> list[float]:
    """Z-score each value against the population of the non-missing ones."""
    mean, std = mean_std(values)
    return [zscore(v, mean, std) for v in values]


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def jaccard(a: Iterable, b: Iterable) -> float:
    """Set overlap in [0, 1]; 0.0 when both sets are empty."""
    set_a, set_b = set(a), set(b)
    union = set_a | set_b
    if not union:
        return 0.0
    return len(set_a & set_b) / len(union)


def days_since(timestamp: Optional[datetime], now: datetime) -> Optional[int]:
    """
    Whole days between `timestamp` and `now`.

    `now` is always passed in by the caller. Naive datetimes are taken as UTC.
    """
    if timestamp is None:
        return None
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return (now - timestamp).days


def top_frequencies(counts: Counter, k: int) -> list[TermFrequency]:
    """Top-k entries, most frequent first, ties broken alphabetically."""
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [TermFrequency(term=term, count=count) for term, count in ranked[:k] if count > 0]
