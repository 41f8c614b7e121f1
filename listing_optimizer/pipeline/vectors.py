"""
Vector builder - sparse term-frequency vectors and cosine similarity.
"""
import math
from collections import Counter
from typing import AbstractSet, Iterable, Mapping, Optional

from ..config import STOP_WORDS
from .tokenizer import tokenize


def term_vector(
    text: Optional[str],
    ignore_stop_words: bool = True,
    stop_words: AbstractSet[str] = STOP_WORDS,
) -> dict[str, int]:
    """Count unigrams and bigrams of a text."""
    tokens = tokenize(text, ignore_stop_words, stop_words)
    return dict(Counter(tokens.unigrams + tokens.bigrams))


def add_vectors(vectors: Iterable[Mapping[str, int]]) -> dict[str, int]:
    """Sum term vectors key by key."""
    total: Counter = Counter()
    for vector in vectors:
        total.update(vector)
    return dict(total)


def cosine_similarity(a: Mapping[str, float], b: Mapping[str, float]) -> float:
    """
    Cosine similarity over the union of keys.

    Returns 0.0 when either vector has zero norm. Keys are visited in
    sorted order so the float sums do not depend on insertion order.
    """
    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for key in sorted(set(a) | set(b)):
        va = a.get(key, 0)
        vb = b.get(key, 0)
        dot += va * vb
        norm_a += va * va
        norm_b += vb * vb

    if not norm_a or not norm_b:
        return 0.0
    similarity = dot / math.sqrt(norm_a * norm_b)
    return max(0.0, min(1.0, similarity))
