"""
Tokenizer - normalize raw listing text into unigrams and bigrams.
"""
import re
from typing import AbstractSet, Optional

from pydantic import BaseModel, Field

from ..config import STOP_WORDS


MARKUP_RE = re.compile(r"<[^>]+>")
NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]+")


class Tokens(BaseModel):
    """Tokenizer output."""
    unigrams: list[str] = Field(default_factory=list)
    bigrams: list[str] = Field(default_factory=list)


def split_words(text: Optional[str]) -> list[str]:
    """Lowercase, strip markup and punctuation, split on whitespace."""
    if not text:
        return []
    text = MARKUP_RE.sub(" ", text.lower())
    text = NON_ALNUM_RE.sub(" ", text)
    return text.split()


def tokenize(
    text: Optional[str],
    ignore_stop_words: bool = True,
    stop_words: AbstractSet[str] = STOP_WORDS,
) -> Tokens:
    """
    Tokenize text into unigrams and bigrams.

    Stop words are removed before bigrams are built, and a removed word
    breaks the sequence: "tools for artists" yields no "tools artists".

    Args:
        text: Raw text, may contain HTML
        ignore_stop_words: Drop words in `stop_words`
        stop_words: Stop-word table to use

    Returns:
        Tokens with unigrams and bigrams in text order
    """
    words = split_words(text)
    if not ignore_stop_words:
        bigrams = [f"{a} {b}" for a, b in zip(words, words[1:])]
        return Tokens(unigrams=words, bigrams=bigrams)

    unigrams: list[str] = []
    bigrams: list[str] = []
    previous: Optional[str] = None
    for word in words:
        if word in stop_words:
            previous = None
            continue
        unigrams.append(word)
        if previous is not None:
            bigrams.append(f"{previous} {word}")
        previous = word

    return Tokens(unigrams=unigrams, bigrams=bigrams)
