"""
Tests for the vocabulary builder.
"""
import pytest

from listing_optimizer.config import STOP_WORDS
from listing_optimizer.errors import InsufficientDataError, MissingVocabularyError
from listing_optimizer.pipeline.orchestrator import build_vocabulary
from listing_optimizer.pipeline.vocabulary import VocabularyBuilder, partition_by_category
from listing_optimizer.models import parse_listing


class TestVocabularyBuilder:
    """Tests for VocabularyBuilder."""

    def test_categories_and_sample_size(self, vocabulary):
        """Test that each category counts its own listings."""
        assert list(vocabulary.categories) == ["Fonts", "Scripts"]
        assert vocabulary.categories["Scripts"].sample_size == 5
        assert vocabulary.categories["Fonts"].sample_size == 3
        assert vocabulary.total_listings == 8
        assert vocabulary.invalid_count == 0

    def test_population_std(self, config):
        """Test title length std over two listings is the population std."""
        corpus = [
            {"title": "ab", "category": "Tiny"},
            {"title": "abcd", "category": "Tiny"},
        ]

        vocab = build_vocabulary(corpus, config=config).require("Tiny")

        assert vocab.title_length.mean == 3.0
        assert vocab.title_length.std == 1.0

    def test_invalid_items_skipped(self, raw_corpus, config):
        corpus = raw_corpus + [{"title": "", "category": "Scripts"}, "not a listing"]

        result = build_vocabulary(corpus, config=config)

        assert result.invalid_count == 2
        assert result.categories["Scripts"].sample_size == 5

    def test_description_stats_only_from_described(self, vocabulary):
        """Test that listings without a description do not count as zero."""
        scripts = vocabulary.categories["Scripts"]

        assert scripts.description_length.count == 2
        assert scripts.word_count.count == 2
        assert scripts.tag_count.count == 5

    def test_top_tags(self, vocabulary):
        tags = vocabulary.categories["Scripts"].top_tags

        assert [(t.term, t.count) for t in tags[:2]] == [("automation", 3), ("python", 3)]

    def test_top_terms_exclude_stop_words(self, vocabulary):
        for vocab in vocabulary.categories.values():
            for t in vocab.top_terms:
                assert not set(t.term.split()) & STOP_WORDS

    def test_global_vocabulary_pools_everything(self, vocabulary):
        assert vocabulary.global_vocabulary is not None
        assert vocabulary.global_vocabulary.sample_size == 8

    def test_expected_empty_category_skipped(self, raw_corpus, config):
        result = build_vocabulary(raw_corpus, config=config, categories=["Empty"])

        assert "Empty" not in result
        assert [s.category for s in result.skipped] == ["Empty"]

    def test_require_missing(self, vocabulary):
        with pytest.raises(MissingVocabularyError) as exc_info:
            vocabulary.require("Unknown")

        assert isinstance(exc_info.value, KeyError)
        assert str(exc_info.value) == "No vocabulary for category 'Unknown'"

    def test_build_category_empty_raises(self, config):
        with pytest.raises(InsufficientDataError):
            VocabularyBuilder(config).build_category("Empty", [])

    def test_empty_corpus(self, config):
        result = build_vocabulary([], config=config)

        assert result.categories == {}
        assert result.global_vocabulary is None

    def test_partition_sorted(self, raw_corpus):
        listings = [parse_listing(item) for item in reversed(raw_corpus)]

        groups = partition_by_category(listings)

        assert list(groups) == ["Fonts", "Scripts"]
