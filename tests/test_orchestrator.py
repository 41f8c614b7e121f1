"""
Tests for the composite optimize operation and the AI suggestion layer.
The LLM is replaced by a stub object; no network access.
"""
from datetime import datetime

import pytest

from listing_optimizer import optimize_asset
from listing_optimizer.ai.llm_client import LLMClient
from listing_optimizer.ai.suggestions import AISuggestionService
from listing_optimizer.config import OpenAIConfig
from listing_optimizer.models import AISuggestions, parse_listing
from listing_optimizer.pipeline.grading import GradingEngine


class StubLLMClient:
    """Records prompts and returns a canned response."""

    def __init__(self, response=None, error=None, available=True):
        self.response = response
        self.error = error
        self.available = available
        self.prompts = []

    def is_available(self) -> bool:
        return self.available

    def call_with_schema(self, system_prompt, user_prompt, response_model):
        self.prompts.append(user_prompt)
        if self.error is not None:
            raise self.error
        return response_model.model_validate(self.response)


AI_RESPONSE = {
    "titles": [{"text": "Python data cleanup script for spreadsheets", "rationale": "Adds category terms"}],
    "tags": [{"tag": "python"}, {"tag": "automation"}],
    "short_description": "Clean spreadsheets in one click.",
    "summary": "Add tags and category vocabulary.",
}


class TestOptimizeAsset:
    """Tests for optimize_asset function."""

    def test_exemplar_based(self, new_listing, vocabulary, exemplars, config):
        result = optimize_asset(new_listing, vocabulary, exemplars, config=config)

        assert result.metadata.coaching_method == "exemplar-based"
        assert result.metadata.exemplar_count == 3
        assert result.metadata.vocabulary_categories == 2
        assert result.metadata.ai_used is False
        assert result.ai_suggestions is None
        assert "python" in result.suggested_tags

    def test_similarity_based(self, new_listing, vocabulary, raw_corpus, config):
        result = optimize_asset(new_listing, vocabulary, corpus=raw_corpus, config=config)

        assert result.metadata.coaching_method == "similarity-based"
        assert result.metadata.similar_listings_found == len(result.similar_listings) > 0

    def test_heuristic_only(self, new_listing, vocabulary, config):
        result = optimize_asset(new_listing, vocabulary, config=config)

        assert result.metadata.coaching_method == "heuristic-only"
        assert result.similar_listings == []

    def test_nearest_exemplars(self, new_listing, vocabulary, exemplars, config):
        result = optimize_asset(new_listing, vocabulary, exemplars, config=config)

        assert result.nearest_exemplars
        assert {n.identifier for n in result.nearest_exemplars} <= {"s1", "s5", "s2"}

    def test_no_nearest_exemplars_without_profile(self, new_listing, vocabulary, config):
        result = optimize_asset(new_listing, vocabulary, config=config)

        assert result.nearest_exemplars == []

    def test_grade_matches_grading_engine(self, new_listing, vocabulary, exemplars, config):
        """Test that optimizing does not change the grade itself."""
        result = optimize_asset(new_listing, vocabulary, exemplars, config=config)
        grade = GradingEngine(config).grade(new_listing, vocabulary, exemplars)

        assert result.grade == grade

    def test_listing_age(self, new_listing, vocabulary, config):
        result = optimize_asset(new_listing, vocabulary, config=config, now=datetime(2024, 6, 11))

        assert result.metadata.listing_age_days == 10

    def test_listing_age_without_now(self, new_listing, vocabulary, config):
        result = optimize_asset(new_listing, vocabulary, config=config)

        assert result.metadata.listing_age_days is None

    def test_mapping_config(self, new_listing, vocabulary, exemplars):
        result = optimize_asset(
            new_listing,
            vocabulary,
            exemplars,
            config={"ignoreStopWords": True, "apiKey": ""},
        )

        assert result.grade.category == "Scripts"

    def test_minimal_export(self, new_listing, vocabulary, exemplars, config):
        export = optimize_asset(new_listing, vocabulary, exemplars, config=config).to_minimal_export()

        assert set(export) == {
            "score", "letter", "breakdown", "recommendations",
            "suggested_tags", "used_fallback", "ai_used",
        }


class TestOptimizeWithAI:
    """Tests for the AI step of optimize_asset."""

    def test_ai_suggestions(self, new_listing, vocabulary, exemplars, config):
        client = StubLLMClient(response=AI_RESPONSE)

        result = optimize_asset(
            new_listing, vocabulary, exemplars, use_ai=True, config=config, llm_client=client
        )

        assert result.metadata.ai_used is True
        assert result.ai_suggestions.titles[0].text.startswith("Python data cleanup")
        assert len(client.prompts) == 1
        assert "Data cleanup helper" in client.prompts[0]

    def test_ai_failure_is_warning(self, new_listing, vocabulary, exemplars, config):
        """Test that a failing LLM still returns the deterministic result."""
        client = StubLLMClient(error=RuntimeError("LLM client not configured"))

        result = optimize_asset(
            new_listing, vocabulary, exemplars, use_ai=True, config=config, llm_client=client
        )

        assert result.metadata.ai_used is False
        assert result.ai_suggestions is None
        assert any("AI suggestions failed" in w for w in result.metadata.warnings)
        assert result.grade.overall_score >= 0

    def test_ai_invalid_response_is_warning(self, new_listing, vocabulary, config):
        client = StubLLMClient(response={"titles": "not a list"})

        result = optimize_asset(new_listing, vocabulary, use_ai=True, config=config, llm_client=client)

        assert result.metadata.ai_used is False
        assert any("AI suggestions failed" in w for w in result.metadata.warnings)

    def test_ai_unavailable_client(self, new_listing, vocabulary, config):
        client = StubLLMClient(available=False)

        result = optimize_asset(new_listing, vocabulary, use_ai=True, config=config, llm_client=client)

        assert client.prompts == []
        assert any("unavailable" in w for w in result.metadata.warnings)

    def test_ai_without_key(self, new_listing, vocabulary, config):
        result = optimize_asset(new_listing, vocabulary, use_ai=True, config=config)

        assert result.metadata.ai_used is False
        assert any("no API key" in w for w in result.metadata.warnings)

    def test_ai_not_called_when_disabled(self, new_listing, vocabulary, config):
        client = StubLLMClient(response=AI_RESPONSE)

        optimize_asset(new_listing, vocabulary, config=config, llm_client=client)

        assert client.prompts == []


class TestAISuggestionService:
    """Tests for prompt building and the LLM client wiring."""

    def test_prompt_contains_grading_context(self, new_listing, vocabulary, exemplars, config):
        listing = parse_listing(new_listing)
        grade = GradingEngine(config).grade(listing, vocabulary, exemplars)
        service = AISuggestionService(StubLLMClient(), max_tags=4)

        prompt = service.build_prompt(
            listing, grade, vocabulary.categories["Scripts"], exemplars.get("Scripts")
        )

        assert "Category: Scripts" in prompt
        assert f"{grade.overall_score}/100 ({grade.letter})" in prompt
        assert "- Python automation script bundle" in prompt
        assert "up to 4 tags" in prompt
        for recommendation in grade.recommendations:
            assert recommendation in prompt

    def test_client_without_key_unavailable(self):
        client = LLMClient(OpenAIConfig(api_key=""))

        assert client.is_available() is False
        with pytest.raises(RuntimeError):
            client.call_with_schema("system", "user", AISuggestions)

    def test_client_parses_json(self, monkeypatch):
        client = LLMClient(OpenAIConfig(api_key="test-key"))
        monkeypatch.setattr(client, "complete_json", lambda system, user: '{"summary": "Looks good"}')

        result = client.call_with_schema("system", "user", AISuggestions)

        assert result.summary == "Looks good"
        assert result.titles == []
