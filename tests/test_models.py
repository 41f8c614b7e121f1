"""
Tests for Pydantic models and configuration.
"""
import pytest
from pydantic import ValidationError

from listing_optimizer.config import GraderConfig, get_config, resolve_config
from listing_optimizer.errors import ListingValidationError, OptimizerError
from listing_optimizer.models import Listing, parse_listing


class TestListing:
    """Tests for Listing model and parse_listing."""

    def test_scraper_aliases(self):
        listing = parse_listing({
            "id": 42,
            "title": "  Retro display font ",
            "category": "Fonts",
            "description": "A bold retro typeface",
            "reviews_count": 3,
            "favorites": 7,
            "last_update": "2024-05-01T12:00:00",
        })

        assert listing.listing_id == "42"
        assert listing.title == "Retro display font"
        assert listing.long_description == "A bold retro typeface"
        assert listing.review_count == 3
        assert listing.favorite_count == 7
        assert listing.last_activity.month == 5

    @pytest.mark.parametrize("raw,expected", [
        (19, 19.0),
        ("$19.99", 19.99),
        ("19,99 EUR", 19.99),
        ("1.299,00", 1299.0),
        ("Free", 0.0),
        ({"value": 12, "currency": "USD"}, 12.0),
        ({"amount": "7.50"}, 7.5),
        (None, None),
    ])
    def test_price_formats(self, raw, expected):
        listing = parse_listing({"title": "Font", "category": "Fonts", "price": raw})

        assert listing.price == expected

    @pytest.mark.parametrize("price", [True, "n/a", -5, [1]])
    def test_invalid_price(self, price):
        with pytest.raises(ListingValidationError):
            parse_listing({"title": "Font", "category": "Fonts", "price": price})

    def test_missing_required_fields(self):
        with pytest.raises(ListingValidationError) as exc_info:
            parse_listing({"title": "Font"})

        assert isinstance(exc_info.value, OptimizerError)
        assert isinstance(exc_info.value, ValueError)
        assert exc_info.value.errors[0]["loc"] == ("category",)

    def test_blank_title_rejected(self):
        with pytest.raises(ListingValidationError):
            parse_listing({"title": "   ", "category": "Fonts"})

    def test_rating_out_of_range(self):
        with pytest.raises(ListingValidationError):
            parse_listing({"title": "Font", "category": "Fonts", "rating": 6})

    def test_not_a_mapping(self):
        with pytest.raises(ListingValidationError):
            parse_listing(["Font", "Fonts"])

    def test_tags_cleaned(self):
        listing = parse_listing({"title": "Font", "category": "Fonts", "tags": ["serif", " ", None, " bold "]})

        assert listing.tags == ("serif", "bold")

    def test_word_count_ignores_markup(self):
        listing = Listing(title="Font", category="Fonts", long_description="<p>Hello <b>world</b></p>")

        assert listing.word_count == 2

    def test_description_prefers_long(self):
        listing = Listing(title="Font", category="Fonts", short_description="Short", long_description="Long")

        assert listing.description == "Long"

    def test_identity_fallbacks(self):
        assert Listing(title="Font", category="Fonts", listing_id="1").identity == "1"
        assert Listing(title="Font", category="Fonts", url="https://x.com/1").identity == "https://x.com/1"
        assert Listing(title="Font", category="Fonts").identity == "Font"

    def test_frozen(self):
        listing = Listing(title="Font", category="Fonts")

        with pytest.raises(ValidationError):
            listing.title = "Other"


class TestGraderConfig:
    """Tests for configuration handling."""

    def test_defaults(self):
        config = GraderConfig()

        assert config.weights.title == 0.25
        assert config.ignore_stop_words is True
        assert config.max_recommendations == 5

    def test_from_options_camel_case(self):
        config = GraderConfig.from_options({
            "ignoreStopWords": False,
            "apiKey": "sk-test",
            "model": "gpt-4o",
            "debug": True,
        })

        assert config.ignore_stop_words is False
        assert config.openai.api_key == "sk-test"
        assert config.openai.model == "gpt-4o"
        assert config.debug is True
        assert config.has_ai() is True

    def test_from_options_snake_case(self):
        config = GraderConfig.from_options({"ignore_stop_words": False, "weights": {"title": 0.5}})

        assert config.ignore_stop_words is False
        assert config.weights.title == 0.5
        assert config.weights.tags == 0.2

    def test_from_options_empty(self):
        assert GraderConfig.from_options(None) == GraderConfig()

    def test_thresholds_must_descend(self):
        with pytest.raises(ValidationError):
            GraderConfig(grade_thresholds=(("A", 80.0), ("B", 90.0)))

    def test_negative_weight_rejected(self):
        with pytest.raises(ValidationError):
            GraderConfig.from_options({"weights": {"price": -1}})

    def test_resolve_config(self):
        config = GraderConfig(debug=True)

        assert resolve_config(None) is get_config()
        assert resolve_config(config) is config
        assert resolve_config({"debug": True}).debug is True
