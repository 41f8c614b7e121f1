"""
Shared fixtures: a small marketplace corpus with two categories.
"""
import pytest

from listing_optimizer.config import GraderConfig, OpenAIConfig
from listing_optimizer.pipeline.orchestrator import build_exemplars, build_vocabulary


SCRIPTS = [
    {
        "id": "s1",
        "url": "https://market.example/p/s1",
        "title": "Python automation script bundle",
        "description": "Automation scripts for data cleanup and weekly reporting",
        "tags": ["python", "automation", "scripts"],
        "price": 10,
        "rating": 4.9,
        "review_count": 120,
        "favorite_count": 300,
        "published_at": "2024-01-01T00:00:00",
    },
    {
        "id": "s2",
        "url": "https://market.example/p/s2",
        "title": "Python web scraper script",
        "description": "Scrape product pages into clean CSV files",
        "tags": ["python", "scraper"],
        "price": 15,
        "rating": 4.5,
        "review_count": 40,
        "favorite_count": 80,
        "published_at": "2024-02-01T00:00:00",
    },
    {
        "id": "s3",
        "url": "https://market.example/p/s3",
        "title": "Excel automation macros",
        "tags": ["excel", "automation"],
        "price": 8,
        "rating": 4.0,
        "review_count": 10,
        "favorite_count": 20,
        "published_at": "2024-03-01T00:00:00",
    },
    {
        "id": "s4",
        "url": "https://market.example/p/s4",
        "title": "Bash backup script",
        "tags": ["bash", "backup"],
        "price": 5,
        "rating": 3.5,
        "review_count": 2,
        "favorite_count": 3,
        "published_at": "2024-04-01T00:00:00",
    },
    {
        "id": "s5",
        "url": "https://market.example/p/s5",
        "title": "Python automation toolkit",
        "tags": ["python", "automation"],
        "price": 12,
        "rating": 4.7,
        "review_count": 60,
        "favorite_count": 150,
        "published_at": "2024-05-01T00:00:00",
    },
]

FONTS = [
    {
        "id": "f1",
        "title": "Retro display font",
        "description": "A bold retro typeface for posters",
        "tags": ["font", "retro"],
        "price": 20,
        "rating": 4.8,
        "review_count": 30,
    },
    {
        "id": "f2",
        "title": "Handwritten script font",
        "tags": ["font", "handwritten"],
        "price": 18,
        "rating": 4.2,
        "review_count": 12,
    },
    {
        "id": "f3",
        "title": "Minimal sans serif family",
        "tags": ["font", "sans"],
        "price": 35,
        "rating": 4.4,
        "review_count": 8,
    },
]


@pytest.fixture
def raw_corpus() -> list[dict]:
    """Raw corpus items as the scraper hands them out."""
    return [dict(item, category="Scripts") for item in SCRIPTS] + [
        dict(item, category="Fonts") for item in FONTS
    ]


@pytest.fixture
def config() -> GraderConfig:
    """Config with AI disabled regardless of the environment."""
    return GraderConfig(openai=OpenAIConfig(api_key=""))


@pytest.fixture
def vocabulary(raw_corpus, config):
    return build_vocabulary(raw_corpus, config=config)


@pytest.fixture
def exemplars(raw_corpus, config):
    return build_exemplars(raw_corpus, top_n=3, config=config)


@pytest.fixture
def new_listing() -> dict:
    """A listing that is not part of the corpus."""
    return {
        "id": "n1",
        "title": "Data cleanup helper",
        "description": "Removes duplicate rows from spreadsheets",
        "tags": [],
        "price": 9,
        "category": "Scripts",
        "published_at": "2024-06-01T00:00:00",
    }
