"""Pipeline modules for vocabulary building, exemplar selection and grading."""

from .tokenizer import tokenize
from .vectors import term_vector, cosine_similarity
from .vocabulary import VocabularyBuilder
from .exemplars import ExemplarSelector, exemplar_stats
from .grading import GradingEngine
from .recommendations import build_recommendations
from .similarity import find_nearest_exemplars, find_similar_listings
from .orchestrator import build_vocabulary, build_exemplars, grade_asset, optimize_asset

__all__ = [
    "tokenize",
    "term_vector",
    "cosine_similarity",
    "VocabularyBuilder",
    "ExemplarSelector",
    "exemplar_stats",
    "GradingEngine",
    "build_recommendations",
    "find_similar_listings",
    "find_nearest_exemplars",
    "build_vocabulary",
    "build_exemplars",
    "grade_asset",
    "optimize_asset",
]
