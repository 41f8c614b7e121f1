"""
AI suggestion service - narrative rewrites grounded in the grading output.
"""
import json
import logging
from typing import Any, Optional

from ..models.exemplars import ExemplarProfile
from ..models.export import AISuggestions
from ..models.grading import GradeResult
from ..models.listing import Listing
from ..models.vocabulary import CategoryVocabulary
from .llm_client import LLMClient


logger = logging.getLogger(__name__)


SUGGESTION_SYSTEM_PROMPT = """You are an expert marketplace listing copywriter.
You receive a listing, its automated grade, and the vocabulary of the best-selling
listings in the same category. Rewrite the listing so it addresses the grade's
recommendations while staying truthful to the original product.

Rules:
- Never invent features that the original listing does not mention.
- Prefer terms from the exemplar vocabulary when they describe the product.
- Keep titles close to the category's typical title length.

Return ONLY valid JSON with this shape:
{
    "titles": [{"text": "...", "rationale": "..."}],
    "tags": [{"tag": "...", "rationale": "..."}],
    "short_description": "...",
    "long_description": "...",
    "summary": "..."
}"""


SUGGESTION_USER_PROMPT_TEMPLATE = """Category: {category}

Listing:
{listing}

Grade: {score}/100 ({letter})
Breakdown: {breakdown}
Recommendations:
{recommendations}

Category norms: {norms}
Exemplar titles:
{exemplar_titles}
Exemplar terms the listing is missing: {missing_terms}
Exemplar tags the listing is missing: {missing_tags}

Suggest up to 3 titles, up to {max_tags} tags, a short description and a long description."""


class AISuggestionService:
    """
    Builds the prompt from a listing and its grade and asks the LLM for rewrites.
    """

    def __init__(self, llm_client: Optional[Any] = None, max_tags: int = 10):
        """
        Args:
            llm_client: Object with `is_available()` and `call_with_schema()`;
                an LLMClient is created when omitted
        """
        self.llm_client = llm_client if llm_client is not None else LLMClient()
        self.max_tags = max_tags

    def is_available(self) -> bool:
        return self.llm_client.is_available()

    def suggest(
        self,
        listing: Listing,
        grade: GradeResult,
        vocabulary: Optional[CategoryVocabulary] = None,
        profile: Optional[ExemplarProfile] = None,
    ) -> AISuggestions:
        """
        Ask the LLM for listing rewrites.

        Raises:
            RuntimeError: if the client is not configured
        """
        user_prompt = self.build_prompt(listing, grade, vocabulary, profile)
        logger.info(f"Requesting AI suggestions for '{listing.title}'")
        return self.llm_client.call_with_schema(
            system_prompt=SUGGESTION_SYSTEM_PROMPT,
            user_prompt=user_prompt,
            response_model=AISuggestions,
        )

    def build_prompt(
        self,
        listing: Listing,
        grade: GradeResult,
        vocabulary: Optional[CategoryVocabulary] = None,
        profile: Optional[ExemplarProfile] = None,
    ) -> str:
        """Fill the user prompt with the listing and its grading context."""
        listing_json = json.dumps(
            {
                "title": listing.title,
                "short_description": listing.short_description,
                "long_description": listing.long_description,
                "tags": list(listing.tags),
                "price": listing.price,
            },
            indent=2,
        )

        norms = {}
        if vocabulary is not None:
            for name in ("title_length", "word_count", "tag_count", "price"):
                stats = getattr(vocabulary, name)
                if stats is not None:
                    norms[name] = round(stats.mean, 1)

        exemplar_titles = "\n".join(f"- {e.title}" for e in (profile.exemplars[:5] if profile else []))

        return SUGGESTION_USER_PROMPT_TEMPLATE.format(
            category=listing.category,
            listing=listing_json,
            score=grade.overall_score,
            letter=grade.letter,
            breakdown=json.dumps(grade.breakdown),
            recommendations="\n".join(f"- {r}" for r in grade.recommendations) or "- none",
            norms=json.dumps(norms),
            exemplar_titles=exemplar_titles or "- none",
            missing_terms=", ".join(t.term for t in grade.exemplar_gap.missing_terms) or "none",
            missing_tags=", ".join(grade.exemplar_gap.missing_tags[: self.max_tags]) or "none",
            max_tags=self.max_tags,
        )
