"""
Listing model - the immutable input record for vocabulary building and grading.
"""
import re
from datetime import datetime
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import ListingValidationError


MARKUP_RE = re.compile(r"<[^>]*>")


class Listing(BaseModel):
    """A marketplace listing as received from the scraper or the web layer."""
    model_config = ConfigDict(frozen=True)

    listing_id: Optional[str] = None
    url: Optional[str] = None
    title: str
    short_description: Optional[str] = None
    long_description: Optional[str] = None
    tags: tuple[str, ...] = Field(default_factory=tuple)
    category: str
    price: Optional[float] = Field(default=None, ge=0)

    # Engagement signals
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    review_count: Optional[int] = Field(default=None, ge=0)
    favorite_count: Optional[int] = Field(default=None, ge=0)
    published_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("listing_id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Optional[str]:
        """Scrapers hand out numeric ids."""
        if v is None:
            return None
        return str(v)

    @field_validator("title", "category")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("tags", mode="before")
    @classmethod
    def clean_tags(cls, v: Any) -> tuple[str, ...]:
        """Drop empty tags, keep display order."""
        if v is None:
            return ()
        if isinstance(v, str):
            v = [v]
        return tuple(str(t).strip() for t in v if t is not None and str(t).strip())

    @field_validator("price", mode="before")
    @classmethod
    def parse_price(cls, v: Any) -> Optional[float]:
        """Parse price from various formats."""
        if v is None:
            return None
        if isinstance(v, bool):
            raise ValueError("price must be a number")
        if isinstance(v, (int, float)):
            return float(v)
        if isinstance(v, str):
            # "$19.99", "19,99 EUR", "Free"
            cleaned = v.strip().lower()
            if cleaned in ("", "free"):
                return 0.0
            cleaned = re.sub(r"[^0-9.,\-]", "", cleaned).replace(",", ".")
            if cleaned.count(".") > 1:
                head, _, tail = cleaned.rpartition(".")
                cleaned = head.replace(".", "") + "." + tail
            try:
                return float(cleaned)
            except ValueError:
                raise ValueError(f"unparseable price {v!r}") from None
        if isinstance(v, dict):
            return cls.parse_price(v.get("value", v.get("amount")))
        raise ValueError(f"unsupported price type {type(v).__name__}")

    @property
    def identity(self) -> str:
        """Stable identifier used for tie-breaks and self-match checks."""
        return self.listing_id or self.url or self.title

    @property
    def description(self) -> str:
        """Long description when present, else the short one."""
        return self.long_description or self.short_description or ""

    @property
    def word_count(self) -> int:
        return len(MARKUP_RE.sub(" ", self.description).split())

    @property
    def last_activity(self) -> Optional[datetime]:
        return self.updated_at or self.published_at

    @property
    def text(self) -> str:
        """Combined text used for term vectors."""
        return " ".join([self.title, self.description, " ".join(self.tags)])


def parse_listing(raw: Any) -> Listing:
    """
    Convert a raw mapping into a Listing.

    Raises:
        ListingValidationError: if required fields are missing or malformed
    """
    if isinstance(raw, Listing):
        return raw
    if not isinstance(raw, Mapping):
        raise ListingValidationError(f"Expected a mapping, got {type(raw).__name__}")

    data = dict(raw)
    # Field names used by the scraper output
    aliases = {
        "id": "listing_id",
        "reviews_count": "review_count",
        "favorites": "favorite_count",
        "last_update": "updated_at",
        "description": "long_description",
    }
    for source, target in aliases.items():
        if source in data and target not in data:
            data[target] = data.pop(source)

    try:
        return Listing.model_validate(data)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise ListingValidationError(
            f"Invalid listing ({fields})",
            errors=e.errors(include_url=False),
        ) from e
