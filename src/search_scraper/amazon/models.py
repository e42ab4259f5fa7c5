"""Amazon search data models.

``SearchRequest`` is built once per invocation and never mutated.
``ProductRecord`` instances are produced by the extractor and are immutable.
``PageScrapeState`` is the only mutable structure and lives for the duration
of a single pagination loop.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..base import ValidationError
from .regions import RegionConfig

DEFAULT_RESULT_LIMIT = 10


class SortOrder(Enum):
    """Result ordering, valued with the storefront's ``s`` parameter."""

    FEATURED = "featured"
    PRICE_ASC = "price-asc-rank"
    PRICE_DESC = "price-desc-rank"
    RATING = "review-rank"
    NEWEST = "date-desc-rank"

    @classmethod
    def parse(cls, value: "str | SortOrder | None") -> "SortOrder":
        """Parse a wire value or short alias; empty means featured."""
        if isinstance(value, SortOrder):
            return value
        if not value:
            return cls.FEATURED

        normalized = value.strip().lower()
        aliases = {
            "price-asc": cls.PRICE_ASC,
            "price-desc": cls.PRICE_DESC,
            "rating": cls.RATING,
            "newest": cls.NEWEST,
        }
        if normalized in aliases:
            return aliases[normalized]
        try:
            return cls(normalized)
        except ValueError:
            valid = ", ".join(order.value for order in cls)
            raise ValidationError(
                [f"sort_order must be one of: {valid}"]
            ) from None


@dataclass(frozen=True)
class SearchRequest:
    """One product search against a single region."""

    query_text: str
    region: RegionConfig
    price_min: float | None = None
    price_max: float | None = None
    result_limit: int = DEFAULT_RESULT_LIMIT
    sort_order: SortOrder = SortOrder.FEATURED

    def __post_init__(self):
        errors = self.validate()
        if errors:
            raise ValidationError(errors)

    def validate(self) -> list[str]:
        """Validate search parameters and return list of errors."""
        errors = []

        if not self.query_text or not self.query_text.strip():
            errors.append("Query must not be empty")

        if self.price_min is not None and self.price_min < 0:
            errors.append("Minimum price cannot be negative")

        if self.price_max is not None and self.price_max < 0:
            errors.append("Maximum price cannot be negative")

        for label, price in (("Minimum", self.price_min), ("Maximum", self.price_max)):
            if price is not None and not math.isfinite(price):
                errors.append(f"{label} price must be a finite number")

        if (
            self.price_min is not None
            and self.price_max is not None
            and self.price_min > self.price_max
        ):
            errors.append("Minimum price cannot be greater than maximum price")

        if (
            isinstance(self.result_limit, bool)
            or not isinstance(self.result_limit, int)
            or self.result_limit < 1
        ):
            errors.append("Result limit must be a positive integer")

        if not isinstance(self.sort_order, SortOrder):
            errors.append("sort_order must be a SortOrder")

        return errors


@dataclass(frozen=True)
class ProductRecord:
    """A single product extracted from a results page."""

    id: str
    title: str
    description: str
    price: float
    image_url: str
    link_url: str
    currency_code: str
    is_prime_eligible: bool = False
    rating: float | None = None
    review_count: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "price": self.price,
            "imageUrl": self.image_url,
            "rating": self.rating,
            "reviewCount": self.review_count,
            "isPrime": self.is_prime_eligible,
            "url": self.link_url,
            "currency": self.currency_code,
        }


@dataclass
class PageScrapeState:
    """Mutable pagination state owned by a single extractor run."""

    current_page_url: str
    accumulated_records: list[ProductRecord] = field(default_factory=list)
    pages_visited: int = 0

    @property
    def accumulated_count(self) -> int:
        return len(self.accumulated_records)
