"""Platform-agnostic result models for the search scraper.

The outcome of a search is a discriminated union: either a ``SearchSuccess``
holding the ordered product records, or a ``SearchFailure`` holding a
human-readable message. Both serialize to the wire shape consumed by
workflow integrations.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol


class SerializableRecord(Protocol):
    """Anything that can be rendered into the outcome payload."""

    def to_dict(self) -> dict[str, Any]: ...


@dataclass(frozen=True)
class RegionSummary:
    """Region metadata attached to a successful outcome."""

    code: str
    name: str
    currency_code: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "name": self.name,
            "currencyCode": self.currency_code,
        }


@dataclass(frozen=True)
class SearchSuccess:
    """Terminal outcome for a search that completed, possibly with no results."""

    records: tuple[SerializableRecord, ...]
    region: RegionSummary
    pages_visited: int = 0
    stop_reason: str | None = None
    success: bool = field(default=True, init=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": True,
            "data": [record.to_dict() for record in self.records],
            "region": self.region.to_dict(),
        }


@dataclass(frozen=True)
class SearchFailure:
    """Terminal outcome for a search that could not be completed."""

    error: str
    error_type: str = "ScraperError"
    success: bool = field(default=False, init=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"success": False, "error": self.error}


SearchOutcome = SearchSuccess | SearchFailure
