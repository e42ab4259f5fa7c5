"""Amazon region registry.

Static mapping from a region code to the storefront base URL, display name
and currency. Resolution is a pure lookup; an unknown code is a
configuration error, never a silent fallback to another storefront.
"""

import urllib.parse
from dataclasses import dataclass, replace
from enum import Enum

from ..base import ConfigurationError, RegionSummary


class RegionCode(Enum):
    """Supported Amazon storefronts."""

    US = "US"
    UK = "UK"
    DE = "DE"
    FR = "FR"
    IT = "IT"
    ES = "ES"
    CA = "CA"
    IN = "IN"


@dataclass(frozen=True)
class RegionConfig:
    """A storefront the search is scoped to.

    ``affiliate_query_suffix`` is empty unless an affiliate tag was supplied;
    once resolved it is appended verbatim to every product link.
    """

    code: str
    display_name: str
    base_url: str
    currency_code: str
    affiliate_query_suffix: str = ""

    def summary(self) -> RegionSummary:
        return RegionSummary(
            code=self.code, name=self.display_name, currency_code=self.currency_code
        )


REGIONS: dict[RegionCode, RegionConfig] = {
    RegionCode.US: RegionConfig("US", "United States", "https://www.amazon.com", "USD"),
    RegionCode.UK: RegionConfig(
        "UK", "United Kingdom", "https://www.amazon.co.uk", "GBP"
    ),
    RegionCode.DE: RegionConfig("DE", "Germany", "https://www.amazon.de", "EUR"),
    RegionCode.FR: RegionConfig("FR", "France", "https://www.amazon.fr", "EUR"),
    RegionCode.IT: RegionConfig("IT", "Italy", "https://www.amazon.it", "EUR"),
    RegionCode.ES: RegionConfig("ES", "Spain", "https://www.amazon.es", "EUR"),
    RegionCode.CA: RegionConfig("CA", "Canada", "https://www.amazon.ca", "CAD"),
    RegionCode.IN: RegionConfig("IN", "India", "https://www.amazon.in", "INR"),
}


def build_affiliate_suffix(affiliate_tag: str | None) -> str:
    """Build the query fragment that attributes referrals to a tag."""
    if not affiliate_tag or not affiliate_tag.strip():
        return ""
    return "?tag=" + urllib.parse.quote(affiliate_tag.strip(), safe="-_.")


def resolve_region(code: str, affiliate_tag: str | None = None) -> RegionConfig:
    """Resolve a region code into its configuration.

    Args:
    ----
        code: Region code such as "US" or "de" (case-insensitive)
        affiliate_tag: Optional affiliate tag applied to every product link

    Returns:
    -------
        RegionConfig with the affiliate suffix filled in

    Raises:
    ------
        ConfigurationError: If the code is not a registered region

    """
    try:
        region_code = RegionCode((code or "").strip().upper())
    except ValueError:
        supported = ", ".join(region.value for region in RegionCode)
        raise ConfigurationError(
            f"Invalid region: {code!r} (supported: {supported})"
        ) from None

    return replace(
        REGIONS[region_code],
        affiliate_query_suffix=build_affiliate_suffix(affiliate_tag),
    )


def supported_regions() -> list[str]:
    return [region.value for region in RegionCode]
