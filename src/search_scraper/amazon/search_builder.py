"""Amazon search URL construction utilities.

This module builds the first results-page URL for a search request. It is
pure: no navigation happens here.
"""

import logging
import urllib.parse

from .models import SearchRequest, SortOrder

logger = logging.getLogger(__name__)

PRICE_FILTER_PARAM = "p_36"
SORT_PARAM = "s"
PRICE_TO_MINOR_UNITS = 100


def to_minor_units(price: float) -> int:
    """Convert a major-unit amount (e.g. dollars) to minor units (cents)."""
    return int(round(price * PRICE_TO_MINOR_UNITS))


def encode_price_range(price_min: float | None, price_max: float | None) -> str | None:
    """Encode the price bounds for the ``p_36`` parameter.

    Returns ``None`` when neither bound is set.
    """
    if price_min is None and price_max is None:
        return None

    min_part = str(to_minor_units(price_min)) if price_min is not None else ""
    max_part = str(to_minor_units(price_max)) if price_max is not None else ""
    return f"{min_part}-{max_part}"


class SearchParameterBuilder:
    """Builds Amazon search URLs with price and sort parameters."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")

    def build_search_url(self, request: SearchRequest) -> str:
        """Build the first results-page URL for a request."""
        query = urllib.parse.quote(request.query_text, safe="!*'()")
        url = f"{self.base_url}/s?k={query}"

        price_filter = encode_price_range(request.price_min, request.price_max)
        if price_filter:
            url += f"&{PRICE_FILTER_PARAM}={price_filter}"

        if request.sort_order is not SortOrder.FEATURED:
            url += f"&{SORT_PARAM}={request.sort_order.value}"

        return url

    def log_search_parameters(self, request: SearchRequest) -> None:
        """Log search parameters for debugging."""
        filters = []
        if request.price_min is not None or request.price_max is not None:
            low = f"{request.price_min:.2f}" if request.price_min is not None else "0"
            high = f"{request.price_max:.2f}" if request.price_max is not None else "∞"
            filters.append(f"price: {low}-{high} {request.region.currency_code}")

        if request.sort_order is not SortOrder.FEATURED:
            filters.append(f"sort: {request.sort_order.value}")

        filters.append(f"limit: {request.result_limit}")

        logger.info(
            f"🔍 Search '{request.query_text}' on {request.region.display_name} "
            f"with {'; '.join(filters)}"
        )
