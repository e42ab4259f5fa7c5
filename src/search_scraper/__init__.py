"""Browser-driven product search scraper.

Architecture:
    - base/: Platform-agnostic foundation (outcomes, config, errors, parsing)
    - amazon/: Amazon storefront search, pagination and extraction

Usage:
    from src.search_scraper.amazon import search_from_params

    response = await search_from_params({"query": "iPhone 13", "region": "US"})
"""

from .amazon import search_from_params, search_products

__all__ = ["search_from_params", "search_products"]
