"""Amazon search implementation.

Public API:
    - search_products: Run one search and return a SearchOutcome
    - search_from_params: Same, from/to the camelCase request/response mappings
    - resolve_region / RegionConfig: Storefront registry
    - SearchRequest / ProductRecord / SortOrder: Data models
"""

from .browser_functions import (
    BrowserFingerprint,
    BrowserSession,
    BrowserSettings,
    FingerprintProfile,
    browser_session,
    choose_fingerprint,
    launch_session,
)
from .extractor import SelectorContract, extract_products, find_next_page
from .models import (
    DEFAULT_RESULT_LIMIT,
    PageScrapeState,
    ProductRecord,
    SearchRequest,
    SortOrder,
)
from .pagination import PaginationExtractor, PaginationResult, ScrapeState, StopReason
from .regions import RegionCode, RegionConfig, build_affiliate_suffix, resolve_region
from .scraper import assemble, build_request, search_from_params, search_products
from .search_builder import SearchParameterBuilder

__all__ = [
    # Entry points
    "assemble",
    "build_request",
    "search_from_params",
    "search_products",
    # Regions
    "RegionCode",
    "RegionConfig",
    "build_affiliate_suffix",
    "resolve_region",
    # Models
    "DEFAULT_RESULT_LIMIT",
    "PageScrapeState",
    "ProductRecord",
    "SearchRequest",
    "SortOrder",
    # Query planning
    "SearchParameterBuilder",
    # Extraction and pagination
    "PaginationExtractor",
    "PaginationResult",
    "ScrapeState",
    "SelectorContract",
    "StopReason",
    "extract_products",
    "find_next_page",
    # Browser sessions
    "BrowserFingerprint",
    "BrowserSession",
    "BrowserSettings",
    "FingerprintProfile",
    "browser_session",
    "choose_fingerprint",
    "launch_session",
]
