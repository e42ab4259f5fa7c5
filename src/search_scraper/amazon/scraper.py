#!/usr/bin/env python3
"""Amazon product search entry points.

``search_products`` runs one search end to end: build the first URL, open a
browser session, walk the result pages, package the records. Every error is
converted into a ``SearchFailure`` at this boundary and the browser is
released on every path.

``search_from_params`` accepts the camelCase request mapping used by workflow
integrations and returns the matching response mapping. ``main`` exposes the
same thing on the command line.
"""

import argparse
import asyncio
import json
import logging
import math
import sys
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from pathlib import Path
from typing import Any

from ..base import (
    ConfigurationError,
    NavigationError,
    ScraperConfigManager,
    ScraperError,
    SearchFailure,
    SearchOutcome,
    SearchSuccess,
    SessionError,
    ValidationError,
    get_config_manager,
)
from .browser_functions import BrowserSettings, browser_session
from .extractor import SelectorContract
from .models import DEFAULT_RESULT_LIMIT, ProductRecord, SearchRequest, SortOrder
from .pagination import DEFAULT_MAX_PAGES, PageSource, PaginationExtractor, StopReason
from .regions import RegionConfig, resolve_region, supported_regions
from .search_builder import SearchParameterBuilder

logger = logging.getLogger(__name__)

PLATFORM = "amazon"

SessionFactory = Callable[[], AbstractAsyncContextManager[PageSource]]


class WebsocketFilter(logging.Filter):
    """Filter out harmless websocket disconnection messages during cleanup"""

    def filter(self, record):
        message = record.getMessage().lower()
        return not (
            "websocket" in message
            and (
                "goodbye" in message
                or ("connection" in message and "lost" in message)
            )
        )


def assemble(
    records: list[ProductRecord],
    region: RegionConfig,
    pages_visited: int = 0,
    stop_reason: StopReason | None = None,
) -> SearchSuccess:
    """Wrap the final records with the region summary."""
    return SearchSuccess(
        records=tuple(records),
        region=region.summary(),
        pages_visited=pages_visited,
        stop_reason=stop_reason.value if stop_reason else None,
    )


def _failure(error: ScraperError) -> SearchFailure:
    return SearchFailure(
        error=f"{type(error).__name__}: {error}", error_type=type(error).__name__
    )


async def search_products(
    request: SearchRequest,
    config_manager: ScraperConfigManager | None = None,
    session_factory: SessionFactory | None = None,
) -> SearchOutcome:
    """Search one region and return a success or failure outcome.

    Args:
    ----
        request: Validated search request
        config_manager: Configuration source (global manager if omitted)
        session_factory: Zero-argument callable returning an async context
            manager that yields a page source. Defaults to a real browser.

    Returns:
    -------
        SearchSuccess with up to ``request.result_limit`` records, or
        SearchFailure with a human-readable message

    """
    try:
        config_manager = config_manager or get_config_manager()
        amazon_config = config_manager.get_platform_config(PLATFORM)
        contract = SelectorContract.from_config(amazon_config.get("selectors"))
        max_pages = int(amazon_config.get("max_pages", DEFAULT_MAX_PAGES))

        builder = SearchParameterBuilder(request.region.base_url)
        search_url = builder.build_search_url(request)
        builder.log_search_parameters(request)

        if session_factory is None:
            settings = BrowserSettings.from_config(config_manager)

            def session_factory():
                return browser_session(settings)

        async with session_factory() as session:
            extractor = PaginationExtractor(
                session,
                request.region,
                request.result_limit,
                contract=contract,
                max_pages=max_pages,
            )
            result = await extractor.run(search_url)

    except SessionError as e:
        logger.error(f"❌ Could not start browser session: {e}")
        return _failure(e)
    except NavigationError as e:
        logger.error(f"❌ Search aborted: {e}")
        return _failure(e)
    except ScraperError as e:
        logger.error(f"❌ Search failed: {e}")
        return _failure(e)
    except Exception as e:
        logger.exception(f"Unexpected error searching for '{request.query_text}'")
        return SearchFailure(
            error=f"Failed to search products: {e}", error_type=type(e).__name__
        )

    return assemble(
        result.records, request.region, result.pages_visited, result.stop_reason
    )


def _optional_price(value: Any, name: str) -> float | None:
    """Zero or empty means no bound, as workflow forms send 0 for unset."""
    if value in (None, ""):
        return None
    try:
        price = float(value)
    except (TypeError, ValueError):
        raise ValidationError([f"{name} must be a number"]) from None
    if not math.isfinite(price):
        raise ValidationError([f"{name} must be a finite number"])
    return price or None


def _result_limit(value: Any, default: int) -> int:
    if value in (None, ""):
        return default
    if isinstance(value, bool):
        raise ValidationError(["limit must be an integer"])
    try:
        limit = int(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(["limit must be an integer"]) from None
    if limit != float(value):
        raise ValidationError(["limit must be an integer"])
    return limit


def build_request(
    params: dict[str, Any], config_manager: ScraperConfigManager | None = None
) -> SearchRequest:
    """Translate a camelCase request mapping into a SearchRequest.

    Raises
    ------
        ConfigurationError: For an unknown region code
        ValidationError: For an invalid query, price bound, limit or sort

    """
    config_manager = config_manager or get_config_manager()
    amazon_config = config_manager.get_platform_config(PLATFORM)

    region = resolve_region(
        params.get("region") or amazon_config.get("default_region", "US"),
        params.get("affiliateTag"),
    )
    default_limit = int(amazon_config.get("default_limit", DEFAULT_RESULT_LIMIT))

    return SearchRequest(
        query_text=(params.get("query") or "").strip(),
        region=region,
        price_min=_optional_price(params.get("priceMin"), "priceMin"),
        price_max=_optional_price(params.get("priceMax"), "priceMax"),
        result_limit=_result_limit(params.get("limit"), default_limit),
        sort_order=SortOrder.parse(params.get("orderBy") or params.get("sortOrder")),
    )


async def search_from_params(
    params: dict[str, Any],
    config_manager: ScraperConfigManager | None = None,
    session_factory: SessionFactory | None = None,
) -> dict[str, Any]:
    """Run a search from a request mapping and return the response mapping.

    Configuration and validation problems are reported before any browser
    session is created.
    """
    try:
        request = build_request(params, config_manager)
    except (ConfigurationError, ValidationError) as e:
        logger.error(f"❌ Rejected search request: {e}")
        return _failure(e).to_dict()

    outcome = await search_products(request, config_manager, session_factory)
    return outcome.to_dict()


def setup_logging(debug: bool = False, log_format: str | None = None) -> None:
    """Configure root logging for command-line use."""
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format=log_format
            or "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
    else:
        logging.basicConfig(level=logging.INFO)

    websocket_filter = WebsocketFilter()
    logging.getLogger().addFilter(websocket_filter)
    logging.getLogger("websocket").addFilter(websocket_filter)


def main(argv: list[str] | None = None) -> int:
    """Command-line interface for the Amazon search scraper"""
    parser = argparse.ArgumentParser(description="Search Amazon products")
    parser.add_argument("--query", required=True, help="Search query, e.g. 'iPhone 13'")
    parser.add_argument(
        "--region",
        default=None,
        type=str.upper,
        choices=supported_regions(),
        help="Amazon region to search in (default from config, else US)",
    )
    parser.add_argument("--affiliate-tag", help="Affiliate tag for product links")
    parser.add_argument(
        "--min-price", type=float, metavar="PRICE", help="Minimum price filter"
    )
    parser.add_argument(
        "--max-price", type=float, metavar="PRICE", help="Maximum price filter"
    )
    parser.add_argument("--limit", type=int, help="Maximum number of results")
    parser.add_argument(
        "--sort",
        default=SortOrder.FEATURED.value,
        choices=[order.value for order in SortOrder],
        help="Sort order for search results",
    )
    parser.add_argument("--config", help="Path to configuration YAML")
    parser.add_argument("--output", type=Path, help="Write JSON result to this file")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging and a visible browser window",
    )
    args = parser.parse_args(argv)

    try:
        config_manager = get_config_manager(args.config)
    except ConfigurationError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    debug = args.debug or config_manager.is_debug_mode()
    setup_logging(debug, config_manager.get_global_settings().get("log_format"))
    if args.debug:
        config_manager.set_debug_mode(True)

    params = {
        "query": args.query,
        "region": args.region,
        "affiliateTag": args.affiliate_tag,
        "priceMin": args.min_price,
        "priceMax": args.max_price,
        "limit": args.limit,
        "orderBy": args.sort,
    }
    response = asyncio.run(search_from_params(params, config_manager))

    payload = json.dumps(response, indent=2, ensure_ascii=False)
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(payload, encoding="utf-8")
        logger.info(f"📄 Results written to {args.output}")
    else:
        print(payload)

    return 0 if response["success"] else 1


if __name__ == "__main__":
    sys.exit(main())
