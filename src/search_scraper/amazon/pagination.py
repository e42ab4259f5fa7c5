"""Pagination loop for Amazon search results.

The loop is an explicit state machine::

    NAVIGATING -> EXTRACTING -> CHECKING_QUOTA -> FINDING_NEXT_PAGE
         ^                            |                  |
         +----------------------------+------------------+--> DONE
    (navigation error) --> FAILED

Every termination path records a ``StopReason`` so each one is observable
and testable on its own. The loop never accumulates more than the result
limit, and a page that yields no new items ends the search so a stale
next-page link cannot spin forever.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from ..base import BrowserDetection, NavigationError, to_absolute_url
from .extractor import (
    ExtractedPage,
    SelectorContract,
    extract_products,
    find_next_page,
    generate_product_id,
)
from .models import PageScrapeState, ProductRecord
from .regions import RegionConfig

logger = logging.getLogger(__name__)

DEFAULT_MAX_PAGES = 20


class PageSource(Protocol):
    """What the loop needs from a browser session."""

    async def goto(self, url: str) -> None: ...

    async def content(self) -> str: ...

    async def current_url(self) -> str: ...


class ScrapeState(Enum):
    NAVIGATING = "navigating"
    EXTRACTING = "extracting"
    CHECKING_QUOTA = "checking_quota"
    FINDING_NEXT_PAGE = "finding_next_page"
    DONE = "done"
    FAILED = "failed"


class StopReason(Enum):
    QUOTA_REACHED = "quota_reached"
    NO_NEW_ITEMS = "no_new_items"
    NO_NEXT_PAGE = "no_next_page"
    PAGE_LIMIT = "page_limit"


@dataclass
class PaginationResult:
    """Records accumulated by one run of the loop and why it stopped."""

    records: list[ProductRecord] = field(default_factory=list)
    stop_reason: StopReason | None = None
    pages_visited: int = 0


class PaginationExtractor:
    """Walks result pages until the quota is met or the pages run out."""

    def __init__(
        self,
        session: PageSource,
        region: RegionConfig,
        result_limit: int,
        contract: SelectorContract | None = None,
        max_pages: int | None = DEFAULT_MAX_PAGES,
        id_factory: Callable[[], str] = generate_product_id,
    ):
        if result_limit < 1:
            raise ValueError("result_limit must be at least 1")
        if max_pages is not None and max_pages < 1:
            raise ValueError("max_pages must be at least 1")

        self.session = session
        self.region = region
        self.result_limit = result_limit
        self.contract = contract or SelectorContract()
        self.max_pages = max_pages
        self.id_factory = id_factory

        self.phase = ScrapeState.NAVIGATING
        self.stop_reason: StopReason | None = None
        self._page_html = ""
        self._last_page: ExtractedPage | None = None

    async def run(self, start_url: str) -> PaginationResult:
        """Run the loop from the first results page.

        Raises
        ------
            NavigationError: If any page fails to load.

        """
        state = PageScrapeState(current_page_url=start_url)
        self.phase = ScrapeState.NAVIGATING
        self.stop_reason = None

        handlers = {
            ScrapeState.NAVIGATING: self._navigate,
            ScrapeState.EXTRACTING: self._extract,
            ScrapeState.CHECKING_QUOTA: self._check_quota,
            ScrapeState.FINDING_NEXT_PAGE: self._find_next_page,
        }

        try:
            while self.phase not in (ScrapeState.DONE, ScrapeState.FAILED):
                self.phase = await handlers[self.phase](state)
        except NavigationError as e:
            self.phase = ScrapeState.FAILED
            logger.error(
                f"❌ Navigation failed on page {state.pages_visited + 1}: {e}"
            )
            raise

        logger.info(
            f"✅ Pagination finished: {state.accumulated_count} products from "
            f"{state.pages_visited} page(s), stop reason: {self.stop_reason.value}"
        )
        return PaginationResult(
            records=list(state.accumulated_records),
            stop_reason=self.stop_reason,
            pages_visited=state.pages_visited,
        )

    def _stop(self, reason: StopReason) -> ScrapeState:
        self.stop_reason = reason
        return ScrapeState.DONE

    async def _navigate(self, state: PageScrapeState) -> ScrapeState:
        if self.max_pages is not None and state.pages_visited >= self.max_pages:
            logger.warning(f"⚠️ Page limit of {self.max_pages} reached")
            return self._stop(StopReason.PAGE_LIMIT)

        await self.session.goto(state.current_page_url)
        state.pages_visited += 1
        self._page_html = await self.session.content()
        return ScrapeState.EXTRACTING

    async def _extract(self, state: PageScrapeState) -> ScrapeState:
        remaining = self.result_limit - state.accumulated_count
        page = extract_products(
            self._page_html,
            self.region,
            remaining,
            contract=self.contract,
            id_factory=self.id_factory,
        )
        self._last_page = page
        state.accumulated_records.extend(page.records)

        logger.info(
            f"📦 Page {state.pages_visited}: {len(page.records)} new products "
            f"({state.accumulated_count}/{self.result_limit})"
        )
        return ScrapeState.CHECKING_QUOTA

    async def _check_quota(self, state: PageScrapeState) -> ScrapeState:
        page = self._last_page
        if page is None or not page.records:
            await self._log_empty_page(state, page)
            return self._stop(StopReason.NO_NEW_ITEMS)

        if state.accumulated_count >= self.result_limit:
            del state.accumulated_records[self.result_limit :]
            return self._stop(StopReason.QUOTA_REACHED)

        return ScrapeState.FINDING_NEXT_PAGE

    async def _find_next_page(self, state: PageScrapeState) -> ScrapeState:
        href = find_next_page(self._page_html, self.contract)
        if href is None:
            logger.debug("No enabled next-page control, results exhausted")
            return self._stop(StopReason.NO_NEXT_PAGE)

        state.current_page_url = to_absolute_url(href, self.region.base_url)
        return ScrapeState.NAVIGATING

    async def _log_empty_page(
        self, state: PageScrapeState, page: ExtractedPage | None
    ) -> None:
        """Explain a zero-yield page without changing the outcome."""
        if page is not None and page.containers_seen:
            logger.warning(
                f"⚠️ Page {state.pages_visited} has {page.containers_seen} result "
                f"containers but none matched the extraction contract "
                f"v{self.contract.version}; the layout may have changed"
            )
            return

        if state.pages_visited > 1:
            logger.debug(f"Page {state.pages_visited} yielded no results")
            return

        if BrowserDetection.detect_captcha_challenge(self._page_html):
            logger.warning("🚫 Results page looks like a CAPTCHA challenge")

        try:
            current_url = await self.session.current_url()
        except Exception as e:
            logger.debug(f"Could not read current URL: {e}")
            return

        redirected, info = BrowserDetection.detect_regional_redirect(
            current_url, self.region.base_url
        )
        if redirected:
            logger.warning(f"🌍 Regional redirect detected: {info}")
        else:
            logger.info("No search results found")
