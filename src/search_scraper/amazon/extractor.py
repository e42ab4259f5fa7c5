"""DOM-to-record extraction for Amazon search results pages.

The page layout contract is a fixed set of CSS selectors
(``SelectorContract``). Extraction runs on the rendered HTML with
BeautifulSoup rather than as script inside the browser, so a layout change
is a single point of edit and every rule is testable against static HTML.
"""

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field, fields, replace
from typing import Any

from bs4 import BeautifulSoup
from bs4.element import Tag

from ..base import (
    ConfigurationError,
    clean_text,
    is_absolute_url,
    normalize_price,
    parse_rating,
    parse_review_count,
    to_absolute_url,
)
from .models import ProductRecord
from .regions import RegionConfig

logger = logging.getLogger(__name__)

SELECTOR_CONTRACT_VERSION = 1


@dataclass(frozen=True)
class SelectorContract:
    """CSS selectors describing the search results layout."""

    version: int = SELECTOR_CONTRACT_VERSION
    result_item: str = (
        '.s-main-slot .s-result-item[data-component-type="s-search-result"]'
    )
    title: str = "h2 a span"
    link: str = "h2 a"
    price: str = ".a-price .a-offscreen"
    image: str = "img.s-image"
    description: str = ".a-size-base-plus.a-color-base.a-text-normal"
    rating: str = "span.a-icon-alt"
    reviews: str = "span.a-size-base.s-underline-text"
    prime: str = ".s-prime"
    next_page: str = ".s-pagination-next"
    next_page_disabled_class: str = "s-pagination-disabled"

    @classmethod
    def from_config(cls, selectors: dict[str, Any] | None) -> "SelectorContract":
        """Overlay configured selectors on the built-in contract."""
        if not selectors:
            return cls()

        known = {f.name for f in fields(cls)}
        unknown = set(selectors) - known
        if unknown:
            raise ConfigurationError(
                f"Unknown selector keys: {', '.join(sorted(unknown))}"
            )

        overrides = {key: value for key, value in selectors.items() if value}
        if "version" in overrides:
            overrides["version"] = int(overrides["version"])
        return replace(cls(), **overrides)


@dataclass
class ExtractedPage:
    """Records extracted from one page plus bookkeeping for diagnostics."""

    records: list[ProductRecord] = field(default_factory=list)
    containers_seen: int = 0
    skipped: int = 0


def generate_product_id() -> str:
    return uuid.uuid4().hex[:12]


def _select_text(item: Tag, selector: str) -> str | None:
    element = item.select_one(selector)
    if element is None:
        return None
    return element.get_text()


def _select_attr(item: Tag, selector: str, attribute: str) -> str | None:
    element = item.select_one(selector)
    if element is None:
        return None
    value = element.get(attribute)
    if isinstance(value, list):
        value = " ".join(value)
    return value


def parse_result_item(
    item: Tag,
    region: RegionConfig,
    contract: SelectorContract,
    id_factory: Callable[[], str] = generate_product_id,
) -> ProductRecord | None:
    """Convert one result container into a record.

    Returns ``None`` when the item lacks a title or an http(s) link; such
    items are dropped rather than emitted as partial entries.
    """
    title = clean_text(_select_text(item, contract.title))
    href = (_select_attr(item, contract.link, "href") or "").strip()
    if not title or not href:
        return None

    product_url = to_absolute_url(href, region.base_url)
    if not is_absolute_url(product_url):
        return None
    link_url = product_url + region.affiliate_query_suffix

    description = clean_text(_select_text(item, contract.description)) or title

    return ProductRecord(
        id=id_factory(),
        title=title,
        description=description,
        price=normalize_price(_select_text(item, contract.price)),
        image_url=_select_attr(item, contract.image, "src") or "",
        link_url=link_url,
        currency_code=region.currency_code,
        is_prime_eligible=item.select_one(contract.prime) is not None,
        rating=parse_rating(_select_text(item, contract.rating)),
        review_count=parse_review_count(_select_text(item, contract.reviews)),
    )


def extract_products(
    html: str,
    region: RegionConfig,
    remaining: int,
    contract: SelectorContract | None = None,
    id_factory: Callable[[], str] = generate_product_id,
) -> ExtractedPage:
    """Extract up to ``remaining`` product records from a results page.

    Args:
    ----
        html: Rendered page HTML
        region: Region the links and currency belong to
        remaining: Quota left for this search; items beyond it are not parsed
        contract: Selector contract (defaults to the built-in one)
        id_factory: Generator for opaque record identifiers

    Returns:
    -------
        ExtractedPage with the accepted records in page order

    """
    contract = contract or SelectorContract()
    page = ExtractedPage()
    if remaining <= 0:
        return page

    soup = BeautifulSoup(html, "html.parser")
    items = soup.select(contract.result_item)
    page.containers_seen = len(items)

    for item in items:
        if len(page.records) >= remaining:
            break

        record = parse_result_item(item, region, contract, id_factory)
        if record is None:
            page.skipped += 1
            continue
        page.records.append(record)

    if page.skipped:
        logger.debug(
            f"Skipped {page.skipped} result items without title or link "
            f"(contract v{contract.version})"
        )

    return page


def find_next_page(html: str, contract: SelectorContract | None = None) -> str | None:
    """Return the href of an enabled next-page control, if any."""
    contract = contract or SelectorContract()
    soup = BeautifulSoup(html, "html.parser")

    next_button = soup.select_one(contract.next_page)
    if next_button is None:
        return None

    classes = next_button.get("class") or []
    if contract.next_page_disabled_class in classes:
        return None
    if next_button.get("aria-disabled") == "true":
        return None

    href = next_button.get("href")
    if not href or not href.strip():
        return None
    return href.strip()
