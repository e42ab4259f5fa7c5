"""HTML builders and fake browser sessions shared by the tests."""

from collections.abc import Callable
from contextlib import asynccontextmanager

from src.search_scraper.base import NavigationError


def result_item(
    title: str | None = "Apple iPhone 13, 128GB, Midnight",
    href: str | None = "/Apple-iPhone-13-128GB-Midnight/dp/B09G9HD6PD",
    price: str | None = "$599.00",
    image: str | None = "https://m.media-amazon.com/images/I/61VuVU94RnL.jpg",
    description: str | None = None,
    rating: str | None = "4.3 out of 5 stars",
    reviews: str | None = "12,345",
    prime: bool = True,
) -> str:
    """Render one search-result container in the storefront's markup."""
    parts = ['<div class="s-result-item" data-component-type="s-search-result">']
    if href is not None or title is not None:
        link_attr = f' href="{href}"' if href is not None else ""
        title_html = f"<span>{title}</span>" if title is not None else ""
        parts.append(f"<h2><a{link_attr}>{title_html}</a></h2>")
    if price is not None:
        parts.append(
            f'<span class="a-price"><span class="a-offscreen">{price}</span></span>'
        )
    if image is not None:
        parts.append(f'<img class="s-image" src="{image}"/>')
    if description is not None:
        parts.append(
            f'<span class="a-size-base-plus a-color-base a-text-normal">'
            f"{description}</span>"
        )
    if rating is not None:
        parts.append(f'<i class="a-icon"><span class="a-icon-alt">{rating}</span></i>')
    if reviews is not None:
        parts.append(f'<span class="a-size-base s-underline-text">{reviews}</span>')
    if prime:
        parts.append('<i class="a-icon s-prime"></i>')
    parts.append("</div>")
    return "".join(parts)


def results_page(
    items: list[str],
    next_href: str | None = None,
    next_disabled: bool = False,
) -> str:
    """Render a results page with an optional pagination strip."""
    pagination = ""
    if next_disabled:
        pagination = (
            '<span class="s-pagination-item s-pagination-next '
            's-pagination-disabled">Next</span>'
        )
    elif next_href is not None:
        pagination = (
            f'<a class="s-pagination-item s-pagination-next" '
            f'href="{next_href}">Next</a>'
        )
    return (
        "<html><body>"
        f'<div class="s-main-slot s-result-list">{"".join(items)}</div>'
        f'<div class="s-pagination-strip">{pagination}</div>'
        "</body></html>"
    )


def items(count: int, prefix: str = "Product") -> list[str]:
    return [
        result_item(title=f"{prefix} {i}", href=f"/{prefix}-{i}/dp/B0TEST{i:04d}")
        for i in range(1, count + 1)
    ]


class FakeSession:
    """In-memory page source serving static HTML keyed by URL."""

    def __init__(
        self,
        pages: dict[str, str],
        fail_on: set[str] | None = None,
        redirect_to: str | None = None,
    ):
        self.pages = pages
        self.fail_on = fail_on or set()
        self.redirect_to = redirect_to
        self.visited: list[str] = []
        self.closed = False
        self._current: str | None = None

    async def goto(self, url: str) -> None:
        self.visited.append(url)
        if url in self.fail_on:
            raise NavigationError(url, "net::ERR_CONNECTION_RESET")
        if url not in self.pages:
            raise NavigationError(url, "no fixture for this URL")
        self._current = url

    async def content(self) -> str:
        return self.pages[self._current]

    async def current_url(self) -> str:
        return self.redirect_to or self._current or ""

    async def close(self) -> None:
        self.closed = True


def session_factory_for(session: FakeSession) -> Callable:
    """Wrap a fake session the way search_products expects."""

    @asynccontextmanager
    async def factory():
        try:
            yield session
        finally:
            await session.close()

    return factory

