"""Platform-agnostic text and URL helpers shared by the scrapers.

These helpers never raise on malformed page text: each returns a neutral
value (``0.0`` for prices, ``None`` for ratings and review counts) so a
single odd listing cannot abort a whole results page.
"""

import re
from urllib.parse import urljoin, urlparse

_LEADING_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")


def _leading_float(text: str) -> float | None:
    match = _LEADING_NUMBER.match(text)
    if not match:
        return None
    try:
        return float(match.group(0))
    except ValueError:
        return None


def normalize_price(price_str: str | None) -> float:
    """Normalize displayed price text to a non-negative float.

    Every character other than digits and the decimal point is stripped,
    so ``"$1,234.56"`` becomes ``1234.56``.

    Args:
    ----
        price_str: Price text as rendered on the page (e.g., "$19.99")

    Returns:
    -------
        Parsed price, or 0.0 when the text is missing or unparseable

    """
    if not price_str:
        return 0.0

    normalized = re.sub(r"[^0-9.]", "", price_str)
    value = _leading_float(normalized)
    return value if value is not None else 0.0


def parse_rating(rating_text: str | None) -> float | None:
    """Parse star-rating text such as ``"4.3 out of 5 stars"``.

    Only the token before the first space is considered. Values outside the
    0-5 range are treated as unparseable.
    """
    if rating_text is None:
        return None

    token = rating_text.strip().split(" ")[0]
    # Some locales render the decimal separator as a comma ("4,3 von 5")
    token = token.replace(",", ".")
    value = _leading_float(token)
    if value is None or value > 5:
        return None
    return value


def parse_review_count(reviews_text: str | None) -> int | None:
    """Parse review-count text such as ``"(12,345)"`` into an integer."""
    if reviews_text is None:
        return None

    digits = re.sub(r"[^0-9]", "", reviews_text)
    if not digits:
        return None
    return int(digits)


def clean_text(text: str | None) -> str:
    """Trim surrounding whitespace, treating a missing node text as empty."""
    if not text:
        return ""
    return text.strip()


def to_absolute_url(href: str, base_url: str) -> str:
    """Resolve a possibly relative href against the site base URL.

    Hrefs that already carry a scheme (``http``/``https``) are returned
    untouched so external links supplied by the page stay intact.
    """
    href = href.strip()
    if href.startswith("http"):
        return href
    return urljoin(base_url.rstrip("/") + "/", href)


def is_absolute_url(url: str) -> bool:
    """Check that a URL carries both a scheme and a host."""
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)
