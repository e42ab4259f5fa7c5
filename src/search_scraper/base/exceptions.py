"""Exception hierarchy for the search scraper.

Only configuration, validation, session and navigation problems are raised.
Items that fail minimal extraction and exhausted result pages are normal
control flow and never surface as exceptions.
"""


class ScraperError(Exception):
    """Base class for all scraper errors."""


class ConfigurationError(ScraperError):
    """Raised for an unknown region code or unusable configuration."""


class ValidationError(ScraperError):
    """Raised when a search request fails validation."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("Invalid search request: " + "; ".join(errors))


class SessionError(ScraperError):
    """Raised when the browser session cannot be launched."""


class NavigationError(ScraperError):
    """Raised when a results page fails to load."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to load {url}: {reason}")
