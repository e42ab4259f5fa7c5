"""Base infrastructure for the search scraper.

Public API:
    - SearchSuccess / SearchFailure: Terminal search outcomes
    - ScraperConfigManager: YAML configuration access
    - BrowserDetection: Page diagnostics for empty results
    - Exception hierarchy rooted at ScraperError
"""

# Browser utilities
from .browser_utils import BrowserDetection, get_chrome_arguments

# Configuration management
from .config import ScraperConfigManager, get_config_manager, reset_config_manager

# Errors
from .exceptions import (
    ConfigurationError,
    NavigationError,
    ScraperError,
    SessionError,
    ValidationError,
)

# Outcome models
from .models import RegionSummary, SearchFailure, SearchOutcome, SearchSuccess

# Utilities
from .utils import (
    clean_text,
    is_absolute_url,
    normalize_price,
    parse_rating,
    parse_review_count,
    to_absolute_url,
)

__all__ = [
    # Outcome models
    "RegionSummary",
    "SearchFailure",
    "SearchOutcome",
    "SearchSuccess",
    # Configuration management
    "ScraperConfigManager",
    "get_config_manager",
    "reset_config_manager",
    # Errors
    "ConfigurationError",
    "NavigationError",
    "ScraperError",
    "SessionError",
    "ValidationError",
    # Browser utilities
    "BrowserDetection",
    "get_chrome_arguments",
    # Utilities
    "clean_text",
    "is_absolute_url",
    "normalize_price",
    "parse_rating",
    "parse_review_count",
    "to_absolute_url",
]
