"""Shared browser utilities for the search scraper.

Provides the Chrome launch arguments and the page-level detection helpers
used to explain why a results page produced nothing.
"""

import logging
from urllib.parse import urlparse

from .config import ScraperConfigManager

logger = logging.getLogger(__name__)

DEFAULT_CHROME_ARGUMENTS = [
    "--disable-features=IsolateOrigins,site-per-process",
    "--disable-web-security",
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
]


def get_chrome_arguments(
    config_manager: ScraperConfigManager,
    platform: str,
    window_size: tuple[int, int],
) -> list[str]:
    """Get Chrome command line arguments for a platform.

    Args:
    ----
        config_manager: Loaded configuration
        platform: Platform section to read ``browser_arguments`` from
        window_size: Window (width, height) matching the emulated viewport

    Returns:
    -------
        List of Chrome command line arguments

    """
    platform_config = config_manager.get_platform_config(platform)
    arguments = list(
        platform_config.get("browser_arguments") or DEFAULT_CHROME_ARGUMENTS
    )

    # Window size always tracks the fingerprint viewport
    arguments = [arg for arg in arguments if not arg.startswith("--window-size=")]
    width, height = window_size
    arguments.append(f"--window-size={width},{height}")

    return arguments


class BrowserDetection:
    """Page inspection helpers for diagnosing empty results."""

    CAPTCHA_INDICATORS = (
        "captcha",
        "enter the characters you see below",
        "make sure you're not a robot",
        "verify you are human",
    )

    @staticmethod
    def detect_captcha_challenge(page_source: str) -> bool:
        """Detect if page contains CAPTCHA challenge.

        Args:
        ----
            page_source: HTML source of the page

        Returns:
        -------
            True if CAPTCHA detected, False otherwise

        """
        page_lower = page_source.lower()
        return any(
            indicator in page_lower
            for indicator in BrowserDetection.CAPTCHA_INDICATORS
        )

    @staticmethod
    def detect_regional_redirect(
        current_url: str, expected_base_url: str
    ) -> tuple[bool, str | None]:
        """Detect if the browser ended up on a different regional host.

        Args:
        ----
            current_url: URL the browser is currently on
            expected_base_url: Region base URL the search was issued against

        Returns:
        -------
            Tuple of (is_redirected, redirect_info)

        """
        expected_host = urlparse(expected_base_url).netloc
        actual_host = urlparse(current_url).netloc

        if actual_host and expected_host and actual_host != expected_host:
            return True, f"Redirected from {expected_host} to {actual_host}"

        return False, None
