"""Browser session management for the Amazon search scraper.

A session is one headless Chrome launched through Botasaurus with a
per-session fingerprint (user agent, viewport jitter, header set and
navigator/WebGL overrides). The randomness is confined to
``choose_fingerprint`` which takes an explicit ``random.Random`` so callers
and tests can pin the selection.

The Botasaurus driver is blocking; every call is dispatched to a worker
thread so navigation and content reads are awaitable suspension points.
"""

import asyncio
import json
import logging
import random
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

from botasaurus.browser import Driver, cdp

from ..base import (
    NavigationError,
    ScraperConfigManager,
    SessionError,
    get_chrome_arguments,
    get_config_manager,
)

logger = logging.getLogger(__name__)

PLATFORM = "amazon"

DEFAULT_USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:123.0) Gecko/20100101 "
    "Firefox/123.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.3 Safari/605.1.15",
)

DEFAULT_HTTP_HEADERS = {
    "Accept-Language": "en-US,en;q=0.9",
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,"
        "image/webp,*/*;q=0.8"
    ),
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
    "DNT": "1",
    "Upgrade-Insecure-Requests": "1",
}

# WebGL debug-renderer-info constants
UNMASKED_VENDOR_WEBGL = 37445
UNMASKED_RENDERER_WEBGL = 37446


@dataclass(frozen=True)
class FingerprintProfile:
    """The pool a per-session fingerprint is drawn from."""

    user_agents: tuple[str, ...] = DEFAULT_USER_AGENTS
    viewport_width: int = 1920
    viewport_height: int = 1080
    viewport_jitter: int = 100
    languages: tuple[str, ...] = ("en-US", "en")
    webgl_vendor: str = "Intel Open Source Technology Center"
    webgl_renderer: str = "Mesa DRI Intel(R) HD Graphics (Skylake GT2)"
    http_headers: dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_HTTP_HEADERS)
    )

    @classmethod
    def from_config(cls, data: dict[str, Any] | None) -> "FingerprintProfile":
        if not data:
            return cls()

        defaults = cls()
        user_agents = tuple(data.get("user_agents") or defaults.user_agents)
        headers = data.get("http_headers") or defaults.http_headers
        return cls(
            user_agents=user_agents,
            viewport_width=int(data.get("viewport_width", defaults.viewport_width)),
            viewport_height=int(
                data.get("viewport_height", defaults.viewport_height)
            ),
            viewport_jitter=int(
                data.get("viewport_jitter", defaults.viewport_jitter)
            ),
            languages=tuple(data.get("languages") or defaults.languages),
            webgl_vendor=data.get("webgl_vendor", defaults.webgl_vendor),
            webgl_renderer=data.get("webgl_renderer", defaults.webgl_renderer),
            http_headers={str(k): str(v) for k, v in headers.items()},
        )


@dataclass(frozen=True)
class BrowserFingerprint:
    """The concrete identity presented by one browser session."""

    user_agent: str
    viewport_width: int
    viewport_height: int
    languages: tuple[str, ...]
    webgl_vendor: str
    webgl_renderer: str
    http_headers: dict[str, str]

    def headers(self) -> dict[str, str]:
        """Extra HTTP headers including the selected user agent."""
        return {**self.http_headers, "User-Agent": self.user_agent}


def choose_fingerprint(
    profile: FingerprintProfile, rng: random.Random | None = None
) -> BrowserFingerprint:
    """Draw a fingerprint from the profile.

    The user agent is picked uniformly from the pool; each viewport axis gets
    ``[0, viewport_jitter)`` extra pixels.
    """
    if not profile.user_agents:
        raise SessionError("Fingerprint profile has no user agents")

    rng = rng or random.Random()  # noqa: S311
    jitter = max(profile.viewport_jitter, 0)
    return BrowserFingerprint(
        user_agent=rng.choice(profile.user_agents),
        viewport_width=profile.viewport_width + (rng.randrange(jitter) if jitter else 0),
        viewport_height=profile.viewport_height
        + (rng.randrange(jitter) if jitter else 0),
        languages=profile.languages,
        webgl_vendor=profile.webgl_vendor,
        webgl_renderer=profile.webgl_renderer,
        http_headers=dict(profile.http_headers),
    )


def build_stealth_script(fingerprint: BrowserFingerprint) -> str:
    """JavaScript installed before any page script runs."""
    languages = json.dumps(list(fingerprint.languages))
    vendor = json.dumps(fingerprint.webgl_vendor)
    renderer = json.dumps(fingerprint.webgl_renderer)
    return f"""
Object.defineProperty(navigator, 'webdriver', {{ get: () => false }});
Object.defineProperty(navigator, 'languages', {{ get: () => {languages} }});

const patchGetParameter = (proto) => {{
  if (!proto) return;
  const getParameter = proto.getParameter;
  proto.getParameter = function(parameter) {{
    if (parameter === {UNMASKED_VENDOR_WEBGL}) return {vendor};
    if (parameter === {UNMASKED_RENDERER_WEBGL}) return {renderer};
    return getParameter.call(this, parameter);
  }};
}};
patchGetParameter(window.WebGLRenderingContext && WebGLRenderingContext.prototype);
patchGetParameter(window.WebGL2RenderingContext && WebGL2RenderingContext.prototype);
"""


@dataclass(frozen=True)
class BrowserSettings:
    """Launch settings resolved from configuration."""

    headless: bool = True
    navigation_timeout_sec: float = 60.0
    profile: FingerprintProfile = field(default_factory=FingerprintProfile)
    config_manager: ScraperConfigManager | None = None

    @classmethod
    def from_config(
        cls, config_manager: ScraperConfigManager | None = None
    ) -> "BrowserSettings":
        config_manager = config_manager or get_config_manager()
        platform_config = config_manager.get_platform_config(PLATFORM)
        return cls(
            headless=config_manager.is_headless(),
            navigation_timeout_sec=config_manager.get_navigation_timeout(),
            profile=FingerprintProfile.from_config(platform_config.get("fingerprint")),
            config_manager=config_manager,
        )

    def chrome_arguments(self, fingerprint: BrowserFingerprint) -> list[str]:
        config_manager = self.config_manager or get_config_manager()
        return get_chrome_arguments(
            config_manager,
            PLATFORM,
            (fingerprint.viewport_width, fingerprint.viewport_height),
        )


class BrowserSession:
    """Async facade over a single Botasaurus driver and its one tab."""

    def __init__(
        self,
        driver: Any,
        fingerprint: BrowserFingerprint,
        navigation_timeout_sec: float = 60.0,
    ):
        self._driver = driver
        self.fingerprint = fingerprint
        self.navigation_timeout_sec = navigation_timeout_sec
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def goto(self, url: str) -> None:
        """Navigate and wait until the DOM content is parsed.

        Raises
        ------
            NavigationError: If the page fails to load or the timeout expires.
                On timeout the session is torn down, faulting the navigation.

        """
        if self._closed:
            raise NavigationError(url, "browser session already closed")

        logger.debug(f"🌐 Navigating to {url}")
        try:
            await asyncio.wait_for(
                asyncio.to_thread(self._driver.get, url),
                timeout=self.navigation_timeout_sec,
            )
        except TimeoutError as e:
            await self.close()
            raise NavigationError(
                url, f"timed out after {self.navigation_timeout_sec:g}s"
            ) from e
        except Exception as e:
            raise NavigationError(url, str(e) or type(e).__name__) from e

    async def content(self) -> str:
        """Current page HTML."""
        html = await asyncio.to_thread(lambda: self._driver.page_html)
        return html or ""

    async def current_url(self) -> str:
        return await asyncio.to_thread(lambda: self._driver.current_url)

    async def close(self) -> None:
        """Release the browser. Safe to call more than once; never raises."""
        if self._closed:
            return
        self._closed = True
        try:
            await asyncio.to_thread(self._driver.close)
            logger.debug("🧹 Browser session closed")
        except Exception as e:
            logger.debug(f"Browser cleanup warning: {e}")


def _prepare_driver(driver: Any, fingerprint: BrowserFingerprint) -> None:
    """Install overrides on the fresh tab before any navigation."""
    driver.run_cdp_command(
        cdp.page.add_script_to_evaluate_on_new_document(
            source=build_stealth_script(fingerprint)
        )
    )
    driver.run_cdp_command(cdp.network.enable())
    driver.run_cdp_command(
        cdp.network.set_extra_http_headers(
            headers=cdp.network.Headers(fingerprint.headers())
        )
    )
    driver.run_cdp_command(
        cdp.emulation.set_device_metrics_override(
            width=fingerprint.viewport_width,
            height=fingerprint.viewport_height,
            device_scale_factor=1,
            mobile=False,
        )
    )


def _launch_driver(
    settings: BrowserSettings,
    fingerprint: BrowserFingerprint,
    driver_factory: Callable[..., Any],
) -> Any:
    driver = driver_factory(
        headless=settings.headless,
        user_agent=fingerprint.user_agent,
        lang=fingerprint.languages[0] if fingerprint.languages else None,
        arguments=settings.chrome_arguments(fingerprint),
        wait_for_complete_page_load=False,
    )
    try:
        _prepare_driver(driver, fingerprint)
    except Exception:
        driver.close()
        raise
    return driver


async def launch_session(
    settings: BrowserSettings | None = None,
    fingerprint: BrowserFingerprint | None = None,
    driver_factory: Callable[..., Any] = Driver,
    rng: random.Random | None = None,
) -> tuple[BrowserSession, Callable[[], Awaitable[None]]]:
    """Launch a browser and return the session with its release function.

    Raises
    ------
        SessionError: If the browser cannot be launched. There is no retry.

    """
    settings = settings or BrowserSettings.from_config()
    fingerprint = fingerprint or choose_fingerprint(settings.profile, rng)

    logger.info(
        f"🚀 Launching browser ({fingerprint.viewport_width}x"
        f"{fingerprint.viewport_height}, headless={settings.headless})"
    )
    logger.debug(f"User agent: {fingerprint.user_agent}")

    try:
        driver = await asyncio.to_thread(
            _launch_driver, settings, fingerprint, driver_factory
        )
    except Exception as e:
        logger.error(f"❌ Browser launch failed: {e}")
        raise SessionError(f"Failed to launch browser: {e}") from e

    session = BrowserSession(driver, fingerprint, settings.navigation_timeout_sec)
    return session, session.close


@asynccontextmanager
async def browser_session(
    settings: BrowserSettings | None = None,
    fingerprint: BrowserFingerprint | None = None,
    driver_factory: Callable[..., Any] = Driver,
    rng: random.Random | None = None,
) -> AsyncIterator[BrowserSession]:
    """Scoped browser session, released on every exit path."""
    session, release = await launch_session(
        settings, fingerprint, driver_factory=driver_factory, rng=rng
    )
    try:
        yield session
    finally:
        await release()
