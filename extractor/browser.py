from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, FrozenSet, Iterable, Optional

from playwright.async_api import async_playwright, Browser, Playwright, Page, Error as PWError

from .config import Config
from .models import ExtractionOutcome, METHOD_BROWSER
from .patterns import extract_media_links
from .utils import RenderError, normalize_url

logger = logging.getLogger(__name__)


def _browser_args(cfg: Config) -> list[str]:
    args: list[str] = [
        "--disable-dev-shm-usage",
        "--no-sandbox",
        "--no-zygote",
        # graphics off
        "--disable-gpu",
        "--disable-software-rasterizer",
        # keep renderer light
        "--disable-extensions",
        "--disable-background-networking",
        "--disable-background-timer-throttling",
        "--disable-sync",
        "--metrics-recording-only",
        "--mute-audio",
        "--no-default-browser-check",
        "--no-first-run",
        "--disable-client-side-phishing-detection",
        "--disable-default-apps",
        "--disable-features=TranslateUI",
    ]
    for a in cfg.browser_args_extra or ():
        if isinstance(a, str) and a.strip():
            args.append(a.strip())
    return args


def resolve_executable_path(cfg: Config) -> Optional[str]:
    """Explicit Chromium binary if configured and present, else Playwright's bundled build."""
    path = cfg.chromium_executable_path
    if not path:
        return None
    if not Path(path).exists():
        logger.warning("CHROMIUM_EXECUTABLE_PATH=%s does not exist; using bundled Chromium", path)
        return None
    return path


# ---------------------------
# Process-wide driver handle
# ---------------------------

class BrowserDriver:
    """
    Lazily started Playwright driver, shared by every render in the process.

    The first get() starts the driver and resolves the browser binary; later calls
    return the same handle. Concurrent first calls are serialized by a lock and
    re-check the handle, so the driver is started once. The handle lives until
    stop() (called on app shutdown), not per request.
    """

    def __init__(self, cfg: Config):
        self.cfg = cfg
        self._pw: Optional[Playwright] = None
        self._executable_path: Optional[str] = None
        self._lock = asyncio.Lock()

    @property
    def started(self) -> bool:
        return self._pw is not None

    @property
    def executable_path(self) -> Optional[str]:
        return self._executable_path

    async def get(self) -> Playwright:
        if self._pw is not None:
            return self._pw
        async with self._lock:
            if self._pw is None:
                logger.info("Starting Playwright driver (first render in this process)")
                self._executable_path = resolve_executable_path(self.cfg)
                self._pw = await async_playwright().start()
        return self._pw

    async def stop(self) -> None:
        async with self._lock:
            pw, self._pw = self._pw, None
        if pw is None:
            return
        try:
            await pw.stop()
        except Exception as e:
            logger.warning("Error while stopping Playwright: %s", e)


# ---------------------------
# Request filtering
# ---------------------------

@dataclass(frozen=True)
class ResourceFilter:
    """Deny-set over Playwright resource types (image, stylesheet, font, media, ...)."""

    blocked: FrozenSet[str]

    @classmethod
    def from_types(cls, types: Iterable[str]) -> "ResourceFilter":
        return cls(blocked=frozenset(t.strip().lower() for t in types if t and t.strip()))

    def allows(self, resource_type: str) -> bool:
        return (resource_type or "").lower() not in self.blocked


async def _install_request_blocking(page: Page, rfilter: ResourceFilter) -> None:
    async def route_handler(route, request):
        if not rfilter.allows(request.resource_type):
            return await route.abort()
        return await route.continue_()
    await page.route("**/*", route_handler)


@asynccontextmanager
async def launched_browser(pw: Playwright, cfg: Config, executable_path: Optional[str] = None) -> AsyncIterator[Browser]:
    """One isolated Chromium, closed on every exit path."""
    browser = await pw.chromium.launch(
        headless=True,
        args=_browser_args(cfg),
        executable_path=executable_path,
    )
    try:
        yield browser
    finally:
        try:
            await browser.close()
        except Exception as e:
            logger.warning("Error while closing browser: %s", e)


# ---------------------------
# Rendered fetch strategy
# ---------------------------

class RenderedFetcher:
    """Render the page in headless Chromium and scan the live DOM for media links."""

    method = METHOD_BROWSER

    def __init__(self, cfg: Config, driver: BrowserDriver):
        self.cfg = cfg
        self.driver = driver
        self.resource_filter = ResourceFilter.from_types(cfg.blocked_resource_types)

    async def render_markup(self, url: str) -> str:
        pw = await self.driver.get()
        try:
            async with launched_browser(pw, self.cfg, self.driver.executable_path) as browser:
                page = await browser.new_page(user_agent=self.cfg.user_agent)
                await _install_request_blocking(page, self.resource_filter)

                await page.goto(
                    url,
                    wait_until=self.cfg.render_wait_until,
                    timeout=self.cfg.render_timeout_ms,
                )
                if self.cfg.render_settle_ms > 0:
                    await asyncio.sleep(self.cfg.render_settle_ms / 1000.0)

                return await page.content()
        except PWError as e:
            raise RenderError(str(e)) from e

    async def fetch(self, ref: str) -> ExtractionOutcome:
        url = normalize_url(ref)
        logger.info("Rendered fetch %s", url)
        html = await self.render_markup(url)
        links = extract_media_links(html)
        return ExtractionOutcome.found(links, self.method)
