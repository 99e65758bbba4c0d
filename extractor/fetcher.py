from __future__ import annotations

import logging
from typing import Optional

import httpx

from .config import Config
from .models import ExtractionOutcome, METHOD_HTTP
from .patterns import extract_media_links
from .utils import UpstreamFetchError, normalize_url

logger = logging.getLogger(__name__)


def direct_headers(cfg: Config) -> dict[str, str]:
    return {
        "User-Agent": cfg.user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.5",
        "Accept-Encoding": "gzip, deflate",
        "Connection": "keep-alive",
    }


def httpx_client(cfg: Config, transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    """
    Preconfigured AsyncClient for a single direct fetch: spoofed crawler headers,
    redirects followed, one overall timeout for the request.
    """
    kwargs = dict(
        timeout=httpx.Timeout(cfg.http_timeout_ms / 1000.0),
        headers=direct_headers(cfg),
        follow_redirects=True,
        max_redirects=cfg.http_max_redirects,
    )
    if transport is not None:
        return httpx.AsyncClient(transport=transport, **kwargs)
    return httpx.AsyncClient(http2=cfg.direct_http2, **kwargs)


class DirectFetcher:
    """Single unrendered GET of the page, scanned for media links."""

    method = METHOD_HTTP

    def __init__(self, cfg: Config, *, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.cfg = cfg
        self._transport = transport

    async def fetch_markup(self, url: str) -> str:
        async with httpx_client(self.cfg, self._transport) as client:
            try:
                r = await client.get(url)
            except httpx.TimeoutException as e:
                raise UpstreamFetchError(f"Timeout after {self.cfg.http_timeout_ms}ms for {url}") from e
            except httpx.HTTPError as e:
                raise UpstreamFetchError(f"{type(e).__name__}: {e}") from e

        if not r.is_success:
            raise UpstreamFetchError(f"HTTP {r.status_code} for {url}")
        return r.text or ""

    async def fetch(self, ref: str) -> ExtractionOutcome:
        url = normalize_url(ref)
        logger.info("Direct fetch %s", url)
        html = await self.fetch_markup(url)
        links = extract_media_links(html)
        return ExtractionOutcome.found(links, self.method)
