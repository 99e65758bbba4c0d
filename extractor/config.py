from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional, Tuple
from .utils import getenv_bool, getenv_int, getenv_str, getenv_csv

# ---------- Service identity ----------
SERVICE_NAME = "FB Video CDN Extractor API"
DEFAULT_VERSION = "2.0.0"

# Crawler identity the target site serves link-preview markup to
DEFAULT_USER_AGENT = "facebookexternalhit/1.1"

DEFAULT_BLOCKED_RESOURCE_TYPES = "image,stylesheet,font,media"


# ---------- Config dataclass ----------
@dataclass(frozen=True)
class Config:
    # Server
    host: str
    port: int
    service_name: str
    service_version: str

    # Identity
    user_agent: str

    # Direct fetch (httpx)
    http_timeout_ms: int
    http_max_redirects: int
    direct_http2: bool

    # Rendered fetch (Playwright)
    render_timeout_ms: int
    render_settle_ms: int
    render_wait_until: Literal["load", "domcontentloaded", "networkidle", "commit"]
    blocked_resource_types: Tuple[str, ...]
    chromium_executable_path: Optional[str]
    browser_args_extra: Tuple[str, ...]

    # Logging
    log_level: str
    log_file: Optional[Path]


# ---------- Loader ----------
def load_config() -> Config:
    log_file = getenv_str("LOG_FILE", "")

    cfg = Config(
        host=getenv_str("HOST", "0.0.0.0"),
        port=getenv_int("PORT", 3333, 1, 65535),
        service_name=SERVICE_NAME,
        service_version=getenv_str("SERVICE_VERSION", DEFAULT_VERSION),

        user_agent=getenv_str("SCRAPER_USER_AGENT", DEFAULT_USER_AGENT),

        # direct fetch
        http_timeout_ms=getenv_int("HTTP_TIMEOUT_MS", 10000, 500, 120000),
        http_max_redirects=getenv_int("HTTP_MAX_REDIRECTS", 10, 1, 30),
        direct_http2=getenv_bool("DIRECT_HTTP2", False),

        # rendered fetch
        render_timeout_ms=getenv_int("RENDER_TIMEOUT_MS", 30000, 1000, 180000),
        # Deferred scripts fill the embedded video data after DOMContentLoaded.
        render_settle_ms=getenv_int("RENDER_SETTLE_MS", 2000, 0, 30000),
        render_wait_until=getenv_str("RENDER_WAIT_UNTIL", "domcontentloaded"),
        blocked_resource_types=getenv_csv("BLOCKED_RESOURCE_TYPES", DEFAULT_BLOCKED_RESOURCE_TYPES),
        chromium_executable_path=getenv_str("CHROMIUM_EXECUTABLE_PATH", "") or None,
        browser_args_extra=getenv_csv("BROWSER_ARGS_EXTRA", ""),

        # logging
        log_level=getenv_str("LOG_LEVEL", "INFO"),
        log_file=Path(log_file) if log_file else None,
    )
    return cfg
