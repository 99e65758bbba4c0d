from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Optional, Tuple

# ========== Environment & Logging helpers ==========

def getenv_str(name: str, default: str) -> str:
    v = os.getenv(name)
    return v if v is not None and v.strip() else default

def getenv_int(name: str, default: int, min_val: Optional[int] = None, max_val: Optional[int] = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        val = int(raw)
    except ValueError:
        return default
    if min_val is not None:
        val = max(min_val, val)
    if max_val is not None:
        val = min(max_val, val)
    return val

def getenv_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


# parse CSV-ish envs into tuples (trim blanks)
def getenv_csv(name: str, default_csv: str) -> Tuple[str, ...]:
    raw = getenv_str(name, default_csv)
    parts = [x.strip() for x in raw.split(",")]
    return tuple(p for p in parts if p)

def init_logging(level: int | str = logging.INFO, log_path: Optional[Path] = None) -> None:
    """
    Console logger, plus a file handler when log_path is given.
    Call once at process start (the CLI and the app lifespan both do).
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    fmt = "%(levelname)s %(asctime)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))
    logging.basicConfig(level=level, format=fmt, datefmt=datefmt, handlers=handlers)
    # basicConfig is a no-op once root has handlers; the level still applies
    logging.getLogger().setLevel(level)

# ========== Exceptions ==========

class ValidationError(Exception):
    """Missing or malformed caller input (reported as 400, never retried)."""

class UpstreamFetchError(Exception):
    """Direct fetch failed: network error, timeout or non-2xx status."""

class RenderError(Exception):
    """Headless browser launch or navigation failed."""

# ========== Input validation ==========

MISSING_URL_MESSAGE = "Missing required parameter: url"
INVALID_URL_MESSAGE = "Invalid URL: Must be a Facebook video URL"

# Plain substring tokens, matched anywhere in the link.
SITE_DOMAIN_TOKENS: Tuple[str, ...] = ("facebook.com", "fb.com")

def validate_page_reference(url: Optional[str]) -> str:
    if not url:
        raise ValidationError(MISSING_URL_MESSAGE)
    if not any(token in url for token in SITE_DOMAIN_TOKENS):
        raise ValidationError(INVALID_URL_MESSAGE)
    return url

# ========== URL normalization ==========

_ALT_HOST_RE = re.compile(r"://(?:m|web|touch)\.facebook\.com(?=[/:?#]|$)", re.IGNORECASE)
_SHARE_VIDEO_SEGMENT = "/share/v/"
_REEL_SEGMENT = "/reel/"

def normalize_url(url: str) -> str:
    """
    Canonical www form of a page link:
      - m./web./touch. hosts -> www. (only right after the scheme separator)
      - /share/v/<id> -> /reel/<id>, the form the crawler-facing page serves
    """
    url = _ALT_HOST_RE.sub("://www.facebook.com", url)
    return url.replace(_SHARE_VIDEO_SEGMENT, _REEL_SEGMENT)

# ========== Escaped-string cleanup ==========

_ESCAPES: Tuple[Tuple[re.Pattern, str], ...] = (
    (re.compile(r"\\u0025", re.IGNORECASE), "%"),
    (re.compile(r"\\u003C", re.IGNORECASE), "<"),
    (re.compile(r"\\u003E", re.IGNORECASE), ">"),
    (re.compile(r"\\u0026", re.IGNORECASE), "&"),
    (re.compile(r"\\/"), "/"),
    (re.compile(r'\\"'), '"'),
)

def clean_url(value: Optional[str]) -> Optional[str]:
    """Undo the JSON-in-HTML escaping used for embedded media links."""
    if not value:
        return None
    for pattern, repl in _ESCAPES:
        value = pattern.sub(repl, value)
    return value or None
