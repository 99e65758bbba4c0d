"""
Locate the HD/SD media links embedded in a video page's markup.

A page carries the technical data of the requested video next to related and
promoted videos. In practice the requested video's entry comes after the
others, so for each quality tier the LAST occurrence of the winning pattern
is taken. This is an observed heuristic, not a guarantee.
"""

from __future__ import annotations

import logging
import re
from typing import Optional, Sequence

from .models import MediaLinkSet
from .utils import clean_url

logger = logging.getLogger(__name__)

# Priority order per tier; first pattern with any match wins.
HD_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r'"playable_url_quality_hd"\s*:\s*"([^"]+)"'),
    re.compile(r'"browser_native_hd_url"\s*:\s*"([^"]+)"'),
    # legacy pages
    re.compile(r'hd_src\s*:\s*"([^"]+)"'),
)

SD_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r'"playable_url"\s*:\s*"([^"]+)"'),
    re.compile(r'"browser_native_sd_url"\s*:\s*"([^"]+)"'),
    re.compile(r'sd_src\s*:\s*"([^"]+)"'),
)


def last_match(markup: str, pattern: re.Pattern) -> Optional[str]:
    """Cleaned capture of the last occurrence of pattern, or None."""
    matches = pattern.findall(markup)
    if not matches:
        return None
    return clean_url(matches[-1])


def first_tier_match(markup: str, patterns: Sequence[re.Pattern]) -> Optional[str]:
    for pattern in patterns:
        value = last_match(markup, pattern)
        if value:
            return value
    return None


def extract_media_links(markup: str) -> MediaLinkSet:
    if not markup:
        return MediaLinkSet()
    hd_url = first_tier_match(markup, HD_PATTERNS)
    sd_url = first_tier_match(markup, SD_PATTERNS)
    logger.debug("Pattern scan: hd=%s sd=%s", bool(hd_url), bool(sd_url))
    return MediaLinkSet(hd_url=hd_url, sd_url=sd_url)
