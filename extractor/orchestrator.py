from __future__ import annotations

import logging
import time
from typing import Awaitable, Callable, Protocol

from .browser import BrowserDriver, RenderedFetcher
from .config import Config
from .fetcher import DirectFetcher
from .models import ExtractionOutcome, ExtractionReport, OutcomeKind

logger = logging.getLogger(__name__)


class Strategy(Protocol):
    method: str

    async def fetch(self, ref: str) -> ExtractionOutcome: ...


async def _run_step(name: str, fetch: Callable[[str], Awaitable[ExtractionOutcome]], ref: str) -> ExtractionOutcome:
    """Run one strategy; an exception becomes a FAILED outcome carrying the error."""
    try:
        return await fetch(ref)
    except Exception as e:
        logger.debug("%s step raised %s", name, type(e).__name__, exc_info=True)
        return ExtractionOutcome.failed(e)


class Orchestrator:
    """
    Direct fetch first, rendered fetch as the only fallback.

      TRY_DIRECT   -> FOUND: done | NOT_FOUND/FAILED: TRY_RENDERED
      TRY_RENDERED -> FOUND: done | NOT_FOUND: total failure | FAILED: re-raise

    A failed direct step is recoverable. A failed rendered step is terminal and
    its original exception propagates to the caller.
    """

    def __init__(self, direct: Strategy, rendered: Strategy):
        self.direct = direct
        self.rendered = rendered

    @classmethod
    def from_config(cls, cfg: Config, driver: BrowserDriver) -> "Orchestrator":
        return cls(DirectFetcher(cfg), RenderedFetcher(cfg, driver))

    async def extract(self, ref: str) -> ExtractionReport:
        started = time.perf_counter()

        logger.info("Attempting HTTP extraction...")
        outcome = await _run_step("direct", self.direct.fetch, ref)

        if outcome.kind is OutcomeKind.FAILED:
            logger.warning("HTTP extraction failed (%s), trying browser render...", outcome.error)
        elif outcome.kind is OutcomeKind.NOT_FOUND:
            logger.warning("HTTP extraction found no video links, trying browser render...")

        if not outcome.is_found:
            outcome = await _run_step("rendered", self.rendered.fetch, ref)
            if outcome.kind is OutcomeKind.FAILED:
                logger.error("Browser render failed after %dms: %s", _elapsed_ms(started), outcome.error)
                raise outcome.error  # type: ignore[misc]

        report = ExtractionReport(outcome=outcome, duration_ms=_elapsed_ms(started))
        if report.success:
            logger.info("Success via %s in %dms", report.method, report.duration_ms)
            logger.info("  HD: %s, SD: %s", "Yes" if report.hd_url else "No", "Yes" if report.sd_url else "No")
        else:
            logger.info("Extraction failed after %dms", report.duration_ms)
        return report


def _elapsed_ms(started: float) -> int:
    return max(0, int(round((time.perf_counter() - started) * 1000)))
