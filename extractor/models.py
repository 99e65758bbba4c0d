"""Result types passed between the extraction strategies and the API."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

METHOD_HTTP = "http"
METHOD_BROWSER = "puppeteer"


@dataclass(frozen=True)
class MediaLinkSet:
    """HD and SD links found on one page; either or both may be missing."""

    hd_url: Optional[str] = None
    sd_url: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.hd_url and not self.sd_url

    @property
    def best_url(self) -> Optional[str]:
        return self.hd_url or self.sd_url or None


class OutcomeKind(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass(frozen=True)
class ExtractionOutcome:
    """Tagged result of one strategy attempt."""

    kind: OutcomeKind
    links: MediaLinkSet = field(default_factory=MediaLinkSet)
    method: Optional[str] = None
    error: Optional[BaseException] = None

    @classmethod
    def found(cls, links: MediaLinkSet, method: str) -> "ExtractionOutcome":
        # an empty set is never reported as found
        if links.is_empty:
            return cls.not_found(method)
        return cls(kind=OutcomeKind.FOUND, links=links, method=method)

    @classmethod
    def not_found(cls, method: Optional[str] = None) -> "ExtractionOutcome":
        return cls(kind=OutcomeKind.NOT_FOUND, method=method)

    @classmethod
    def failed(cls, error: BaseException, method: Optional[str] = None) -> "ExtractionOutcome":
        return cls(kind=OutcomeKind.FAILED, method=method, error=error)

    @property
    def is_found(self) -> bool:
        return self.kind is OutcomeKind.FOUND


@dataclass(frozen=True)
class ExtractionReport:
    """Final orchestrator result with timing."""

    outcome: ExtractionOutcome
    duration_ms: int

    @property
    def success(self) -> bool:
        return self.outcome.is_found

    @property
    def hd_url(self) -> Optional[str]:
        return self.outcome.links.hd_url

    @property
    def sd_url(self) -> Optional[str]:
        return self.outcome.links.sd_url

    @property
    def url(self) -> Optional[str]:
        return self.outcome.links.best_url

    @property
    def method(self) -> Optional[str]:
        return self.outcome.method if self.success else None
