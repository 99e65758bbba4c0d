import pytest

from extractor.models import ExtractionOutcome, MediaLinkSet
from extractor.orchestrator import Orchestrator
from extractor.utils import RenderError, UpstreamFetchError

HD = "https://cdn.example/hd.mp4"
SD = "https://cdn.example/sd.mp4"


class StubStrategy:
    def __init__(self, method, result=None, raises=None):
        self.method = method
        self.result = result
        self.raises = raises
        self.calls = []

    async def fetch(self, ref):
        self.calls.append(ref)
        if self.raises is not None:
            raise self.raises
        if self.result is None:
            return ExtractionOutcome.not_found(self.method)
        return ExtractionOutcome.found(self.result, self.method)


@pytest.mark.asyncio
async def test_direct_success_skips_render():
    direct = StubStrategy("http", MediaLinkSet(hd_url=HD, sd_url=SD))
    rendered = StubStrategy("puppeteer", MediaLinkSet(hd_url="unused"))

    report = await Orchestrator(direct, rendered).extract("https://www.facebook.com/reel/1")

    assert report.success is True
    assert report.method == "http"
    assert report.hd_url == HD
    assert report.sd_url == SD
    assert report.url == HD
    assert report.duration_ms >= 0
    assert rendered.calls == []


@pytest.mark.asyncio
async def test_direct_empty_falls_back_once():
    direct = StubStrategy("http")
    rendered = StubStrategy("puppeteer", MediaLinkSet(sd_url=SD))

    report = await Orchestrator(direct, rendered).extract("https://www.facebook.com/reel/1")

    assert report.success is True
    assert report.method == "puppeteer"
    assert report.hd_url is None
    assert report.url == SD
    assert direct.calls == rendered.calls == ["https://www.facebook.com/reel/1"]


@pytest.mark.asyncio
async def test_direct_error_is_recoverable():
    direct = StubStrategy("http", raises=UpstreamFetchError("HTTP 403 for https://www.facebook.com/reel/1"))
    rendered = StubStrategy("puppeteer", MediaLinkSet(hd_url=HD))

    report = await Orchestrator(direct, rendered).extract("https://www.facebook.com/reel/1")

    assert report.success is True
    assert report.method == "puppeteer"
    assert len(rendered.calls) == 1


@pytest.mark.asyncio
async def test_both_empty_is_total_failure():
    report = await Orchestrator(StubStrategy("http"), StubStrategy("puppeteer")).extract(
        "https://www.facebook.com/reel/1"
    )

    assert report.success is False
    assert report.method is None
    assert report.url is None
    assert report.duration_ms >= 0


@pytest.mark.asyncio
async def test_render_error_propagates_unchanged():
    err = RenderError("Timeout 30000ms exceeded")
    direct = StubStrategy("http", raises=UpstreamFetchError("HTTP 500"))
    rendered = StubStrategy("puppeteer", raises=err)

    with pytest.raises(RenderError) as excinfo:
        await Orchestrator(direct, rendered).extract("https://www.facebook.com/reel/1")
    assert excinfo.value is err


def test_from_config_wires_both_strategies():
    from extractor.browser import BrowserDriver, RenderedFetcher
    from extractor.config import load_config
    from extractor.fetcher import DirectFetcher

    cfg = load_config()
    driver = BrowserDriver(cfg)
    orch = Orchestrator.from_config(cfg, driver)

    assert isinstance(orch.direct, DirectFetcher)
    assert isinstance(orch.rendered, RenderedFetcher)
    assert orch.rendered.driver is driver
    assert orch.direct.method == "http"
    assert orch.rendered.method == "puppeteer"
    assert driver.started is False
