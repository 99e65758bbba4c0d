"""
FastAPI application exposing the extractor.

Endpoints:
    GET /health       - liveness with process uptime and version
    GET /             - service description
    GET /api/extract  - resolve a Facebook video page to its CDN links
"""

from __future__ import annotations

import logging
import os
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import psutil
from fastapi import APIRouter, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .browser import BrowserDriver
from .config import Config, load_config
from .models import ExtractionReport
from .orchestrator import Orchestrator
from .utils import ValidationError, init_logging, validate_page_reference

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Could not extract video URL. The video may be private or deleted."

# wall-clock start of the process, not of this import
_PROCESS_STARTED = psutil.Process(os.getpid()).create_time()

router = APIRouter()


def _log_banner(cfg: Config) -> None:
    logger.info("=" * 50)
    logger.info(cfg.service_name)
    logger.info("=" * 50)
    logger.info("Server running at: http://localhost:%d", cfg.port)
    logger.info("Endpoints:")
    logger.info("  GET /health          - Health check")
    logger.info("  GET /api/extract     - Extract video CDN URL")
    logger.info("Strategy: HTTP-first with headless browser fallback")
    logger.info("=" * 50)


@asynccontextmanager
async def lifespan(app: FastAPI):
    cfg: Config = app.state.config
    init_logging(cfg.log_level, cfg.log_file)
    _log_banner(cfg)
    try:
        yield
    finally:
        driver: Optional[BrowserDriver] = getattr(app.state, "driver", None)
        if driver is not None:
            await driver.stop()
        logger.info("Shutdown complete")


# ---------------------------
# Routes
# ---------------------------

@router.get("/health")
async def health(request: Request) -> Dict[str, Any]:
    cfg: Config = request.app.state.config
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        "uptime": round(max(0.0, time.time() - _PROCESS_STARTED), 3),
        "version": cfg.service_version,
    }


@router.get("/")
async def info(request: Request) -> Dict[str, Any]:
    cfg: Config = request.app.state.config
    return {
        "name": cfg.service_name,
        "version": cfg.service_version,
        "endpoints": {
            "GET /health": "Health check",
            "GET /api/extract?url=<FB_URL>": "Extract CDN URL from Facebook video (returns hd_url + sd_url)",
        },
    }


def report_payload(report: ExtractionReport) -> Dict[str, Any]:
    if report.success:
        return {
            "success": True,
            "hd_url": report.hd_url,
            "sd_url": report.sd_url,
            "url": report.url,
            "method": report.method,
            "duration_ms": report.duration_ms,
        }
    return {
        "success": False,
        "error": NOT_FOUND_MESSAGE,
        "duration_ms": report.duration_ms,
    }


@router.get("/api/extract")
async def extract(request: Request, url: Optional[str] = Query(default=None)):
    try:
        video_url = validate_page_reference(url)
    except ValidationError as e:
        return JSONResponse(status_code=400, content={"success": False, "error": str(e)})

    logger.info("Extraction request [%s]", datetime.now(timezone.utc).isoformat())
    logger.info("URL: %s", video_url)

    orchestrator: Orchestrator = request.app.state.orchestrator
    started = time.perf_counter()
    try:
        report = await orchestrator.extract(video_url)
    except Exception as e:
        duration = max(0, int(round((time.perf_counter() - started) * 1000)))
        logger.error("Error after %dms: %s", duration, e)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": str(e) or type(e).__name__, "duration_ms": duration},
        )

    return JSONResponse(status_code=200 if report.success else 404, content=report_payload(report))


# ---------------------------
# Application factory
# ---------------------------

def create_app(
    cfg: Optional[Config] = None,
    *,
    orchestrator: Optional[Orchestrator] = None,
    driver: Optional[BrowserDriver] = None,
) -> FastAPI:
    cfg = cfg or load_config()

    app = FastAPI(
        title=cfg.service_name,
        description="Direct CDN links for Facebook videos (HTTP-first, headless browser fallback)",
        version=cfg.service_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    if orchestrator is None:
        driver = driver or BrowserDriver(cfg)
        orchestrator = Orchestrator.from_config(cfg, driver)

    app.state.config = cfg
    app.state.driver = driver
    app.state.orchestrator = orchestrator

    app.include_router(router)
    return app


app = create_app()
