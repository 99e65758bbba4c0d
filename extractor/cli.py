"""Command-line entry point: run the API server or resolve a single link."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from typing import Iterable, Optional, Sequence

from .browser import BrowserDriver
from .config import load_config
from .orchestrator import Orchestrator
from .utils import ValidationError, init_logging, validate_page_reference

logger = logging.getLogger(__name__)

COMMANDS = ("serve", "extract")


def _ensure_command_prefix(argv: Sequence[str], commands: Iterable[str]) -> Sequence[str]:
    if not argv:
        return argv
    first = argv[0]
    if first in commands or first.startswith("-"):
        return argv
    return ("extract", *argv)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="fb-extractor",
        description="Resolve Facebook video pages to direct CDN links (HTTP-first, browser fallback)",
    )
    sub = p.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None, help="Bind address (default: $HOST or 0.0.0.0)")
    serve.add_argument("--port", type=int, default=None, help="Listen port (default: $PORT or 3333)")
    serve.add_argument("--log-level", default=None, help="Log level (default: $LOG_LEVEL or INFO)")

    ext = sub.add_parser("extract", help="Resolve one page link and print the JSON result")
    ext.add_argument("url", help="Facebook video/reel/share link")
    ext.add_argument("--verbose", action="store_true", help="Enable verbose logging")

    return p.parse_args(list(argv))


async def _extract_once(url: str) -> tuple[int, dict]:
    from .app import report_payload

    cfg = load_config()
    driver = BrowserDriver(cfg)
    orchestrator = Orchestrator.from_config(cfg, driver)
    try:
        report = await orchestrator.extract(url)
    except Exception as e:
        return 1, {"success": False, "error": str(e) or type(e).__name__}
    finally:
        await driver.stop()
    return (0 if report.success else 1), report_payload(report)


def _run_extract(args: argparse.Namespace) -> int:
    cfg = load_config()
    init_logging(logging.DEBUG if args.verbose else cfg.log_level, cfg.log_file)
    try:
        url = validate_page_reference(args.url)
    except ValidationError as e:
        print(json.dumps({"success": False, "error": str(e)}))
        return 2
    code, payload = asyncio.run(_extract_once(url))
    print(json.dumps(payload, indent=2))
    return code


def _run_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from .app import create_app

    cfg = load_config()
    cfg = dataclasses.replace(
        cfg,
        host=args.host or cfg.host,
        port=args.port or cfg.port,
        log_level=(args.log_level or cfg.log_level).upper(),
    )
    logger.info("Starting server on %s:%d", cfg.host, cfg.port)
    uvicorn.run(create_app(cfg), host=cfg.host, port=cfg.port, log_level=cfg.log_level.lower())
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    argv = _ensure_command_prefix(sys.argv[1:] if argv is None else argv, COMMANDS)
    args = _parse_args(argv)
    if args.command == "serve":
        return _run_serve(args)
    return _run_extract(args)


if __name__ == "__main__":
    raise SystemExit(main())
