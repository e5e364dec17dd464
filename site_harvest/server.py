"""
HTTP trigger API for SiteHarvest.

Routes:
  POST /api/crawl   validate the request, crawl, return the archive's URL
  GET  /public/...  static files (the produced archives)
"""
from __future__ import annotations

import asyncio
import json
from typing import Any, Optional

from aiohttp import web

from site_harvest.config import CrawlRequest, HarvestConfig
from site_harvest.crawler.renderer import PageRenderer
from site_harvest.engine import start_crawl
from site_harvest.errors import RequestValidationError
from site_harvest.logger import logger
from site_harvest.utils import ensure_directory

CONFIG_KEY = web.AppKey("config", HarvestConfig)
RENDERER_KEY = web.AppKey("renderer", object)

_FAILURE_MESSAGE = "An error occurred during the crawling process."


def _error(status: int, message: str) -> web.Response:
    return web.json_response({"error": message}, status=status)


async def handle_crawl(request: web.Request) -> web.Response:
    config = request.app[CONFIG_KEY]
    renderer: Optional[PageRenderer] = request.app.get(RENDERER_KEY)

    try:
        payload: Any = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _error(400, "Request body must be a JSON object.")

    try:
        crawl_request = CrawlRequest.parse(payload)
    except RequestValidationError as exc:
        logger.info("Rejected crawl request: %s", exc.message)
        return _error(400, exc.message)

    try:
        outcome = await start_crawl(crawl_request, config, renderer=renderer)
    except asyncio.TimeoutError:
        return _error(504, f"Crawl did not finish within {config.crawl_timeout} seconds.")
    except Exception as exc:
        logger.error("Error during crawling: %s", exc)
        return _error(500, _FAILURE_MESSAGE)

    return web.json_response(
        {
            "message": "Crawl completed",
            "downloadUrl": outcome.download_path,
            "runId": outcome.run_id,
            "pages": outcome.report.pages,
            "failures": len(outcome.report.failures),
        }
    )


def create_app(config: HarvestConfig, renderer: Optional[PageRenderer] = None) -> web.Application:
    """Build the aiohttp application; *renderer* replaces the HTTP renderer (tests)."""
    app = web.Application()
    app[CONFIG_KEY] = config
    if renderer is not None:
        app[RENDERER_KEY] = renderer
    ensure_directory(config.output_dir)
    app.router.add_post("/api/crawl", handle_crawl)
    app.router.add_static("/public", str(config.public_dir))
    return app


def run_server(config: HarvestConfig, host: Optional[str] = None, port: Optional[int] = None) -> None:
    host = host or config.host
    port = port or config.port
    logger.info("Server is running on http://%s:%d", host, port)
    web.run_app(create_app(config), host=host, port=port, print=None)


__all__ = ["create_app", "run_server", "handle_crawl", "CONFIG_KEY", "RENDERER_KEY"]
