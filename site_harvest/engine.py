# File: site_harvest/engine.py
"""site_harvest.engine: orchestration of one crawl run (renderer → engine → sink → archive)."""

from __future__ import annotations

import asyncio
import secrets
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from site_harvest.config import CrawlRequest, HarvestConfig
from site_harvest.crawler.crawler import CrawlEngine
from site_harvest.crawler.models import CrawlReport
from site_harvest.crawler.renderer import HttpPageRenderer, PageRenderer
from site_harvest.logger import logger
from site_harvest.storage.file_sink import FileRecordSink

__all__ = ["CrawlOutcome", "new_run_id", "start_crawl"]


@dataclass(slots=True)
class CrawlOutcome:
    """Everything a caller needs after a crawl: where the archive is and what went in."""

    run_id: str
    run_dir: Path
    archive_path: Path
    download_path: str
    report: CrawlReport
    files: List[Path] = field(default_factory=list)


def new_run_id() -> str:
    return f"{datetime.now():%Y%m%d-%H%M%S}-{secrets.token_hex(3)}"


def _download_path(config: HarvestConfig, archive_path: Path) -> str:
    relative = archive_path.resolve().relative_to(config.public_dir.resolve())
    return "/public/" + relative.as_posix()


async def start_crawl(
    request: CrawlRequest,
    config: HarvestConfig,
    *,
    renderer: Optional[PageRenderer] = None,
    run_id: Optional[str] = None,
) -> CrawlOutcome:
    """Run one crawl for *request* and package the results.

    Raises ``asyncio.TimeoutError`` when ``config.crawl_timeout`` elapses and
    :class:`~site_harvest.errors.PersistenceError` when files cannot be
    written; render failures are absorbed into the report.
    """
    run_id = run_id or new_run_id()
    run_dir = config.output_dir / run_id
    sink = FileRecordSink(run_dir)
    logger.info("Run %s: crawling %s into %s", run_id, request.url, run_dir)

    async def _runner(active: PageRenderer) -> CrawlReport:
        engine = CrawlEngine(
            active,
            max_depth=request.max_depth,
            tag_selectors=request.tags,
            blacklist=request.blacklist,
            sink=sink,
            concurrency=config.concurrency,
            retry_times=config.retry_times,
            render_timeout=config.timeout,
        )
        crawl = engine.crawl(request.url)
        if config.crawl_timeout:
            return await asyncio.wait_for(crawl, timeout=config.crawl_timeout)
        return await crawl

    try:
        if renderer is not None:
            report = await _runner(renderer)
        else:
            async with HttpPageRenderer(config) as http_renderer:
                report = await _runner(http_renderer)
    except asyncio.TimeoutError:
        logger.error("Run %s did not finish within %s seconds", run_id, config.crawl_timeout)
        raise

    archive_path = sink.archive(run_dir / config.archive_name)
    return CrawlOutcome(
        run_id=run_id,
        run_dir=run_dir,
        archive_path=archive_path,
        download_path=_download_path(config, archive_path),
        report=report,
        files=list(sink.files),
    )
