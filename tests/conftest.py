# File: tests/conftest.py
import asyncio
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Dict, Iterable, List, Sequence, Tuple

import pytest
from aiohttp import web

from site_harvest.config import HarvestConfig
from site_harvest.crawler.models import CrawlRecord, RenderResult
from site_harvest.errors import PersistenceError, RenderError
from site_harvest.parser.html_parser import parse_html


def pytest_configure(config):
    """Register custom markers so that `--strict-markers` does not fail."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')",
    )


# --------------------------------------------------------------------------- #
#                               Fake renderers                                #
# --------------------------------------------------------------------------- #


class GraphRenderer:
    """Renderer over an in-memory link graph: url -> (text, links)."""

    def __init__(
        self,
        pages: Dict[str, Tuple[str, Sequence[str]]],
        failing: Iterable[str] = (),
        delay: float = 0.0,
    ) -> None:
        self.pages = pages
        self.failing = set(failing)
        self.delay = delay
        self.calls: List[str] = []

    async def render(self, url: str, selectors: Sequence[str]) -> RenderResult:
        self.calls.append(url)
        await asyncio.sleep(self.delay)
        if url in self.failing:
            raise RenderError(url, "navigation failed")
        if url not in self.pages:
            raise RenderError(url, "HTTP 404")
        text, links = self.pages[url]
        return RenderResult(url=url, text=text, links=tuple(links))


class HtmlSiteRenderer:
    """Renderer over static markup, extracted with the real HTML parser."""

    def __init__(self, site: Dict[str, str]) -> None:
        self.site = site
        self.calls: List[str] = []

    async def render(self, url: str, selectors: Sequence[str]) -> RenderResult:
        self.calls.append(url)
        if url not in self.site:
            raise RenderError(url, "HTTP 404")
        page = parse_html(self.site[url], url, selectors)
        return RenderResult(url=url, text=page.text, links=tuple(page.links), title=page.title)


class ListSink:
    """Collects records in memory; optionally fails on the n-th write."""

    def __init__(self, fail_on: int | None = None) -> None:
        self.records: List[CrawlRecord] = []
        self.fail_on = fail_on

    def write(self, record: CrawlRecord):
        if self.fail_on is not None and len(self.records) + 1 >= self.fail_on:
            raise PersistenceError("disk full")
        self.records.append(record)
        return record.url, record.url


# --------------------------------------------------------------------------- #
#                                  Fixtures                                   #
# --------------------------------------------------------------------------- #


@pytest.fixture()
def harvest_config(tmp_path: Path) -> HarvestConfig:
    """Config writing everything below *tmp_path*."""
    public = tmp_path / "public"
    return HarvestConfig(
        public_dir=public,
        output_dir=public / "crawled-data",
        timeout=2.0,
        user_agent="TestAgent/1.0",
    )


@pytest.fixture()
def five_page_site() -> Dict[str, Tuple[str, Sequence[str]]]:
    """Seed plus four pages, with a cycle back to the seed."""
    return {
        "https://site.com": ("home", ["https://site.com/a", "https://site.com/b"]),
        "https://site.com/a": ("page a", ["https://site.com/a/1", "https://site.com"]),
        "https://site.com/a/1": ("page a1", ["https://site.com/a"]),
        "https://site.com/b": ("page b", ["https://site.com/b/1", "https://site.com/a"]),
        "https://site.com/b/1": ("page b1", []),
    }


async def serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "localhost", port)
    await site.start()
    try:
        yield f"http://localhost:{port}"
    finally:
        await runner.cleanup()
