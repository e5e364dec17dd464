from __future__ import annotations

import asyncio
import random
import time
from typing import Iterator, List, Optional, Protocol, Sequence, Set, Tuple

from aiohttp import ClientError

from site_harvest.crawler.metadata import derive_metadata
from site_harvest.crawler.models import (
    ContentRecord,
    CrawlFailure,
    CrawlNode,
    CrawlRecord,
    CrawlReport,
    RenderResult,
)
from site_harvest.crawler.renderer import PageRenderer
from site_harvest.crawler.url_filter import filter_links, is_blacklisted
from site_harvest.errors import RenderError
from site_harvest.logger import get_logger
from site_harvest.utils import origin_of

__all__ = ("VisitedSet", "RecordSink", "CrawlEngine")


class VisitedSet:
    """URLs already dispatched during one crawl run. Grows monotonically."""

    __slots__ = ("_urls",)

    def __init__(self) -> None:
        self._urls: Set[str] = set()

    def claim(self, url: str) -> bool:
        """Mark *url* visited; False if someone claimed it first.

        Check and insert run without an ``await`` in between, so on one event
        loop two workers can never both claim the same URL.
        """
        if url in self._urls:
            return False
        self._urls.add(url)
        return True

    def __contains__(self, url: object) -> bool:
        return url in self._urls

    def __len__(self) -> int:
        return len(self._urls)

    def __iter__(self) -> Iterator[str]:
        return iter(self._urls)


class RecordSink(Protocol):
    def write(self, record: CrawlRecord) -> Tuple[object, object]:
        ...


class CrawlEngine:
    """Same-origin crawler with depth bound, dedup and per-page failure isolation.

    ``concurrency == 1`` walks the site depth-first with an explicit stack:
    each link's subtree is finished before its next sibling starts. A larger
    value runs a fixed pool of workers over a shared queue; records are then
    emitted in completion order.
    """

    def __init__(
        self,
        renderer: PageRenderer,
        *,
        max_depth: int,
        tag_selectors: Sequence[str],
        blacklist: Sequence[str] = (),
        sink: Optional[RecordSink] = None,
        concurrency: int = 1,
        retry_times: int = 0,
        retry_backoff: float = 1.0,
        render_timeout: float = 60.0,
    ) -> None:
        if max_depth < 1:
            raise ValueError("max_depth must be >= 1")
        if not tag_selectors:
            raise ValueError("tag_selectors must not be empty")
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self.renderer = renderer
        self.max_depth = max_depth
        self.tag_selectors = tuple(tag_selectors)
        self.blacklist = tuple(blacklist)
        self.sink = sink
        self.concurrency = concurrency
        self.retry_times = retry_times
        self.retry_backoff = retry_backoff
        self.render_timeout = render_timeout
        self.logger = get_logger("crawler")
        self._stopping = asyncio.Event()
        self._visited = VisitedSet()
        self._origin = ""
        self._report: Optional[CrawlReport] = None

    # ------------------------------------------------------------------ #
    # public API                                                          #
    # ------------------------------------------------------------------ #

    async def crawl(self, seed_url: str) -> CrawlReport:
        """Crawl from *seed_url* (depth 1) and return the run's report."""
        self.logger.info("Crawl start: %s (max depth %d)", seed_url, self.max_depth)
        start = time.monotonic()
        self._stopping.clear()
        self._visited = VisitedSet()
        self._origin = origin_of(seed_url)
        report = self._report = CrawlReport(seed_url=seed_url, max_depth=self.max_depth)
        try:
            if self.concurrency == 1:
                await self._crawl_sequential(CrawlNode(seed_url, 1))
            else:
                await self._crawl_parallel(CrawlNode(seed_url, 1))
        finally:
            report.visited = len(self._visited)
            report.duration = time.monotonic() - start
            report.stopped = self._stopping.is_set()
        self.logger.info(
            "Crawl finished: %d pages saved, %d empty, %d failed, %d visited in %.2f s",
            report.pages, len(report.empty_pages), len(report.failures), report.visited, report.duration,
        )
        return report

    def stop(self) -> None:
        """Stop dispatching new renders; pages already rendering complete normally."""
        self._stopping.set()

    @property
    def visited(self) -> VisitedSet:
        return self._visited

    # ------------------------------------------------------------------ #
    # traversal                                                           #
    # ------------------------------------------------------------------ #

    async def _crawl_sequential(self, seed: CrawlNode) -> None:
        stack: List[CrawlNode] = [seed]
        while stack:
            node = stack.pop()
            links = await self._process(node)
            stack.extend(CrawlNode(link, node.depth + 1) for link in reversed(links))

    async def _crawl_parallel(self, seed: CrawlNode) -> None:
        queue: asyncio.Queue[CrawlNode] = asyncio.Queue()
        await queue.put(seed)
        workers = [asyncio.create_task(self._worker(queue)) for _ in range(self.concurrency)]
        drained = asyncio.create_task(queue.join())
        try:
            done, _ = await asyncio.wait([drained, *workers], return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                if task is not drained:
                    # workers only finish by raising (e.g. PersistenceError)
                    task.result()
        finally:
            for task in (*workers, drained):
                task.cancel()
            await asyncio.gather(*workers, drained, return_exceptions=True)

    async def _worker(self, queue: asyncio.Queue[CrawlNode]) -> None:
        while True:
            node = await queue.get()
            try:
                for link in await self._process(node):
                    queue.put_nowait(CrawlNode(link, node.depth + 1))
            finally:
                queue.task_done()

    async def _process(self, node: CrawlNode) -> List[str]:
        """Handle one node; return the links to expand next."""
        url, depth = node.url, node.depth
        if depth > self.max_depth or self._stopping.is_set():
            return []
        if is_blacklisted(url, self.blacklist) or not self._visited.claim(url):
            return []

        self.logger.info("Crawling %s (depth %d)", url, depth)
        result = await self._render(node)
        if result is None:
            return []

        if result.text:
            self._emit(CrawlRecord(ContentRecord(url, result.text), derive_metadata(url)))
        else:
            self.logger.warning("No content found for: %s", url)
            self._report.empty_pages.append(url)

        if depth >= self.max_depth:
            return []
        return filter_links(result.links, self._origin, self.blacklist, self._visited)

    async def _render(self, node: CrawlNode) -> Optional[RenderResult]:
        attempts = 0
        while True:
            try:
                return await asyncio.wait_for(
                    self.renderer.render(node.url, self.tag_selectors), timeout=self.render_timeout
                )
            except (RenderError, ClientError, asyncio.TimeoutError) as exc:
                reason = str(exc) or f"timed out after {self.render_timeout} s"
                attempts += 1
                if attempts > self.retry_times or self._stopping.is_set():
                    self.logger.error("Error processing URL %s: %s", node.url, reason)
                    self._report.failures.append(CrawlFailure(node.url, node.depth, reason))
                    return None
                backoff = min(60.0, self.retry_backoff * (2**attempts + random.random()))
                self.logger.debug("Retry %d/%d for %s after %.2f s", attempts, self.retry_times, node.url, backoff)
                await asyncio.sleep(backoff)
            except Exception as exc:
                # a broken renderer must not take the rest of the crawl down
                self.logger.exception("Renderer crashed on %s", node.url)
                self._report.failures.append(CrawlFailure(node.url, node.depth, f"{type(exc).__name__}: {exc}"))
                return None

    def _emit(self, record: CrawlRecord) -> None:
        if self.sink is not None:
            self.sink.write(record)
        self._report.records.append(record)
