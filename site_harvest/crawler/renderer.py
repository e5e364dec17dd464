# site_harvest/crawler/renderer.py
"""
Page renderers: load a URL and return extracted text plus outbound links.

The crawl engine only depends on the :class:`PageRenderer` protocol; the
bundled :class:`HttpPageRenderer` fetches pages with aiohttp and parses them
with BeautifulSoup (no JavaScript execution).
"""
from __future__ import annotations

import asyncio
from typing import Optional, Protocol, Sequence, runtime_checkable

from aiohttp import ClientError, ClientSession, ClientTimeout

from site_harvest.config import HarvestConfig
from site_harvest.crawler.models import RenderResult
from site_harvest.errors import RenderError
from site_harvest.logger import get_logger
from site_harvest.parser.html_parser import parse_html

_HTML_TYPES = ("text/html", "application/xhtml+xml")


@runtime_checkable
class PageRenderer(Protocol):
    """Capability consumed by the crawl engine."""

    async def render(self, url: str, selectors: Sequence[str]) -> RenderResult:
        """Render *url*; raise :class:`RenderError` if the page cannot be produced."""
        ...


class HttpPageRenderer:
    """Renderer backed by one ``aiohttp.ClientSession`` per crawl run."""

    def __init__(self, config: HarvestConfig, session: Optional[ClientSession] = None) -> None:
        self.config = config
        self.session = session
        self._owns_session = session is None
        self.logger = get_logger("renderer")

    async def __aenter__(self) -> HttpPageRenderer:
        if self.session is None:
            self.session = ClientSession(
                timeout=ClientTimeout(total=self.config.timeout),
                headers={"User-Agent": self.config.user_agent},
                raise_for_status=False,
            )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    async def render(self, url: str, selectors: Sequence[str]) -> RenderResult:
        if not self.session:
            raise RuntimeError("Session not initialized")
        try:
            async with self.session.get(url, allow_redirects=True) as resp:
                if resp.status >= 400:
                    raise RenderError(url, f"HTTP {resp.status}")
                mime = resp.headers.get("Content-Type", "").split(";", 1)[0].strip().lower()
                final_url = str(resp.url)
                if mime and mime not in _HTML_TYPES:
                    self.logger.debug("Skipping non-HTML %s (%s)", url, mime)
                    return RenderResult(url=url, text="")
                html = await resp.text(errors="replace")
        except asyncio.TimeoutError as exc:
            raise RenderError(url, f"timed out after {self.config.timeout} s") from exc
        except ClientError as exc:
            raise RenderError(url, f"{type(exc).__name__}: {exc}") from exc

        try:
            page = parse_html(html, final_url, selectors)
        except Exception as exc:
            raise RenderError(url, f"extraction failed: {exc}") from exc
        return RenderResult(url=url, text=page.text, links=tuple(page.links), title=page.title)


__all__ = ["PageRenderer", "HttpPageRenderer"]
