# File: tests/test_renderer.py
# HttpPageRenderer and a full crawl run against a local aiohttp site.
from __future__ import annotations

import asyncio
import json
import zipfile
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from aiohttp import web

from conftest import serve_app
from site_harvest.config import CrawlRequest, HarvestConfig
from site_harvest.crawler.renderer import HttpPageRenderer, PageRenderer
from site_harvest.engine import start_crawl
from site_harvest.errors import RenderError


def html(body: str) -> web.Response:
    return web.Response(text=f"<html><body>{body}</body></html>", content_type="text/html")


@pytest_asyncio.fixture
async def local_site(unused_tcp_port: int) -> AsyncIterator[str]:
    app = web.Application()

    async def root(_):
        return html(
            '<p>Welcome</p><p>Intro</p>'
            '<a href="/docs">Docs</a><a href="/docs#top">Docs top</a>'
            '<a href="/admin/panel">Admin</a><a href="https://example.org/">Out</a>'
        )

    async def docs(_):
        return html('<h1>Docs</h1><p>Guide</p><a href="/docs/deep">Deep</a><a href="/">Home</a>')

    async def deep(_):
        return html('<p>Deep page</p><a href="/docs/deeper">Deeper</a>')

    async def deeper(_):
        return html("<p>Too deep</p>")

    async def admin(_):
        return html("<p>Secret</p>")

    async def moved(_):
        raise web.HTTPFound("/docs")

    async def broken(_):
        return web.Response(status=500, text="oops")

    async def plain(_):
        return web.Response(text="just text", content_type="text/plain")

    async def slow(_):
        await asyncio.sleep(2)
        return html("<p>slow</p>")

    app.router.add_get("/", root)
    app.router.add_get("/docs", docs)
    app.router.add_get("/docs/deep", deep)
    app.router.add_get("/docs/deeper", deeper)
    app.router.add_get("/admin/panel", admin)
    app.router.add_get("/moved", moved)
    app.router.add_get("/broken", broken)
    app.router.add_get("/plain", plain)
    app.router.add_get("/slow", slow)

    async for url in serve_app(app, unused_tcp_port):
        yield url


def test_http_renderer_satisfies_protocol(harvest_config):
    assert isinstance(HttpPageRenderer(harvest_config), PageRenderer)


@pytest.mark.asyncio()
async def test_render_extracts_text_and_links(local_site, harvest_config):
    async with HttpPageRenderer(harvest_config) as renderer:
        result = await renderer.render(f"{local_site}/", ["p"])

    assert result.text == "Welcome\n\nIntro"
    assert result.links == (
        f"{local_site}/docs",
        f"{local_site}/docs#top",
        f"{local_site}/admin/panel",
        "https://example.org/",
    )


@pytest.mark.asyncio()
async def test_render_follows_redirects(local_site, harvest_config):
    async with HttpPageRenderer(harvest_config) as renderer:
        result = await renderer.render(f"{local_site}/moved", ["h1"])
    assert result.url == f"{local_site}/moved"
    assert result.text == "Docs"
    assert f"{local_site}/docs/deep" in result.links


@pytest.mark.asyncio()
@pytest.mark.parametrize("path", ["/missing", "/broken"])
async def test_render_http_errors_raise(local_site, harvest_config, path):
    async with HttpPageRenderer(harvest_config) as renderer:
        with pytest.raises(RenderError) as info:
            await renderer.render(f"{local_site}{path}", ["p"])
    assert info.value.url.endswith(path)


@pytest.mark.asyncio()
async def test_render_non_html_is_empty(local_site, harvest_config):
    async with HttpPageRenderer(harvest_config) as renderer:
        result = await renderer.render(f"{local_site}/plain", ["p"])
    assert result.text == ""
    assert result.links == ()


@pytest.mark.asyncio()
async def test_render_timeout_raises(local_site, tmp_path):
    config = HarvestConfig(public_dir=tmp_path, output_dir=tmp_path / "out", timeout=0.3)
    async with HttpPageRenderer(config) as renderer:
        with pytest.raises(RenderError):
            await renderer.render(f"{local_site}/slow", ["p"])


@pytest.mark.asyncio()
async def test_render_connection_refused(harvest_config, unused_tcp_port):
    async with HttpPageRenderer(harvest_config) as renderer:
        with pytest.raises(RenderError):
            await renderer.render(f"http://localhost:{unused_tcp_port}/", ["p"])


@pytest.mark.asyncio()
async def test_session_closed_on_exit(harvest_config):
    renderer = HttpPageRenderer(harvest_config)
    async with renderer:
        assert not renderer.session.closed
    assert renderer.session.closed


@pytest.mark.asyncio()
async def test_start_crawl_against_live_site(local_site, harvest_config):
    request = CrawlRequest(url=f"{local_site}/", maxDepth=3, tags=["p"], blacklist=[f"{local_site}/admin"])
    outcome = await start_crawl(request, harvest_config, run_id="run-1")

    urls = [r.url for r in outcome.report.records]
    assert urls == [f"{local_site}/", f"{local_site}/docs", f"{local_site}/docs/deep"]
    assert outcome.download_path == "/public/crawled-data/run-1/crawled_data.zip"
    assert outcome.archive_path == harvest_config.output_dir / "run-1" / "crawled_data.zip"

    with zipfile.ZipFile(outcome.archive_path) as zf:
        names = set(zf.namelist())
        stem = f"localhost_{local_site.rsplit(':', 1)[1]}_docs"
        assert f"{stem}.txt" in names
        assert zf.read(f"{stem}.txt").decode("utf-8") == "Guide"
        meta = json.loads(zf.read(f"{stem}.metadata.json"))
        assert meta["metadataAttributes"]["sub_cate_1"] == "docs"
    assert len(names) == 6
