"""HTML parsing utilities for SiteHarvest.

The renderer hands raw markup to :func:`parse_html`, which exposes what the
crawler needs from a page:

* title - document <title> text or ``""`` if absent.
* text  - trimmed text of every element matching the caller's selectors,
  selectors taken in the given order, elements in document order, blocks
  joined with a blank line.
* links - absolute URLs of all ``<a href>`` anchors, resolved against the
  document base (``<base href>`` when present, else the page URL).

Selectors are CSS selectors (a bare tag name such as ``"p"`` is the common
case) evaluated by BeautifulSoup's ``select``.
"""
from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag

__all__: Sequence[str] = ("ParsedPage", "parse_html", "extract_text", "extract_links", "BLOCK_SEPARATOR")

BLOCK_SEPARATOR = "\n\n"

_INVISIBLE_TAGS = ("script", "style", "noscript", "template")
_BLOCK_TAGS = (
    "address", "article", "aside", "blockquote", "dd", "div", "dl", "dt", "figcaption", "figure",
    "footer", "form", "h1", "h2", "h3", "h4", "h5", "h6", "header", "hr", "li", "main", "nav",
    "ol", "p", "pre", "section", "table", "tr", "ul",
)
_INLINE_WS_RE = re.compile(r"[ \t\r\f\v]+")


@dataclass(slots=True)
class ParsedPage:
    """Lightweight representation of an HTML page."""

    url: str
    title: str
    text: str
    links: list[str] = field(default_factory=list)


def _element_text(element: Tag) -> str:
    """Approximate ``innerText``: one line per block, inline whitespace collapsed, blank lines dropped."""
    lines = (_INLINE_WS_RE.sub(" ", line).strip() for line in element.get_text().splitlines())
    return "\n".join(line for line in lines if line)


def extract_text(soup: BeautifulSoup, selectors: Sequence[str]) -> str:
    """Join the non-empty text of all elements matching *selectors*."""
    blocks: list[str] = []
    for selector in selectors:
        for element in soup.select(selector):
            text = _element_text(element)
            if text:
                blocks.append(text)
    return BLOCK_SEPARATOR.join(blocks)


def extract_links(soup: BeautifulSoup, base_url: str) -> list[str]:
    """Absolute targets of every anchor, in document order (duplicates kept)."""
    base_tag = soup.find("base", href=True)
    if isinstance(base_tag, Tag) and isinstance(base_tag.get("href"), str):
        base_url = urljoin(base_url, base_tag["href"].strip())

    links: list[str] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        links.append(urljoin(base_url, href_val.strip()))
    return links


def parse_html(html: str, base_url: str, selectors: Sequence[str]) -> ParsedPage:
    """Parse *html* fetched from *base_url* and extract text for *selectors*."""
    soup = BeautifulSoup(html, "html.parser")

    title_tag = soup.find("title")
    title = title_tag.get_text(strip=True) if title_tag else ""

    for element in soup(list(_INVISIBLE_TAGS)):
        element.decompose()
    for br in soup.find_all("br"):
        br.replace_with("\n")
    # Block boundaries become line breaks, as in a rendered page
    for block in soup.find_all(list(_BLOCK_TAGS)):
        block.insert_before("\n")
        block.insert_after("\n")
    text = extract_text(soup, selectors)
    links = extract_links(soup, base_url)

    return ParsedPage(url=base_url, title=title, text=text, links=links)
