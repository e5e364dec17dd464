# site_harvest/crawler/url_filter.py
"""
Predicates deciding which discovered URLs enter the crawl frontier.

All functions are pure; ``visited`` is only read, never modified.
"""
from __future__ import annotations

from typing import Collection, Iterable, List, Sequence
from urllib.parse import urlsplit

from site_harvest.utils import origin_of


def is_blacklisted(url: str, blacklist: Sequence[str]) -> bool:
    """True if *url* starts with any blacklist prefix (plain prefix match)."""
    return any(url.startswith(prefix) for prefix in blacklist)


def is_same_origin(url: str, base_origin: str) -> bool:
    """True if *url* has the scheme and host of *base_origin*.

    Host comparison ignores case, and ``https://x.com.evil.org`` does not
    count as ``https://x.com`` even though it shares the prefix.
    """
    try:
        return origin_of(url) == origin_of(base_origin) and bool(urlsplit(url).netloc)
    except ValueError:
        return False


def is_in_scope(url: str, base_origin: str) -> bool:
    """Same origin and no fragment marker."""
    return "#" not in url and is_same_origin(url, base_origin)


def should_visit(
    url: str,
    base_origin: str,
    blacklist: Sequence[str],
    visited: Collection[str],
) -> bool:
    """Decide whether a discovered *url* should be crawled."""
    if url in visited:
        return False
    if is_blacklisted(url, blacklist):
        return False
    return is_in_scope(url, base_origin)


def filter_links(
    links: Iterable[str],
    base_origin: str,
    blacklist: Sequence[str],
    visited: Collection[str],
) -> List[str]:
    """Keep the links worth following, preserving the renderer's order."""
    return [link for link in links if should_visit(link, base_origin, blacklist, visited)]


__all__ = ["is_blacklisted", "is_same_origin", "is_in_scope", "should_visit", "filter_links"]
