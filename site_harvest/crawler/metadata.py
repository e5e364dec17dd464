"""Positional path categorisation of crawled URLs."""
from __future__ import annotations

from site_harvest.crawler.models import CATEGORY_SLOTS, MetadataRecord
from site_harvest.utils import strip_scheme


def path_segments(url: str) -> list[str]:
    """Non-empty ``/``-separated segments after the host.

    ``"https://a.com/x//y"`` → ``["x", "y"]``; the host itself is never a
    segment, so a site root yields an empty list.
    """
    parts = [part for part in strip_scheme(url).split("/") if part]
    return parts[1:]


def derive_metadata(url: str) -> MetadataRecord:
    """Map *url* to its metadata record. Pure and total."""
    segments = path_segments(url)[:CATEGORY_SLOTS]
    segments += [""] * (CATEGORY_SLOTS - len(segments))
    return MetadataRecord(url, *segments)


__all__ = ["derive_metadata", "path_segments"]
