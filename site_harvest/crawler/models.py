"""
Data models for the SiteHarvest crawler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

CATEGORY_SLOTS = 5


@dataclass(slots=True, frozen=True)
class CrawlNode:
    """One unit of traversal work: a URL and the depth it was discovered at."""

    url: str
    depth: int


@dataclass(slots=True, frozen=True)
class RenderResult:
    """What a renderer returns for one page: extracted text and outbound links."""

    url: str
    text: str
    links: Tuple[str, ...] = ()
    title: str = ""


@dataclass(slots=True, frozen=True)
class ContentRecord:
    url: str
    text: str


@dataclass(slots=True, frozen=True)
class MetadataRecord:
    """Positional path categories of a URL."""

    url: str
    sub_cate_1: str = ""
    sub_cate_2: str = ""
    sub_cate_3: str = ""
    sub_cate_4: str = ""
    sub_cate_5: str = ""

    @property
    def categories(self) -> Tuple[str, ...]:
        return (self.sub_cate_1, self.sub_cate_2, self.sub_cate_3, self.sub_cate_4, self.sub_cate_5)

    def to_dict(self) -> Dict[str, Any]:
        """Serializable form written to ``<stem>.metadata.json``."""
        attributes: Dict[str, Any] = {"url": self.url}
        for index, value in enumerate(self.categories, start=1):
            attributes[f"sub_cate_{index}"] = value
        return {"metadataAttributes": attributes}


@dataclass(slots=True, frozen=True)
class CrawlRecord:
    """A (content, metadata) pair emitted for one successfully processed URL."""

    content: ContentRecord
    metadata: MetadataRecord

    @property
    def url(self) -> str:
        return self.content.url


@dataclass(slots=True, frozen=True)
class CrawlFailure:
    url: str
    depth: int
    error: str


@dataclass(slots=True)
class CrawlReport:
    """Outcome of one crawl run."""

    seed_url: str
    max_depth: int
    records: List[CrawlRecord] = field(default_factory=list)
    failures: List[CrawlFailure] = field(default_factory=list)
    empty_pages: List[str] = field(default_factory=list)
    visited: int = 0
    duration: float = 0.0
    stopped: bool = False

    @property
    def pages(self) -> int:
        return len(self.records)

    def summary(self) -> Dict[str, Any]:
        """Plain-dict view used by the JSON/HTML reports and the API."""
        return {
            "seed_url": self.seed_url,
            "max_depth": self.max_depth,
            "visited": self.visited,
            "pages": self.pages,
            "duration": round(self.duration, 3),
            "stopped": self.stopped,
            "records": [
                {"url": r.url, "characters": len(r.content.text), **r.metadata.to_dict()["metadataAttributes"]}
                for r in self.records
            ],
            "empty_pages": list(self.empty_pages),
            "failures": [{"url": f.url, "depth": f.depth, "error": f.error} for f in self.failures],
        }


__all__ = (
    "CATEGORY_SLOTS",
    "CrawlNode",
    "RenderResult",
    "ContentRecord",
    "MetadataRecord",
    "CrawlRecord",
    "CrawlFailure",
    "CrawlReport",
)
