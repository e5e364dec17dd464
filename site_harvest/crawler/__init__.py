"""site_harvest.crawler: traversal engine, URL filtering, metadata and renderers."""

from .crawler import CrawlEngine, RecordSink, VisitedSet
from .metadata import derive_metadata
from .models import ContentRecord, CrawlFailure, CrawlNode, CrawlRecord, CrawlReport, MetadataRecord, RenderResult
from .renderer import HttpPageRenderer, PageRenderer
from .url_filter import filter_links, is_blacklisted, is_in_scope, should_visit

__all__ = [
    "CrawlEngine",
    "RecordSink",
    "VisitedSet",
    "derive_metadata",
    "ContentRecord",
    "CrawlFailure",
    "CrawlNode",
    "CrawlRecord",
    "CrawlReport",
    "MetadataRecord",
    "RenderResult",
    "HttpPageRenderer",
    "PageRenderer",
    "filter_links",
    "is_blacklisted",
    "is_in_scope",
    "should_visit",
]
