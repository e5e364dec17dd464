"""site_harvest.storage: persistence of crawl records and archive packaging."""

from .file_sink import CONTENT_SUFFIX, METADATA_SUFFIX, FileRecordSink

__all__ = ["FileRecordSink", "CONTENT_SUFFIX", "METADATA_SUFFIX"]
