# site_harvest/storage/file_sink.py
"""
File-based record sink: two artifacts per record plus a flat zip archive.

For every record the sink writes ``<stem>.txt`` (UTF-8 text) and
``<stem>.metadata.json`` (``{"metadataAttributes": {...}}``), where the stem
is the URL without scheme and with unsafe characters replaced by ``_``.
"""
from __future__ import annotations

import hashlib
import json
import zipfile
from pathlib import Path
from typing import Dict, List, Tuple, Union

from site_harvest.crawler.models import CrawlRecord
from site_harvest.errors import PersistenceError
from site_harvest.logger import logger
from site_harvest.utils import ensure_directory, sanitize_file_name

CONTENT_SUFFIX = ".txt"
METADATA_SUFFIX = ".metadata.json"
MAX_STEM_LENGTH = 200


class FileRecordSink:
    """Persists crawl records into *output_dir* and packages them on demand."""

    def __init__(self, output_dir: Union[str, Path], compression_level: int = 9) -> None:
        self.output_dir = Path(output_dir)
        self.compression_level = compression_level
        self.files: List[Path] = []
        self._stems: Dict[str, str] = {}

    def stem_for(self, url: str) -> str:
        """Stable file stem for *url*, unique within this sink."""
        stem = sanitize_file_name(url)
        owner = self._stems.get(stem)
        if len(stem) > MAX_STEM_LENGTH or (owner is not None and owner != url):
            digest = hashlib.sha1(url.encode("utf-8")).hexdigest()[:8]
            stem = f"{stem[:MAX_STEM_LENGTH]}_{digest}"
        self._stems.setdefault(stem, url)
        return stem

    def write(self, record: CrawlRecord) -> Tuple[Path, Path]:
        url = record.url
        stem = self.stem_for(url)
        content_path = self.output_dir / f"{stem}{CONTENT_SUFFIX}"
        metadata_path = self.output_dir / f"{stem}{METADATA_SUFFIX}"
        try:
            ensure_directory(self.output_dir)
            content_path.write_text(record.content.text, encoding="utf-8")
            with metadata_path.open("w", encoding="utf-8") as f:
                json.dump(record.metadata.to_dict(), f, ensure_ascii=False, indent=2)
        except OSError as exc:
            raise PersistenceError(f"Cannot save {url}: {exc}") from exc

        for path in (content_path, metadata_path):
            if path not in self.files:
                self.files.append(path)
        logger.info("Saved content and metadata for: %s", url)
        return content_path, metadata_path

    def archive(self, archive_path: Union[str, Path]) -> Path:
        """Zip every written file (flat, maximum compression) into *archive_path*."""
        archive_path = Path(archive_path)
        try:
            ensure_directory(archive_path.parent)
            with zipfile.ZipFile(
                archive_path, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=self.compression_level
            ) as zf:
                for path in self.files:
                    zf.write(path, arcname=path.name)
        except (OSError, zipfile.BadZipFile) as exc:
            raise PersistenceError(f"Cannot create archive {archive_path}: {exc}") from exc
        logger.info("Archived %d files into %s", len(self.files), archive_path)
        return archive_path


__all__ = ["FileRecordSink", "CONTENT_SUFFIX", "METADATA_SUFFIX"]
