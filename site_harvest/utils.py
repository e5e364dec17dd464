"""site_harvest.utils: helpers for URL handling and file naming shared across the package."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Sequence, Union
from urllib.parse import urlsplit

from site_harvest.logger import logger

__all__: Sequence[str] = (
    "strip_scheme",
    "origin_of",
    "sanitize_file_name",
    "ensure_directory",
)

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_UNSAFE_CHARS_RE = re.compile(r"[^a-zA-Z0-9\-_]")


def strip_scheme(url: str) -> str:
    """Drop a leading ``http://`` or ``https://`` in any letter case."""
    return _SCHEME_RE.sub("", url)


def origin_of(url: str) -> str:
    """Return ``scheme://host[:port]`` of *url*, lower-cased."""
    parts = urlsplit(url)
    return f"{parts.scheme.lower()}://{parts.netloc.lower()}"


def sanitize_file_name(url: str) -> str:
    """Turn a URL into a file-name stem: scheme stripped, unsafe characters → ``_``."""
    return _UNSAFE_CHARS_RE.sub("_", strip_scheme(url))


def ensure_directory(path: Union[str, Path]) -> Path:
    """Create *path* (with parents) if missing and return it as Path."""
    p = Path(path)
    if not p.is_dir():
        p.mkdir(parents=True, exist_ok=True)
        logger.debug("Created directory %s", p)
    return p
