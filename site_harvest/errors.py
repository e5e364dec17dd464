"""Exception hierarchy shared by the crawler, the storage layer and the API."""
from __future__ import annotations


class SiteHarvestError(Exception):
    """Base class for every error raised by SiteHarvest."""


class RequestValidationError(SiteHarvestError, ValueError):
    """Caller input is malformed; the crawl is never started."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class RenderError(SiteHarvestError):
    """A single page could not be rendered (network, HTTP status, parse)."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class PersistenceError(SiteHarvestError):
    """Writing records or the archive failed; the crawl result is unusable."""


__all__ = ["SiteHarvestError", "RequestValidationError", "RenderError", "PersistenceError"]
