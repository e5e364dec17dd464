"""
Loading and validation of SiteHarvest configuration and crawl requests.
Pydantic describes both schemas: the service-level :class:`HarvestConfig`
and the per-call :class:`CrawlRequest` accepted by the trigger API and CLI.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from urllib.parse import urlsplit

import soupsieve
import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    ValidationError,
    field_validator,
    model_validator,
)

from site_harvest.errors import RequestValidationError


class HarvestConfig(BaseModel):
    """Service configuration shared by every crawl run."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    output_dir: Path = Field(Path("public/crawled-data"), description="Root directory for crawl runs.")
    public_dir: Path = Field(Path("public"), description="Directory served under /public.")
    archive_name: str = Field("crawled_data.zip", min_length=1, description="Archive file name per run.")
    timeout: float = Field(60.0, gt=0, description="Render timeout per page (seconds).")
    crawl_timeout: Optional[float] = Field(None, gt=0, description="Timeout of a whole crawl (seconds).")
    user_agent: str = Field("SiteHarvestBot/1.0", min_length=1, description="User-Agent header.")
    concurrency: int = Field(1, ge=1, description="Render workers; 1 keeps the depth-first order.")
    retry_times: int = Field(0, ge=0, description="Extra attempts for a page that failed to render.")
    host: str = Field("127.0.0.1", min_length=1, description="Bind address of the API server.")
    port: int = Field(3000, ge=1, le=65535, description="Port of the API server.")

    @field_validator("archive_name")
    def _plain_archive_name(cls, v: str) -> str:
        if Path(v).name != v:
            raise ValueError("archive_name must be a bare file name")
        return v

    @model_validator(mode="after")
    def _output_under_public(self) -> HarvestConfig:
        try:
            self.output_dir.resolve().relative_to(self.public_dir.resolve())
        except ValueError:
            raise ValueError("output_dir must be located inside public_dir") from None
        return self


_MISSING_URL = "Missing required parameter: url."
_BAD_DEPTH = "Invalid or missing parameter: maxDepth. It must be a positive number."
_BAD_TAGS = "Invalid or missing parameter: tags. It must be a non-empty array."


class CrawlRequest(BaseModel):
    """Parameters of one crawl, as posted to ``/api/crawl``."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    url: str = Field(..., min_length=1)
    max_depth: StrictInt = Field(..., alias="maxDepth", gt=0)
    blacklist: List[str] = Field(default_factory=list)
    tags: List[str] = Field(..., min_length=1)

    @field_validator("url")
    def _http_url(cls, v: str) -> str:
        parts = urlsplit(v)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError("url must be an absolute http(s) URL")
        # Lower-case scheme so the seed matches the links discovered from it
        return parts.scheme + v[len(parts.scheme):]

    @field_validator("blacklist")
    def _non_blank_prefixes(cls, v: List[str]) -> List[str]:
        if any(not prefix.strip() for prefix in v):
            raise ValueError("blacklist must not contain blank prefixes")
        return v

    @field_validator("tags")
    def _non_blank_tags(cls, v: List[str]) -> List[str]:
        for tag in v:
            if not tag.strip():
                raise ValueError("tags must not contain blank selectors")
            try:
                soupsieve.compile(tag)
            except soupsieve.SelectorSyntaxError as exc:
                raise ValueError(f"invalid selector {tag!r}: {exc}") from exc
        return v

    @classmethod
    def parse(cls, payload: Any) -> CrawlRequest:
        """Validate *payload*, turning pydantic errors into :class:`RequestValidationError`.

        The first offending field decides the message, checked in the order
        url → maxDepth → tags so that callers get the same hint for the same
        mistake regardless of what else is wrong.
        """
        if not isinstance(payload, dict):
            raise RequestValidationError("Request body must be a JSON object.")
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            failed = {str(err["loc"][0]) for err in exc.errors() if err["loc"]}
            if "url" in failed:
                message = _MISSING_URL if not payload.get("url") else f"Invalid parameter: url. {_first_msg(exc, 'url')}"
            elif failed & {"maxDepth", "max_depth"}:
                message = _BAD_DEPTH
            elif "tags" in failed:
                message = _BAD_TAGS
            elif "blacklist" in failed:
                message = "Invalid parameter: blacklist. It must be an array of non-empty URL prefixes."
            else:
                message = str(exc)
            raise RequestValidationError(message) from exc


def _first_msg(exc: ValidationError, field: str) -> str:
    for err in exc.errors():
        if err["loc"] and err["loc"][0] == field:
            return err["msg"]
    return ""


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> HarvestConfig:
    """
    Read YAML or JSON and return a validated HarvestConfig.

    With *path* = None the default ``configs/default.yaml`` is used when
    present, otherwise built-in defaults apply. An explicit path that does
    not exist raises FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            return HarvestConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Unsupported config format: {suffix}")

    return HarvestConfig(**data)


def override(config: HarvestConfig, **changes: Any) -> HarvestConfig:
    """Return a copy of *config* with the non-None *changes* applied and re-validated."""
    data: Dict[str, Any] = config.model_dump()
    data.update({k: v for k, v in changes.items() if v is not None})
    return HarvestConfig(**data)


__all__ = ["HarvestConfig", "CrawlRequest", "load_config", "override"]
