"""Uniform response envelope returned by every steamdex operation.

Wire shape (stable contract)::

    {
      "ok": bool,
      "data": object | null,
      "pagination": {limit, offset, returned, has_more, total} | null,
      "meta": {version, source, cached},
      "error": {kind, message} | null
    }

This module is the only place where ``meta.source`` and ``meta.cached`` are
set, so success, empty and error results all share one structure.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, model_validator

from . import __version__
from .errors import Internal, InvalidArgument, SteamdexError


class DataSource(str, Enum):
    LOCAL_DB = "local_db"
    REMOTE_STORE = "remote_store"
    REMOTE_WEBAPI = "remote_webapi"
    INTERNAL = "internal"


class Pagination(BaseModel):
    limit: int
    offset: int
    returned: int
    has_more: bool
    total: Optional[int] = None


class Meta(BaseModel):
    version: str = __version__
    source: DataSource
    cached: bool = False


class ErrorBody(BaseModel):
    kind: str
    message: str


class Envelope(BaseModel):
    ok: bool
    data: Optional[Dict[str, Any]] = None
    pagination: Optional[Pagination] = None
    meta: Meta
    error: Optional[ErrorBody] = None

    @model_validator(mode="after")
    def check_ok_matches_error(self) -> "Envelope":
        if self.ok and self.error is not None:
            raise ValueError("successful envelope must not carry an error")
        if not self.ok and self.error is None:
            raise ValueError("failed envelope must carry an error")
        return self

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


def clamp_limit(limit: int, max_limit: int = 100) -> int:
    if limit < 1:
        raise InvalidArgument(f"limit must be at least 1, got {limit}")
    return min(limit, max_limit)


def check_offset(offset: int) -> int:
    if offset < 0:
        raise InvalidArgument(f"offset must not be negative, got {offset}")
    return offset


def build_pagination(limit: int, offset: int, returned: int, total: Optional[int] = None) -> Pagination:
    if returned > limit:
        raise Internal(f"page returned {returned} items for limit {limit}")
    if total is not None:
        has_more = offset + returned < total
    else:
        has_more = returned == limit
    return Pagination(limit=limit, offset=offset, returned=returned, has_more=has_more, total=total)


def wrap_ok(
    data: Dict[str, Any],
    pagination: Optional[Pagination] = None,
    *,
    source: DataSource,
    cached: bool = False,
) -> Envelope:
    return Envelope(
        ok=True,
        data=data,
        pagination=pagination,
        meta=Meta(source=source, cached=cached),
        error=None,
    )


def wrap_err(kind: str, message: str, source: DataSource = DataSource.INTERNAL) -> Envelope:
    return Envelope(
        ok=False,
        data=None,
        pagination=None,
        meta=Meta(source=source, cached=False),
        error=ErrorBody(kind=kind, message=message),
    )


def wrap_exception(exc: SteamdexError, source: DataSource = DataSource.INTERNAL) -> Envelope:
    return wrap_err(exc.kind, exc.message, source)


__all__ = [
    "DataSource",
    "Envelope",
    "ErrorBody",
    "Meta",
    "Pagination",
    "build_pagination",
    "check_offset",
    "clamp_limit",
    "wrap_err",
    "wrap_exception",
    "wrap_ok",
]
