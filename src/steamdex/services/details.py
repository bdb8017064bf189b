from __future__ import annotations

from typing import Optional

from ..cache.detail_cache import DetailCache
from ..envelope import DataSource, Envelope, wrap_exception, wrap_ok
from ..errors import InvalidArgument, SteamdexError
from ..sdk.appdetails import normalize_appdetails


class DetailService:
    """App detail lookups served through the detail cache."""

    def __init__(self, cache: DetailCache, default_ttl: int = 86_400) -> None:
        self._cache = cache
        self._default_ttl = default_ttl

    def get(self, appid: int, ttl: Optional[int] = None, force_refresh: bool = False) -> Envelope:
        try:
            if appid <= 0:
                raise InvalidArgument(f"appid must be positive, got {appid}")
            ttl_seconds = self._default_ttl if ttl is None else ttl
            document, cached = self._cache.get(appid, ttl_seconds, force_refresh)
            app = normalize_appdetails(appid, document.payload)
            return wrap_ok({"app": app.model_dump(mode="json")}, source=document.source, cached=cached)
        except SteamdexError as exc:
            return wrap_exception(exc, DataSource.REMOTE_STORE)


__all__ = ["DetailService"]
