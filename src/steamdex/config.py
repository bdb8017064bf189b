from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field


def _default_home() -> Path:
    return Path(os.getenv("STEAMDEX_HOME", str(Path.home() / ".steamdex"))).expanduser()


def _path_from_env(name: str, filename: str) -> Path:
    raw = os.getenv(name)
    if raw:
        return Path(raw).expanduser()
    return _default_home() / filename


class SteamdexSettings(BaseModel):
    """Runtime configuration for catalog lookups and the detail cache."""

    home: Path = Field(default_factory=_default_home)
    catalog_db: Path = Field(default_factory=lambda: _path_from_env("STEAMDEX_CATALOG_DB", "catalog.db"))
    cache_db: Path = Field(default_factory=lambda: _path_from_env("STEAMDEX_CACHE_DB", "cache.db"))
    store_url: str = Field(default_factory=lambda: os.getenv("STEAMDEX_STORE_URL", "https://store.steampowered.com"))
    webapi_url: str = Field(default_factory=lambda: os.getenv("STEAMDEX_WEBAPI_URL", "https://api.steampowered.com"))
    language: str = Field(default_factory=lambda: os.getenv("STEAMDEX_LANGUAGE", "english"))
    http_timeout: float = Field(default_factory=lambda: float(os.getenv("STEAMDEX_HTTP_TIMEOUT", "10.0")))
    default_ttl: int = Field(default_factory=lambda: int(os.getenv("STEAMDEX_DEFAULT_TTL", "86400")))
    max_limit: int = Field(default_factory=lambda: int(os.getenv("STEAMDEX_MAX_LIMIT", "100")))
    default_limit: int = Field(default_factory=lambda: int(os.getenv("STEAMDEX_DEFAULT_LIMIT", "20")))
    api_key: str | None = Field(default_factory=lambda: os.getenv("STEAM_API_KEY") or None)
    log_level: str = Field(default_factory=lambda: os.getenv("STEAMDEX_LOG_LEVEL", "WARNING"))


@lru_cache(maxsize=1)
def get_settings() -> SteamdexSettings:
    return SteamdexSettings()


__all__ = ["SteamdexSettings", "get_settings"]
