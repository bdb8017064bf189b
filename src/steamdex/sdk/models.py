from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class Label(BaseModel):
    """Id/description pair attached to an app (genre or category)."""

    id: int
    name: str


class AppDetails(BaseModel):
    """Public shape of a store appdetails document."""

    appid: int
    name: str
    short_description: Optional[str] = None
    categories: List[Label] = Field(default_factory=list)
    genres: List[Label] = Field(default_factory=list)
    supported_languages: Optional[str] = None
    platforms: Optional[Dict[str, Any]] = None
    release_date: Optional[str] = None
    price_overview: Optional[Dict[str, Any]] = None


class OwnedGame(BaseModel):
    appid: int
    name: Optional[str] = None
    playtime_forever_min: int = 0
    playtime_2weeks_min: int = 0


__all__ = ["AppDetails", "Label", "OwnedGame"]
