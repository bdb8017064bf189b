from __future__ import annotations

import json
from typing import Any, List

from ..errors import FetchFailure, NotFound
from .models import AppDetails, Label


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    return None


def _labels(value: Any) -> List[Label]:
    if not isinstance(value, list):
        return []
    out: List[Label] = []
    for item in value:
        if not isinstance(item, dict):
            continue
        label_id = _as_int(item.get("id"))
        name = item.get("description")
        if label_id is None or not isinstance(name, str):
            continue
        out.append(Label(id=label_id, name=name))
    return out


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def normalize_appdetails(appid: int, payload: bytes) -> AppDetails:
    """Turn a raw ``/api/appdetails`` response body into :class:`AppDetails`.

    The store answers unknown apps with ``{"<appid>": {"success": false}}``,
    which maps to NotFound. Any other structural surprise means the upstream
    schema changed and is reported as a fetch failure.
    """

    try:
        root = json.loads(payload)
    except ValueError as exc:
        raise FetchFailure(f"appdetails payload for {appid} is not JSON: {exc}") from exc
    if not isinstance(root, dict):
        raise FetchFailure(f"appdetails payload for {appid} is not an object")

    entry = root.get(str(appid))
    if not isinstance(entry, dict):
        raise FetchFailure(f"appid {appid} key missing in appdetails response")
    if not entry.get("success"):
        raise NotFound(f"appid {appid} not found")

    data = entry.get("data")
    if not isinstance(data, dict):
        raise FetchFailure(f"appdetails data missing for {appid}")

    release = data.get("release_date")
    platforms = data.get("platforms")
    price = data.get("price_overview")
    return AppDetails(
        appid=appid,
        name=_optional_str(data.get("name")) or "Unknown",
        short_description=_optional_str(data.get("short_description")),
        categories=_labels(data.get("categories")),
        genres=_labels(data.get("genres")),
        supported_languages=_optional_str(data.get("supported_languages")),
        platforms=platforms if isinstance(platforms, dict) else None,
        release_date=_optional_str(release.get("date")) if isinstance(release, dict) else None,
        price_overview=price if isinstance(price, dict) else None,
    )


__all__ = ["normalize_appdetails"]
