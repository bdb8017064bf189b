from __future__ import annotations

from typing import Optional

from ..envelope import DataSource, Envelope, build_pagination, check_offset, clamp_limit, wrap_exception, wrap_ok
from ..errors import InvalidArgument, SteamdexError
from ..sdk.client import WebApiClient


class LibraryService:
    """Owned-games listing for one user, most played first."""

    def __init__(self, client: WebApiClient, max_limit: int = 100) -> None:
        self._client = client
        self._max_limit = max_limit

    def owned(
        self,
        *,
        steamid: Optional[str] = None,
        vanity: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Envelope:
        try:
            if steamid and vanity:
                raise InvalidArgument("provide only one of steamid or vanity")
            if not steamid and not vanity:
                raise InvalidArgument("provide steamid or vanity")
            limit = clamp_limit(limit, self._max_limit)
            offset = check_offset(offset)

            resolved = steamid or self._client.resolve_vanity(vanity or "")
            games = sorted(
                self._client.get_owned_games(resolved),
                key=lambda game: (-game.playtime_forever_min, game.appid),
            )
            page = games[offset : offset + limit]
            pagination = build_pagination(limit, offset, len(page), len(games))
            data = {"steamid": resolved, "items": [game.model_dump(mode="json") for game in page]}
            return wrap_ok(data, pagination, source=DataSource.REMOTE_WEBAPI)
        except SteamdexError as exc:
            return wrap_exception(exc, DataSource.REMOTE_WEBAPI)


__all__ = ["LibraryService"]
