from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from ..errors import FetchFailure, NotFound, RateLimited, Unauthorized
from ..shared.logging import get_logger
from .models import OwnedGame

logger = get_logger("sdk.client")


def _translate(exc: httpx.HTTPError, what: str) -> FetchFailure:
    if isinstance(exc, httpx.TimeoutException):
        return FetchFailure(f"{what} timed out: {exc}")
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        if status in (401, 403):
            return Unauthorized(f"{what} rejected with HTTP {status}")
        if status == 429:
            return RateLimited(f"{what} throttled with HTTP {status}")
        return FetchFailure(f"{what} failed with HTTP {status}")
    return FetchFailure(f"{what} failed: {exc}")


class _BaseClient:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def _get(self, path: str, params: Dict[str, Any], what: str) -> httpx.Response:
        url = f"{self._base_url}{path}"
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                logger.debug("http_get", url=url)
                response = client.get(url, params=params)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            error = _translate(exc, what)
            logger.error("http_get_failed", url=url, kind=error.kind, error=str(exc))
            raise error from exc
        return response

    @staticmethod
    def _json_object(response: httpx.Response, what: str) -> Dict[str, Any]:
        try:
            doc = response.json()
        except ValueError as exc:
            # covers undecodable bytes as well as malformed JSON
            raise FetchFailure(f"{what} returned invalid JSON: {exc}") from exc
        if not isinstance(doc, dict):
            raise FetchFailure(f"{what} returned a non-object document")
        return doc


class StoreClient(_BaseClient):
    """Client for the public storefront API (no key required)."""

    def __init__(
        self,
        base_url: str = "https://store.steampowered.com",
        *,
        language: str = "english",
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        super().__init__(base_url, timeout=timeout, transport=transport)
        self._language = language

    def fetch_appdetails(self, appid: int) -> bytes:
        """Fetch the raw appdetails body for one app.

        The body is validated as a JSON object so that garbage never reaches
        the detail cache; its content is otherwise left untouched.
        """

        what = f"appdetails {appid}"
        response = self._get("/api/appdetails", {"appids": appid, "l": self._language}, what)
        self._json_object(response, what)
        return response.content


class WebApiClient(_BaseClient):
    """Client for the keyed Web API (user libraries, vanity names)."""

    def __init__(
        self,
        base_url: str = "https://api.steampowered.com",
        *,
        api_key: Optional[str],
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        super().__init__(base_url, timeout=timeout, transport=transport)
        self._api_key = api_key

    def _key(self) -> str:
        if not self._api_key:
            raise Unauthorized("STEAM_API_KEY is required for web API calls")
        return self._api_key

    def resolve_vanity(self, vanity: str) -> str:
        what = f"vanity '{vanity}'"
        response = self._get(
            "/ISteamUser/ResolveVanityURL/v1/",
            {"key": self._key(), "vanityurl": vanity},
            what,
        )
        body = self._json_object(response, what).get("response")
        if not isinstance(body, dict):
            raise FetchFailure("resolve vanity response missing")
        if body.get("success") != 1:
            raise NotFound(f"vanity '{vanity}' not found")
        steamid = body.get("steamid")
        if not isinstance(steamid, str):
            raise FetchFailure("steamid missing in vanity response")
        return steamid

    def get_owned_games(self, steamid: str) -> List[OwnedGame]:
        what = f"owned games for {steamid}"
        response = self._get(
            "/IPlayerService/GetOwnedGames/v1/",
            {
                "key": self._key(),
                "steamid": steamid,
                "include_appinfo": 1,
                "include_played_free_games": 1,
                "format": "json",
            },
            what,
        )
        body = self._json_object(response, what).get("response")
        if not isinstance(body, dict):
            raise FetchFailure("owned games response missing")
        # private profiles answer with an empty response object
        games = body.get("games", [])
        if not isinstance(games, list):
            raise FetchFailure("owned games array malformed")

        out: List[OwnedGame] = []
        for game in games:
            if not isinstance(game, dict):
                continue
            appid = game.get("appid")
            if not isinstance(appid, int) or appid <= 0:
                continue
            try:
                forever = int(game.get("playtime_forever") or 0)
                recent = int(game.get("playtime_2weeks") or 0)
            except (TypeError, ValueError):
                logger.warning("owned_game_skipped", appid=appid, steamid=steamid)
                continue
            out.append(
                OwnedGame(
                    appid=appid,
                    name=game.get("name") if isinstance(game.get("name"), str) else None,
                    playtime_forever_min=forever,
                    playtime_2weeks_min=recent,
                )
            )
        return out


__all__ = ["StoreClient", "WebApiClient"]
