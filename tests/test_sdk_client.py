from __future__ import annotations

import json

import httpx
import pytest

from steamdex.errors import FetchFailure, NotFound, RateLimited, Unauthorized
from steamdex.sdk.client import StoreClient, WebApiClient


def _store(handler) -> StoreClient:
    return StoreClient("https://store.test", language="german", transport=httpx.MockTransport(handler))


def _webapi(handler, api_key: str | None = "secret") -> WebApiClient:
    return WebApiClient("https://api.test", api_key=api_key, transport=httpx.MockTransport(handler))


def test_fetch_appdetails_returns_raw_body() -> None:
    seen = {}
    body = json.dumps({"620": {"success": True, "data": {"name": "Portal 2"}}}).encode()

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, content=body)

    assert _store(handler).fetch_appdetails(620) == body
    assert seen["path"] == "/api/appdetails"
    assert seen["params"] == {"appids": "620", "l": "german"}


def test_fetch_appdetails_rejects_garbage() -> None:
    client = _store(lambda request: httpx.Response(200, content=b"<html>busy</html>"))
    with pytest.raises(FetchFailure, match="invalid JSON"):
        client.fetch_appdetails(620)

    client = _store(lambda request: httpx.Response(200, json=[1, 2]))
    with pytest.raises(FetchFailure, match="non-object"):
        client.fetch_appdetails(620)


def test_fetch_appdetails_rejects_undecodable_body() -> None:
    client = _store(lambda request: httpx.Response(200, content=b"\xff\xfe\xfa garbage"))
    with pytest.raises(FetchFailure, match="invalid JSON") as excinfo:
        client.fetch_appdetails(620)
    assert excinfo.value.kind == "FETCH_FAILURE"


@pytest.mark.parametrize(
    "status, error",
    [(401, Unauthorized), (403, Unauthorized), (429, RateLimited), (500, FetchFailure), (404, FetchFailure)],
)
def test_http_status_maps_to_error_kind(status: int, error: type) -> None:
    client = _store(lambda request: httpx.Response(status))
    with pytest.raises(error) as excinfo:
        client.fetch_appdetails(620)
    assert str(status) in excinfo.value.message


def test_timeout_is_fetch_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("read timed out", request=request)

    with pytest.raises(FetchFailure, match="timed out") as excinfo:
        _store(handler).fetch_appdetails(620)
    assert excinfo.value.kind == "FETCH_FAILURE"


def test_connection_error_is_fetch_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("no route", request=request)

    with pytest.raises(FetchFailure, match="no route"):
        _store(handler).fetch_appdetails(620)


def test_webapi_requires_key() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected without a key")

    with pytest.raises(Unauthorized):
        _webapi(handler, api_key=None).get_owned_games("76561197960287930")


def test_resolve_vanity() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/ISteamUser/ResolveVanityURL/v1/"
        assert request.url.params["key"] == "secret"
        if request.url.params["vanityurl"] == "gabelogannewell":
            return httpx.Response(200, json={"response": {"steamid": "76561197960287930", "success": 1}})
        return httpx.Response(200, json={"response": {"success": 42, "message": "No match"}})

    client = _webapi(handler)
    assert client.resolve_vanity("gabelogannewell") == "76561197960287930"
    with pytest.raises(NotFound):
        client.resolve_vanity("nobody-here")


def test_get_owned_games_parses_and_skips_bad_rows() -> None:
    payload = {
        "response": {
            "game_count": 6,
            "games": [
                {"appid": 620, "name": "Portal 2", "playtime_forever": 1200, "playtime_2weeks": 30},
                {"appid": 440, "playtime_forever": 5},
                {"appid": 0, "name": "bogus"},
                {"appid": 10, "name": "Counter-Strike", "playtime_forever": "lots"},
                {"appid": 20, "playtime_2weeks": [1]},
                "not a game",
            ],
        }
    }

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["steamid"] == "76561197960287930"
        assert request.url.params["include_appinfo"] == "1"
        return httpx.Response(200, json=payload)

    games = _webapi(handler).get_owned_games("76561197960287930")

    assert [game.appid for game in games] == [620, 440]
    assert games[0].playtime_2weeks_min == 30
    assert games[1].name is None
    assert games[1].playtime_2weeks_min == 0


def test_private_profile_has_no_games() -> None:
    client = _webapi(lambda request: httpx.Response(200, json={"response": {}}))
    assert client.get_owned_games("76561197960287930") == []


def test_missing_response_object_is_fetch_failure() -> None:
    client = _webapi(lambda request: httpx.Response(200, json={"unexpected": True}))
    with pytest.raises(FetchFailure):
        client.get_owned_games("76561197960287930")
