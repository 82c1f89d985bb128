from __future__ import annotations

from http.cookies import SimpleCookie

from aiohttp import ClientConnectionError
import pytest

from custom_components.simplisafe_mobile.api import (
    GetStateRequest,
    LocationsRequest,
    LoginRequest,
    ProtocolError,
    SessionExpiredError,
    SetStateRequest,
    SimpliSafeApi,
    SimpliSafeSession,
    SimpliSafeState,
    TransportError,
    build_form,
    build_url,
    parse_locations_response,
    parse_login_response,
    parse_state_response,
)

from .conftest import FakeHttpClient, FakeResponse

SESSION = SimpliSafeSession(token="tok", user_id="42", cookies=frozenset({("PHPSESSID", "abc")}))
LOGIN = LoginRequest(username="user", password="secret", device_uuid="uuid-1")


def test_urls() -> None:
    assert build_url(LOGIN, None) == "https://simplisafe.com/mobile/login"
    assert build_url(LocationsRequest(), SESSION) == "https://simplisafe.com/mobile/42/locations"
    assert (
        build_url(GetStateRequest("A1"), SESSION)
        == "https://simplisafe.com/mobile/42/sid/A1/get-state"
    )
    assert (
        build_url(SetStateRequest("A1", SimpliSafeState.AWAY), SESSION)
        == "https://simplisafe.com/mobile/42/sid/A1/set-state"
    )


def test_session_required_for_location_requests() -> None:
    with pytest.raises(SessionExpiredError):
        build_url(LocationsRequest(), None)


def test_forms() -> None:
    assert build_form(LOGIN) == {
        "name": "user",
        "pass": "secret",
        "device_name": "Home Assistant",
        "device_uuid": "uuid-1",
        "version": "1200",
        "no_persist": "1",
    }
    assert build_form(LocationsRequest()) == {"no_persist": "0"}
    assert build_form(GetStateRequest("A1")) == {"no_persist": "0"}
    assert build_form(SetStateRequest("A1", SimpliSafeState.HOME)) == {
        "state": "home",
        "mobile": "1",
        "no_persist": "0",
    }


def test_password_not_in_repr() -> None:
    assert "secret" not in repr(LOGIN)


def test_tags() -> None:
    assert LOGIN.tag == "login"
    assert LocationsRequest().tag == "locations"
    assert GetStateRequest("A1").tag == "gstate:A1"
    assert SetStateRequest("A1", SimpliSafeState.AWAY).tag == "sstate:A1"


def test_parse_login_success() -> None:
    result = parse_login_response(
        '{"return_code": 1, "session": "tok", "uid": 42, "username": "user"}'
    )
    assert result.return_code == 1
    assert result.token == "tok"
    assert result.user_id == "42"
    assert result.username == "user"


def test_parse_login_rejected() -> None:
    result = parse_login_response('{"return_code": 0}')
    assert result.return_code == 0
    assert result.token is None


@pytest.mark.parametrize(
    "body",
    [
        "not json",
        "[]",
        "{}",
        '{"return_code": "x"}',
        '{"return_code": 1, "uid": 42}',
    ],
)
def test_parse_login_malformed(body: str) -> None:
    with pytest.raises(ProtocolError):
        parse_login_response(body)


def test_parse_locations() -> None:
    assert parse_locations_response('{"locations": {"A1": {}, "B2": {"x": 1}}}') == ["A1", "B2"]
    assert parse_locations_response('{"locations": {}}') == []
    with pytest.raises(ProtocolError):
        parse_locations_response('{"locations": []}')


def test_parse_state() -> None:
    assert parse_state_response('{"response_code": 5}') == 5
    with pytest.raises(ProtocolError):
        parse_state_response('{"other": 5}')
    with pytest.raises(ProtocolError):
        parse_state_response("")


async def test_async_send_login_collects_cookies() -> None:
    cookies = SimpleCookie()
    cookies["PHPSESSID"] = "abc"
    http_client = FakeHttpClient(FakeResponse(200, '{"return_code": 1}', cookies))

    response = await SimpliSafeApi(http_client).async_send(LOGIN)

    assert response.status == 200
    assert response.body == '{"return_code": 1}'
    assert response.cookies == frozenset({("PHPSESSID", "abc")})
    assert http_client.posts[0]["url"] == "https://simplisafe.com/mobile/login"
    assert http_client.posts[0]["cookies"] is None


async def test_async_send_passes_session_cookies() -> None:
    http_client = FakeHttpClient(FakeResponse(401, "", SimpleCookie()))

    response = await SimpliSafeApi(http_client).async_send(GetStateRequest("A1"), SESSION)

    assert response.status == 401
    assert http_client.posts[0]["cookies"] == {"PHPSESSID": "abc"}
    assert http_client.posts[0]["data"] == {"no_persist": "0"}


async def test_async_send_wraps_client_errors() -> None:
    http_client = FakeHttpClient(error=ClientConnectionError("boom"))

    with pytest.raises(TransportError):
        await SimpliSafeApi(http_client).async_send(LOGIN)


async def test_async_send_rejects_undecodable_body() -> None:
    http_client = FakeHttpClient(FakeResponse(200, b'{"return_code": \xff}', SimpleCookie()))

    with pytest.raises(ProtocolError):
        await SimpliSafeApi(http_client).async_send(LOGIN)
