"""HTTP Client for the SimpliSafe mobile API."""

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from json import JSONDecodeError
import json
from typing import Any

from aiohttp import ClientError, ClientSession

from homeassistant.exceptions import HomeAssistantError

from .const import (
    API_BASE_URL,
    API_DEVICE_NAME,
    API_GET_STATE_PATH,
    API_LOCATIONS_PATH,
    API_LOGIN_PATH,
    API_SET_STATE_PATH,
    API_VERSION,
    LOGIN_RETURN_CODE_SUCCESS,
    LOGGER,
    REQUEST_TIMEOUT,
    RESPONSE_CODE_AWAY,
    RESPONSE_CODE_HOME,
    RESPONSE_CODE_OFF,
)


class SimpliSafeError(HomeAssistantError):
    """Base class for SimpliSafe errors."""


class ConfigurationError(SimpliSafeError):
    """Username and/or password are missing."""


class AuthenticationError(SimpliSafeError):
    """The vendor rejected the configured credentials."""


class SessionExpiredError(SimpliSafeError):
    """The vendor invalidated the current session."""


class ProtocolError(SimpliSafeError):
    """A response did not have the expected shape."""


class TransportError(SimpliSafeError):
    """A request could not be sent or no response was received."""


class SimpliSafeState(StrEnum):
    """Represent the operating modes of a base station."""

    OFF = "off"
    HOME = "home"
    AWAY = "away"


RESPONSE_CODE_TO_STATE = {
    RESPONSE_CODE_OFF: SimpliSafeState.OFF,
    RESPONSE_CODE_HOME: SimpliSafeState.HOME,
    RESPONSE_CODE_AWAY: SimpliSafeState.AWAY,
}


@dataclass(frozen=True)
class SimpliSafeSession:
    """Represent an authenticated user session."""

    token: str
    user_id: str
    cookies: frozenset[tuple[str, str]] = frozenset()


@dataclass(frozen=True)
class LoginRequest:
    """Log in with a username and password."""

    username: str
    password: str = field(repr=False)
    device_uuid: str

    @property
    def tag(self) -> str:
        """Return the label used in log messages."""
        return "login"


@dataclass(frozen=True)
class LocationsRequest:
    """List the locations (base stations) of the logged in user."""

    @property
    def tag(self) -> str:
        """Return the label used in log messages."""
        return "locations"


@dataclass(frozen=True)
class GetStateRequest:
    """Query the state of a base station."""

    location_id: str

    @property
    def tag(self) -> str:
        """Return the label used in log messages."""
        return f"gstate:{self.location_id}"


@dataclass(frozen=True)
class SetStateRequest:
    """Change the state of a base station."""

    location_id: str
    state: SimpliSafeState

    @property
    def tag(self) -> str:
        """Return the label used in log messages."""
        return f"sstate:{self.location_id}"


type SimpliSafeRequest = LoginRequest | LocationsRequest | GetStateRequest | SetStateRequest


@dataclass(frozen=True)
class SimpliSafeResponse:
    """Represent a completed HTTP exchange."""

    status: int
    body: str
    cookies: frozenset[tuple[str, str]] = frozenset()


@dataclass(frozen=True)
class LoginResult:
    """Represent the decoded body of a login response."""

    return_code: int
    token: str | None = None
    user_id: str | None = None
    username: str | None = None


def build_url(request: SimpliSafeRequest, session: SimpliSafeSession | None) -> str:
    """Return the absolute URL a request is posted to."""
    if isinstance(request, LoginRequest):
        return f"{API_BASE_URL}{API_LOGIN_PATH}"
    if session is None:
        raise SessionExpiredError(f"No session available for {request.tag}")
    if isinstance(request, LocationsRequest):
        path = API_LOCATIONS_PATH.format(uid=session.user_id)
    elif isinstance(request, GetStateRequest):
        path = API_GET_STATE_PATH.format(
            uid=session.user_id, location=request.location_id
        )
    else:
        path = API_SET_STATE_PATH.format(
            uid=session.user_id, location=request.location_id
        )
    return f"{API_BASE_URL}{path}"


def build_form(request: SimpliSafeRequest) -> dict[str, str]:
    """Return the form fields of a request."""
    if isinstance(request, LoginRequest):
        return {
            "name": request.username,
            "pass": request.password,
            "device_name": API_DEVICE_NAME,
            "device_uuid": request.device_uuid,
            "version": API_VERSION,
            "no_persist": "1",
        }
    if isinstance(request, SetStateRequest):
        return {
            "state": str(request.state),
            "mobile": "1",
            "no_persist": "0",
        }
    return {"no_persist": "0"}


def _decode_json(body: str) -> dict[str, Any]:
    try:
        decoded = json.loads(body)
    except (JSONDecodeError, TypeError):
        raise ProtocolError(f"Invalid JSON in response: {body!r}") from None
    if not isinstance(decoded, dict):
        raise ProtocolError(f"Expected a JSON object, got: {body!r}")
    return decoded


def _get_int(data: Mapping[str, Any], key: str) -> int:
    value = data.get(key)
    if isinstance(value, bool) or value is None:
        raise ProtocolError(f"No {key} found in response: {data}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ProtocolError(f"Invalid {key} in response: {data}") from None


def parse_login_response(body: str) -> LoginResult:
    """Decode a login response body."""
    data = _decode_json(body)
    return_code = _get_int(data, "return_code")
    if return_code != LOGIN_RETURN_CODE_SUCCESS:
        return LoginResult(return_code=return_code)
    token = data.get("session")
    user_id = data.get("uid")
    if not token or user_id is None:
        raise ProtocolError(f"Missing session or uid in login response: {data}")
    return LoginResult(
        return_code=return_code,
        token=str(token),
        user_id=str(user_id),
        username=data.get("username"),
    )


def parse_locations_response(body: str) -> list[str]:
    """Return the location ids found in a locations response body."""
    data = _decode_json(body)
    locations = data.get("locations")
    if not isinstance(locations, dict):
        raise ProtocolError(f"No locations found in response: {data}")
    return [str(location_id) for location_id in locations]


def parse_state_response(body: str) -> int:
    """Return the response code of a get-state or set-state response body."""
    return _get_int(_decode_json(body), "response_code")


class SimpliSafeApi:
    """Send requests to the SimpliSafe mobile API."""

    def __init__(self, httpClient: ClientSession) -> None:
        """Initialize SimpliSafeApi."""
        self._httpClient = httpClient

    async def async_send(
        self, request: SimpliSafeRequest, session: SimpliSafeSession | None = None
    ) -> SimpliSafeResponse:
        """Post a request and return the raw response, whatever its status."""
        url = build_url(request, session)
        LOGGER.debug("Sending %s request to %s", request.tag, url)
        try:
            async with asyncio.timeout(REQUEST_TIMEOUT):
                async with self._httpClient.post(
                    url,
                    data=build_form(request),
                    cookies=dict(session.cookies) if session else None,
                ) as response:
                    body = await response.text()
                    cookies = frozenset(
                        (name, morsel.value)
                        for name, morsel in response.cookies.items()
                    )
        except (ClientError, TimeoutError) as err:
            raise TransportError(
                f"Error sending {request.tag} request: {err!r}"
            ) from err
        except UnicodeDecodeError as err:
            raise ProtocolError(
                f"Undecodable {request.tag} response body: {err}"
            ) from err
        LOGGER.debug(
            "Received %s response for %s: %s", response.status, request.tag, body
        )
        return SimpliSafeResponse(status=response.status, body=body, cookies=cookies)
