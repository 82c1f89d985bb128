"""Session lifecycle and polling state machine for SimpliSafe."""

from __future__ import annotations

from enum import StrEnum
from http import HTTPStatus
from typing import Protocol
import uuid

from .api import (
    AuthenticationError,
    ConfigurationError,
    GetStateRequest,
    LocationsRequest,
    LoginRequest,
    ProtocolError,
    SessionExpiredError,
    SetStateRequest,
    SimpliSafeRequest,
    SimpliSafeResponse,
    SimpliSafeSession,
    SimpliSafeState,
    parse_locations_response,
    parse_login_response,
    parse_state_response,
)
from .base_station import SimpliSafeBaseStation
from .const import LOGGER, LOGIN_RETURN_CODE_INVALID


class ControllerState(StrEnum):
    """Represent what the controller does on its next tick."""

    NOT_CONFIGURED = "not_configured"
    NEEDS_LOGIN = "needs_login"
    NEEDS_DISCOVERY = "needs_discovery"
    POLLING = "polling"


class SimpliSafeStatus(StrEnum):
    """Represent the status reported to Home Assistant."""

    NOT_CONFIGURED = "not_configured"
    RUNNING = "running"
    FAILED = "failed"


class SimpliSafeHost(Protocol):
    """Services the controller needs from the platform it runs in."""

    def send_request(
        self, request: SimpliSafeRequest, session: SimpliSafeSession | None
    ) -> None:
        """Send a request without waiting; the outcome is handed back later."""

    def publish_base_station(self, base_station: SimpliSafeBaseStation) -> None:
        """Announce a newly discovered base station."""

    def notify_armed_changed(self, location_id: str, armed: bool) -> None:
        """Announce a base station state update."""

    def report_status(self, status: SimpliSafeStatus, reason: str | None) -> None:
        """Announce a status change."""


class SimpliSafeController:
    """Own credentials, session and base stations, and drive the polling cycle.

    Every public method is an event handler and must be called from a single
    thread (the Home Assistant event loop); none of them block.
    """

    def __init__(self, host: SimpliSafeHost) -> None:
        """Initialize the controller."""
        self._host = host
        self._device_uuid = str(uuid.uuid4())
        self._username: str | None = None
        self._password: str | None = None
        self._session: SimpliSafeSession | None = None
        self._pending_login: LoginRequest | None = None
        self._base_stations: dict[str, SimpliSafeBaseStation] = {}
        self.status = SimpliSafeStatus.NOT_CONFIGURED
        self.status_reason: str | None = None

    @property
    def device_uuid(self) -> str:
        """Return the device uuid sent with every login."""
        return self._device_uuid

    @property
    def username(self) -> str | None:
        """Return the configured username, if any."""
        return self._username

    @property
    def session(self) -> SimpliSafeSession | None:
        """Return the active session, if any."""
        return self._session

    @property
    def base_stations(self) -> dict[str, SimpliSafeBaseStation]:
        """Return the discovered base stations by location id."""
        return self._base_stations

    @property
    def state(self) -> ControllerState:
        """Return the state derived from credentials, session and base stations."""
        if not self.has_credentials:
            return ControllerState.NOT_CONFIGURED
        if self._session is None:
            return ControllerState.NEEDS_LOGIN
        if not self._base_stations:
            return ControllerState.NEEDS_DISCOVERY
        return ControllerState.POLLING

    @property
    def has_credentials(self) -> bool:
        """Return whether both username and password are set."""
        return self._username is not None and self._password is not None

    def armed_states(self) -> dict[str, bool | None]:
        """Return the armed flag of every known base station."""
        return {
            location_id: base_station.armed
            for location_id, base_station in self._base_stations.items()
        }

    def configure(self, username: str | None, password: str | None) -> None:
        """Apply new credentials."""
        if not username or not password:
            err = ConfigurationError("Username and password not configured")
            LOGGER.debug("%s", err)
            self._username = None
            self._password = None
            self._session = None
            self._set_status(SimpliSafeStatus.NOT_CONFIGURED, str(err))
            return
        if username == self._username and password == self._password:
            return
        LOGGER.debug("Username and password have changed")
        self._session = None
        self._username = username
        self._password = password
        self.tick()

    def tick(self) -> None:
        """Perform the one action the current state calls for."""
        state = self.state
        LOGGER.debug("Tick in state %s", state)
        if state is ControllerState.NOT_CONFIGURED:
            if self.status is not SimpliSafeStatus.FAILED:
                self._set_status(
                    SimpliSafeStatus.NOT_CONFIGURED,
                    "Username and password not configured",
                )
        elif state is ControllerState.NEEDS_LOGIN:
            assert self._username is not None
            assert self._password is not None
            self._pending_login = LoginRequest(
                username=self._username,
                password=self._password,
                device_uuid=self._device_uuid,
            )
            self._send(self._pending_login)
        elif state is ControllerState.NEEDS_DISCOVERY:
            self._send(LocationsRequest())
        else:
            for base_station in list(self._base_stations.values()):
                base_station.refresh()

    def set_armed(self, location_id: str, armed: bool) -> None:
        """Arm or disarm a base station."""
        base_station = self._base_stations.get(location_id)
        if base_station is None:
            LOGGER.error("Unable to change state of unknown base station %s", location_id)
            return
        base_station.set_armed(armed)

    def request_state(self, location_id: str) -> None:
        """Request the state of a location."""
        if self._session is None:
            LOGGER.error(
                "Full login information not available; unable to perform status query"
            )
            return
        self._send(GetStateRequest(location_id))

    def request_state_change(self, location_id: str, state: SimpliSafeState) -> None:
        """Request a new state for a location."""
        if self._session is None:
            LOGGER.error("Full login information not available; unable to set state")
            return
        LOGGER.debug("Performing set state: %s, %s", location_id, state)
        self._send(SetStateRequest(location_id, state))

    def handle_response(
        self, response: SimpliSafeResponse, request: SimpliSafeRequest
    ) -> None:
        """Route a response to the handler of the request it answers."""
        LOGGER.debug("Received HTTP response (%s) for %s", response.status, request.tag)
        self._clear_pending_login(request)
        try:
            if response.status == HTTPStatus.UNAUTHORIZED:
                if isinstance(request, LoginRequest):
                    self._handle_rejected_login(request)
                else:
                    self._handle_expired_session(request)
            elif response.status == HTTPStatus.OK:
                if isinstance(request, LoginRequest):
                    self._handle_login(request, response)
                elif isinstance(request, LocationsRequest):
                    self._handle_locations(response)
                elif isinstance(request, (GetStateRequest, SetStateRequest)):
                    self._handle_state(request.location_id, response)
                else:
                    raise ProtocolError(f"Received unrecognized response type: {request}")
            else:
                raise ProtocolError(
                    f"Received unexpected status code for {request.tag}: {response.status}"
                )
        except ProtocolError as err:
            LOGGER.error("Error processing HTTP response: %s", err)

    def handle_request_failure(self, err: Exception, request: SimpliSafeRequest) -> None:
        """Log a request that never produced a response; the next tick retries."""
        self._clear_pending_login(request)
        LOGGER.error("Request failure for %s: %s", request.tag, err)

    def _handle_rejected_login(self, request: LoginRequest) -> None:
        if request.username != self._username:
            LOGGER.debug("Ignoring rejected login for previous credentials")
            return
        self._invalidate_credentials(
            AuthenticationError("Username and/or password are invalid")
        )

    def _handle_expired_session(self, request: SimpliSafeRequest) -> None:
        err = SessionExpiredError(f"Session rejected for {request.tag}")
        LOGGER.warning("Detected invalid session; will login again (%s)", err)
        self._session = None
        if self._pending_login is not None:
            LOGGER.debug("Login already in flight; not sending another")
            return
        self.tick()

    def _handle_login(self, request: LoginRequest, response: SimpliSafeResponse) -> None:
        result = parse_login_response(response.body)
        if request.username != self._username:
            LOGGER.debug("Ignoring login response for previous credentials")
            return
        if result.return_code == LOGIN_RETURN_CODE_INVALID:
            self._invalidate_credentials(
                AuthenticationError("Username and/or password are invalid")
            )
            return
        if result.token is None or result.user_id is None:
            raise ProtocolError(
                f"Received an unexpected login return_code: {result.return_code}"
            )
        self._session = SimpliSafeSession(
            token=result.token, user_id=result.user_id, cookies=response.cookies
        )
        LOGGER.info("Received a successful login for user: %s", result.username)
        self._set_status(SimpliSafeStatus.RUNNING, None)
        self.tick()

    def _handle_locations(self, response: SimpliSafeResponse) -> None:
        found_new = False
        for location_id in parse_locations_response(response.body):
            if location_id in self._base_stations:
                continue
            LOGGER.info("Publishing base station: %s", location_id)
            base_station = SimpliSafeBaseStation(location_id, self)
            self._base_stations[location_id] = base_station
            self._host.publish_base_station(base_station)
            found_new = True
        if found_new:
            self.tick()
        else:
            LOGGER.debug("No new base station found")

    def _handle_state(self, location_id: str, response: SimpliSafeResponse) -> None:
        response_code = parse_state_response(response.body)
        base_station = self._base_stations.get(location_id)
        if base_station is None:
            LOGGER.error("Received state for unknown base station: %s", location_id)
            return
        armed = base_station.on_state_response(response_code)
        self._host.notify_armed_changed(location_id, armed)

    def _invalidate_credentials(self, err: AuthenticationError) -> None:
        LOGGER.error("Configured credentials appear to be invalid; resetting them: %s", err)
        self._username = None
        self._password = None
        self._session = None
        # Every rejected attempt is reported, even with an unchanged reason.
        self.status = SimpliSafeStatus.FAILED
        self.status_reason = str(err)
        self._host.report_status(self.status, self.status_reason)

    def _set_status(self, status: SimpliSafeStatus, reason: str | None) -> None:
        if status == self.status and reason == self.status_reason:
            return
        self.status = status
        self.status_reason = reason
        self._host.report_status(status, reason)

    def _clear_pending_login(self, request: SimpliSafeRequest) -> None:
        if request == self._pending_login:
            self._pending_login = None

    def _send(self, request: SimpliSafeRequest) -> None:
        self._host.send_request(request, self._session)
