"""Per-location state of a SimpliSafe base station."""

from typing import Protocol

from .api import RESPONSE_CODE_TO_STATE, SimpliSafeState
from .const import LOGGER, RESPONSE_CODE_AWAY


class SimpliSafeClient(Protocol):
    """Used by base stations to get and set their state."""

    def request_state(self, location_id: str) -> None:
        """Request the current state of a location."""

    def request_state_change(self, location_id: str, state: SimpliSafeState) -> None:
        """Request a location to switch to a new state."""


class SimpliSafeBaseStation:
    """Represent a base station, i.e. whether the overall system is armed or not."""

    def __init__(self, location_id: str, client: SimpliSafeClient) -> None:
        """Initialize the base station."""
        self.location_id = location_id
        self._client = client
        self.armed: bool | None = None
        self.state: SimpliSafeState | None = None

    @property
    def name(self) -> str:
        """Return the default device name."""
        return f"SimpliSafe ({self.location_id})"

    def refresh(self) -> None:
        """Ask for the current state; the answer arrives later."""
        self._client.request_state(self.location_id)

    def set_armed(self, armed: bool) -> None:
        """Arm (away) or disarm (home) the base station."""
        state = SimpliSafeState.AWAY if armed else SimpliSafeState.HOME
        LOGGER.debug("Setting %s to %s", self.location_id, state)
        self._client.request_state_change(self.location_id, state)

    def on_state_response(self, response_code: int) -> bool:
        """Apply a state response code and return the new armed flag."""
        self.state = RESPONSE_CODE_TO_STATE.get(response_code)
        if self.state is None:
            LOGGER.warning(
                "Unknown response_code %s for %s", response_code, self.location_id
            )
        self.armed = response_code == RESPONSE_CODE_AWAY
        return self.armed
