"""Coordinator running the SimpliSafe controller inside Home Assistant."""

from __future__ import annotations

from datetime import datetime

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_PASSWORD, CONF_USERNAME
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.dispatcher import async_dispatcher_send
from homeassistant.helpers.event import async_track_time_interval
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator

from .api import (
    SimpliSafeApi,
    SimpliSafeError,
    SimpliSafeRequest,
    SimpliSafeSession,
)
from .base_station import SimpliSafeBaseStation
from .const import DOMAIN, LOGGER, SIGNAL_NEW_BASE_STATION, UPDATE_INTERVAL
from .controller import SimpliSafeController, SimpliSafeStatus

type SimpliSafeConfigEntry = ConfigEntry[SimpliSafeCoordinator]


class SimpliSafeCoordinator(DataUpdateCoordinator[dict[str, bool | None]]):
    """Tick the controller periodically and carry its requests over HTTP.

    The controller decides what to send; this class only owns the timer,
    the background tasks that wait for HTTP responses, and the fan-out to
    entities. Entity updates are pushed, so no update_interval is set.
    """

    config_entry: SimpliSafeConfigEntry

    def __init__(
        self, hass: HomeAssistant, api: SimpliSafeApi, config_entry: SimpliSafeConfigEntry
    ) -> None:
        """Initialize SimpliSafeCoordinator."""
        super().__init__(hass, LOGGER, name=DOMAIN, config_entry=config_entry)
        self.api = api
        self.controller = SimpliSafeController(self)

    @callback
    def async_start(self) -> None:
        """Seed the data, start ticking and apply the configured credentials."""
        self.async_set_updated_data(self.controller.armed_states())
        self.config_entry.async_on_unload(
            async_track_time_interval(self.hass, self._async_tick, UPDATE_INTERVAL)
        )
        self.async_configure()

    @callback
    def async_configure(self) -> None:
        """Hand the credentials of the config entry to the controller."""
        self.controller.configure(
            self.config_entry.data.get(CONF_USERNAME),
            self.config_entry.data.get(CONF_PASSWORD),
        )

    @callback
    def _async_tick(self, now: datetime) -> None:
        self.controller.tick()

    async def _async_update_data(self) -> dict[str, bool | None]:
        """Return the last known states; fresh ones are pushed as they arrive."""
        return self.controller.armed_states()

    @callback
    def send_request(
        self, request: SimpliSafeRequest, session: SimpliSafeSession | None
    ) -> None:
        """Send a request in the background."""
        self.config_entry.async_create_background_task(
            self.hass,
            self._async_execute(request, session),
            name=f"{DOMAIN} {request.tag}",
            eager_start=False,
        )

    async def _async_execute(
        self, request: SimpliSafeRequest, session: SimpliSafeSession | None
    ) -> None:
        try:
            response = await self.api.async_send(request, session)
        except SimpliSafeError as err:
            self.controller.handle_request_failure(err, request)
            return
        self.controller.handle_response(response, request)

    @callback
    def publish_base_station(self, base_station: SimpliSafeBaseStation) -> None:
        """Let the alarm control panel platform add an entity for the base station."""
        async_dispatcher_send(
            self.hass,
            SIGNAL_NEW_BASE_STATION.format(self.config_entry.entry_id),
            base_station,
        )

    @callback
    def notify_armed_changed(self, location_id: str, armed: bool) -> None:
        """Push the new states to the entities."""
        LOGGER.debug("Base station %s armed: %s", location_id, armed)
        self.async_set_updated_data(self.controller.armed_states())

    @callback
    def report_status(self, status: SimpliSafeStatus, reason: str | None) -> None:
        """Log status changes and ask for new credentials when they are rejected."""
        if status is SimpliSafeStatus.FAILED:
            LOGGER.error("SimpliSafe failed: %s", reason)
            self.config_entry.async_start_reauth(self.hass)
        else:
            LOGGER.info("SimpliSafe status is now %s", status)
