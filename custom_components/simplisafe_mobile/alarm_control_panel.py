"""Support for SimpliSafe base stations as alarm control panels."""

from __future__ import annotations

from typing import Any

from homeassistant.components.alarm_control_panel import (
    AlarmControlPanelEntity,
    AlarmControlPanelEntityFeature,
    AlarmControlPanelState,
)
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .base_station import SimpliSafeBaseStation
from .const import DOMAIN, LOGGER, MANUFACTURER, SIGNAL_NEW_BASE_STATION
from .coordinator import SimpliSafeConfigEntry, SimpliSafeCoordinator


async def async_setup_entry(
    hass: HomeAssistant,
    entry: SimpliSafeConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up SimpliSafe alarm control panels from a config entry."""
    coordinator = entry.runtime_data

    @callback
    def _async_add_base_station(base_station: SimpliSafeBaseStation) -> None:
        LOGGER.debug("Adding alarm control panel for %s", base_station.location_id)
        async_add_entities([SimpliSafeAlarmPanelEntity(coordinator, base_station)])

    async_add_entities(
        SimpliSafeAlarmPanelEntity(coordinator, base_station)
        for base_station in coordinator.controller.base_stations.values()
    )
    entry.async_on_unload(
        async_dispatcher_connect(
            hass,
            SIGNAL_NEW_BASE_STATION.format(entry.entry_id),
            _async_add_base_station,
        )
    )


class SimpliSafeAlarmPanelEntity(
    CoordinatorEntity[SimpliSafeCoordinator], AlarmControlPanelEntity
):
    """Representation of a SimpliSafe base station."""

    _attr_code_arm_required = False
    _attr_has_entity_name = True
    _attr_name = None
    _attr_supported_features = AlarmControlPanelEntityFeature.ARM_AWAY

    def __init__(
        self, coordinator: SimpliSafeCoordinator, base_station: SimpliSafeBaseStation
    ) -> None:
        """Initialize the entity."""
        super().__init__(coordinator)
        self._base_station = base_station
        self._attr_unique_id = base_station.location_id
        self._attr_device_info = DeviceInfo(
            name=base_station.name,
            manufacturer=MANUFACTURER,
            model="Base station",
            identifiers={(DOMAIN, base_station.location_id)},
            configuration_url="https://simplisafe.com",
        )

    @property
    def available(self) -> bool:
        """Return if the base station can be reached."""
        return self.coordinator.controller.session is not None

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return the vendor mode, which distinguishes home from off."""
        state = self._base_station.state
        return {"mode": str(state) if state is not None else None}

    async def async_alarm_disarm(self, code: str | None = None) -> None:
        """Send disarm command."""
        self._attr_alarm_state = AlarmControlPanelState.DISARMING
        self.async_write_ha_state()
        self.coordinator.controller.set_armed(self._base_station.location_id, False)

    async def async_alarm_arm_away(self, code: str | None = None) -> None:
        """Send arm away command."""
        self._attr_alarm_state = AlarmControlPanelState.ARMING
        self.async_write_ha_state()
        self.coordinator.controller.set_armed(self._base_station.location_id, True)

    @callback
    def _handle_coordinator_update(self) -> None:
        """Handle updated data from the coordinator."""
        armed = self.coordinator.data.get(self._base_station.location_id)
        if armed is None:
            self._attr_alarm_state = None
        elif armed:
            self._attr_alarm_state = AlarmControlPanelState.ARMED_AWAY
        else:
            self._attr_alarm_state = AlarmControlPanelState.DISARMED
        super()._handle_coordinator_update()

    async def async_added_to_hass(self) -> None:
        """When entity is added to hass."""
        await super().async_added_to_hass()
        self._handle_coordinator_update()
