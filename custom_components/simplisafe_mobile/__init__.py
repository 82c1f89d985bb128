"""The SimpliSafe (mobile API) integration."""

from __future__ import annotations

from homeassistant.const import Platform
from homeassistant.core import HomeAssistant
from homeassistant.helpers import aiohttp_client

from .api import SimpliSafeApi
from .coordinator import SimpliSafeConfigEntry, SimpliSafeCoordinator

PLATFORMS: list[Platform] = [Platform.ALARM_CONTROL_PANEL]


async def async_setup_entry(hass: HomeAssistant, entry: SimpliSafeConfigEntry) -> bool:
    """Set up SimpliSafe from a config entry."""

    api = SimpliSafeApi(aiohttp_client.async_get_clientsession(hass))

    coordinator = SimpliSafeCoordinator(hass, api, entry)
    entry.runtime_data = coordinator

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)

    coordinator.async_start()
    entry.async_on_unload(entry.add_update_listener(_async_update_listener))

    return True


async def _async_update_listener(
    hass: HomeAssistant, entry: SimpliSafeConfigEntry
) -> None:
    """Apply changed credentials without reloading."""
    entry.runtime_data.async_configure()


async def async_unload_entry(hass: HomeAssistant, entry: SimpliSafeConfigEntry) -> bool:
    """Unload a config entry."""
    return await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
