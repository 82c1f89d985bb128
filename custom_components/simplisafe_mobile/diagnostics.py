"""Diagnostics support for SimpliSafe."""

from __future__ import annotations

from typing import Any

from homeassistant.components.diagnostics import async_redact_data
from homeassistant.const import CONF_PASSWORD, CONF_USERNAME
from homeassistant.core import HomeAssistant

from .coordinator import SimpliSafeConfigEntry

TO_REDACT = {CONF_USERNAME, CONF_PASSWORD, "token", "cookies", "user_id"}


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: SimpliSafeConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry."""
    controller = entry.runtime_data.controller
    session = controller.session
    return async_redact_data(
        {
            "entry": dict(entry.data),
            "state": str(controller.state),
            "status": str(controller.status),
            "status_reason": controller.status_reason,
            "session": (
                {
                    "token": session.token,
                    "user_id": session.user_id,
                    "cookies": sorted(name for name, _ in session.cookies),
                }
                if session is not None
                else None
            ),
            "base_stations": [
                {
                    "location_id": base_station.location_id,
                    "armed": base_station.armed,
                    "mode": str(base_station.state) if base_station.state else None,
                }
                for base_station in controller.base_stations.values()
            ],
        },
        TO_REDACT,
    )
