"""Diagnostics support for Verano eModul."""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING, Any

from homeassistant.components.diagnostics import async_redact_data
from homeassistant.const import CONF_PASSWORD, CONF_USERNAME

from .const import DOMAIN

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant

TO_REDACT = {CONF_USERNAME, CONF_PASSWORD, "cookie"}


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry."""
    entry_data = hass.data[DOMAIN][entry.entry_id]
    session = entry_data["session"]
    controller = entry_data["controller"]
    coordinator = entry_data["coordinator"]

    return {
        "entry": async_redact_data(dict(entry.data), TO_REDACT),
        "device_config": asdict(controller.config),
        "session": async_redact_data(
            {"authorized": session.authorized, "cookie": session.cookie},
            TO_REDACT,
        ),
        "controller": {
            "state": asdict(controller.state),
            "write_in_flight": controller.write_in_flight,
            "write_pending": controller.write_pending,
            "last_requested": controller.last_requested,
        },
        "coordinator": {
            "last_update_success": coordinator.last_update_success,
            "update_interval": str(coordinator.update_interval),
        },
    }
