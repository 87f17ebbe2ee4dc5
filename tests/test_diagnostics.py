"""Tests for Verano diagnostics."""

from datetime import timedelta
from unittest.mock import Mock

import pytest
from homeassistant.components.diagnostics import REDACTED
from homeassistant.const import CONF_PASSWORD, CONF_USERNAME

from custom_components.verano.const import CONF_TILE_ID, DOMAIN
from custom_components.verano.controller import VeranoTemperatureController
from custom_components.verano.diagnostics import async_get_config_entry_diagnostics
from custom_components.verano.models import DeviceConfig


@pytest.mark.asyncio
async def test_diagnostics_redacts_credentials_and_cookie() -> None:
    """Test that diagnostics hide secrets but keep device state."""
    config = DeviceConfig()
    controller = VeranoTemperatureController(Mock(), config)
    session = Mock()
    session.authorized = True
    session.cookie = "session=abc123"
    coordinator = Mock()
    coordinator.last_update_success = True
    coordinator.update_interval = timedelta(seconds=30)

    hass = Mock()
    hass.data = {
        DOMAIN: {
            "test_entry_id": {
                "session": session,
                "controller": controller,
                "coordinator": coordinator,
            }
        }
    }
    entry = Mock()
    entry.entry_id = "test_entry_id"
    entry.data = {
        CONF_USERNAME: "user@example.com",
        CONF_PASSWORD: "password123",
        CONF_TILE_ID: 58,
    }

    result = await async_get_config_entry_diagnostics(hass, entry)

    assert result["entry"][CONF_USERNAME] == REDACTED
    assert result["entry"][CONF_PASSWORD] == REDACTED
    assert result["entry"][CONF_TILE_ID] == 58
    assert result["session"] == {"authorized": True, "cookie": REDACTED}
    assert result["device_config"]["setpoint_ido"] == 139
    assert result["controller"]["state"]["target_temperature"] == 10.0
    assert result["controller"]["write_pending"] is False
    assert result["coordinator"]["update_interval"] == "0:00:30"
