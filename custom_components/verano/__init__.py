from __future__ import annotations

import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_PASSWORD, CONF_USERNAME, Platform
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ConfigEntryNotReady

from .api import create_session_client
from .client import VeranoDeviceClient
from .const import DOMAIN
from .controller import VeranoTemperatureController
from .coordinator import VeranoDataUpdateCoordinator
from .exceptions import VeranoAuthError, VeranoConfigError, VeranoTransportError
from .models import Credentials, DeviceConfig
from .session import VeranoSession

_LOGGER = logging.getLogger(__name__)

PLATFORMS = [Platform.CLIMATE]


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info("Setting up Verano integration for entry %s", entry.entry_id)

    try:
        credentials = Credentials(
            username=entry.data.get(CONF_USERNAME, ""),
            password=entry.data.get(CONF_PASSWORD, ""),
        )
        device_config = DeviceConfig.from_mapping(entry.data)
    except VeranoConfigError as err:
        _LOGGER.error("Invalid configuration for entry %s: %s", entry.entry_id, err)
        return False

    http = create_session_client(hass)
    session = VeranoSession(http, credentials)
    client = VeranoDeviceClient(session, device_config)
    controller = VeranoTemperatureController(client, device_config)

    try:
        await session.async_authorize()
    except VeranoAuthError as err:
        _LOGGER.warning(
            "Authentication failed for entry %s: %s", entry.entry_id, str(err)
        )
        await http.aclose()
        return False
    except VeranoTransportError as err:
        _LOGGER.error("Connection error for entry %s: %s", entry.entry_id, str(err))
        await http.aclose()
        return False

    coordinator = VeranoDataUpdateCoordinator(hass, controller, entry)
    try:
        await coordinator.async_config_entry_first_refresh()
    except ConfigEntryNotReady:
        await coordinator.async_shutdown()
        await http.aclose()
        raise

    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = {
        "session": session,
        "controller": controller,
        "coordinator": coordinator,
    }
    _LOGGER.debug(
        "Stored data for entry %s: tile %d", entry.entry_id, device_config.tile_id
    )

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    _LOGGER.info("Successfully setup Verano integration for entry %s", entry.entry_id)
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info("Unloading Verano integration for entry %s", entry.entry_id)

    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if not unload_ok:
        _LOGGER.warning("Failed to unload some platforms for entry %s", entry.entry_id)
        return False

    entry_data = hass.data.get(DOMAIN, {}).pop(entry.entry_id, None)
    if entry_data is not None:
        await entry_data["coordinator"].async_shutdown()
        await entry_data["session"].http.aclose()
        _LOGGER.debug("Cleaned up data for entry %s", entry.entry_id)

    _LOGGER.info("Successfully unloaded Verano integration for entry %s", entry.entry_id)
    return True
