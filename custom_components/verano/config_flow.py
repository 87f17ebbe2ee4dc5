"""
Configuration flow for Verano eModul integration.

This module handles the setup of the Verano integration through Home
Assistant's config flow system. Credentials and the temperature tile are
checked against the eModul backend before the entry is created.
"""

import logging
from typing import Any

import voluptuous as vol
from homeassistant.config_entries import ConfigFlow, ConfigFlowResult
from homeassistant.const import CONF_PASSWORD, CONF_USERNAME
from homeassistant.helpers.httpx_client import get_async_client

from .client import VeranoDeviceClient
from .const import (
    CONF_MAX_TEMP,
    CONF_MIN_TEMP,
    CONF_OFF_THRESHOLD,
    CONF_POLL_INTERVAL,
    CONF_SETPOINT_IDO,
    CONF_TEMP_STEP,
    CONF_TEMPERATURE_DIVIDER,
    CONF_TILE_ID,
    DEFAULT_MAX_TEMP,
    DEFAULT_MIN_TEMP,
    DEFAULT_OFF_THRESHOLD,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_SETPOINT_IDO,
    DEFAULT_TEMP_STEP,
    DEFAULT_TEMPERATURE_DIVIDER,
    DEFAULT_TILE_ID,
    DOMAIN,
    ERROR_CANNOT_CONNECT,
    ERROR_INVALID_AUTH,
    ERROR_INVALID_CONFIG,
    ERROR_TILE_NOT_FOUND,
    ERROR_UNKNOWN,
)
from .exceptions import (
    VeranoAuthError,
    VeranoConfigError,
    VeranoNotFoundError,
    VeranoTransportError,
)
from .models import Credentials, DeviceConfig
from .session import VeranoSession

_LOGGER = logging.getLogger(__name__)

STEP_USER_DATA_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_USERNAME): str,
        vol.Required(CONF_PASSWORD): str,
        vol.Optional(CONF_TILE_ID, default=DEFAULT_TILE_ID): vol.Coerce(int),
        vol.Optional(CONF_SETPOINT_IDO, default=DEFAULT_SETPOINT_IDO): vol.Coerce(
            int
        ),
        vol.Optional(
            CONF_TEMPERATURE_DIVIDER, default=DEFAULT_TEMPERATURE_DIVIDER
        ): vol.All(vol.Coerce(int), vol.Range(min=1)),
        vol.Optional(CONF_OFF_THRESHOLD, default=DEFAULT_OFF_THRESHOLD): vol.Coerce(
            float
        ),
        vol.Optional(CONF_MIN_TEMP, default=DEFAULT_MIN_TEMP): vol.Coerce(float),
        vol.Optional(CONF_MAX_TEMP, default=DEFAULT_MAX_TEMP): vol.Coerce(float),
        vol.Optional(CONF_TEMP_STEP, default=DEFAULT_TEMP_STEP): vol.Coerce(float),
        vol.Optional(CONF_POLL_INTERVAL, default=DEFAULT_POLL_INTERVAL): vol.All(
            vol.Coerce(int), vol.Range(min=5)
        ),
    }
)


class VeranoConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle configuration flow for Verano eModul integration."""

    VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """
        Handle the initial step of the config flow.

        Args:
            user_input: User input data containing credentials and device settings.

        Returns:
            ConfigFlowResult indicating the next step or errors.

        """
        errors: dict[str, str] = {}

        if user_input is not None:
            username = user_input[CONF_USERNAME]

            try:
                await self._async_validate_input(user_input)
            except VeranoConfigError as err:
                _LOGGER.warning("Invalid settings (%s): %s", ERROR_INVALID_CONFIG, err)
                errors["base"] = ERROR_INVALID_CONFIG
            except VeranoAuthError as err:
                _LOGGER.warning("Authentication failed (%s): %s", ERROR_INVALID_AUTH, err)
                errors["base"] = ERROR_INVALID_AUTH
            except VeranoNotFoundError as err:
                _LOGGER.warning("Tile not found (%s): %s", ERROR_TILE_NOT_FOUND, err)
                errors["base"] = ERROR_TILE_NOT_FOUND
            except VeranoTransportError:
                _LOGGER.exception("Connection error (%s)", ERROR_CANNOT_CONNECT)
                errors["base"] = ERROR_CANNOT_CONNECT
            except Exception:
                _LOGGER.exception(
                    "Unexpected error during validation (%s)",
                    ERROR_UNKNOWN,
                )
                errors["base"] = ERROR_UNKNOWN

            else:
                await self.async_set_unique_id(username.lower())
                self._abort_if_unique_id_configured()

                return self.async_create_entry(
                    title=f"Verano ({username})",
                    data=user_input,
                )

        return self.async_show_form(
            step_id="user",
            data_schema=STEP_USER_DATA_SCHEMA,
            errors=errors,
        )

    async def _async_validate_input(self, user_input: dict[str, Any]) -> None:
        """Log in and read the temperature tile once."""
        credentials = Credentials(
            username=user_input[CONF_USERNAME],
            password=user_input[CONF_PASSWORD],
        )
        device_config = DeviceConfig.from_mapping(user_input)

        session = VeranoSession(get_async_client(self.hass), credentials)
        client = VeranoDeviceClient(session, device_config)
        state = await client.async_get_state()
        _LOGGER.info(
            "Validated eModul account %s, current temperature %s",
            credentials.username,
            state.current_temperature,
        )
