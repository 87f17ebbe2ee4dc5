"""Climate entity for Verano heating controllers.

This module exposes the heating zone as a Home Assistant climate entity
with heat/off modes and target temperature control.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from typing import TYPE_CHECKING, Any

from homeassistant.components.climate import (
    ClimateEntity,
    ClimateEntityFeature,
    HVACMode,
)
from homeassistant.const import ATTR_TEMPERATURE, UnitOfTemperature
from homeassistant.core import callback
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.device_registry import DeviceInfo

from .const import DOMAIN, MANUFACTURER, MODEL
from .exceptions import VeranoError

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .coordinator import VeranoDataUpdateCoordinator
    from .models import ThermostatState

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the climate entity for a Verano config entry."""
    entry_data = hass.data[DOMAIN][entry.entry_id]
    async_add_entities(
        [
            VeranoClimateEntity(
                entry_data["coordinator"],
                entry.unique_id or entry.entry_id,
                entry.title,
            )
        ]
    )


class VeranoClimateEntity(ClimateEntity):
    """Climate entity for a single Verano heating zone.

    Reads come from the coordinator's cached state; writes go through the
    temperature controller, which updates the state optimistically before
    the debounced write is sent.
    """

    _attr_temperature_unit = UnitOfTemperature.CELSIUS
    _attr_hvac_modes = [HVACMode.HEAT, HVACMode.OFF]
    _attr_supported_features = (
        ClimateEntityFeature.TARGET_TEMPERATURE
        | ClimateEntityFeature.TURN_ON
        | ClimateEntityFeature.TURN_OFF
    )
    _attr_has_entity_name = True
    _attr_name = None
    _attr_should_poll = False

    def __init__(
        self,
        coordinator: VeranoDataUpdateCoordinator,
        unique_id: str,
        device_name: str,
    ) -> None:
        """Initialize the climate entity.

        Args:
            coordinator: Coordinator polling the heating zone.
            unique_id: Stable identifier of the config entry.
            device_name: Name shown for the device.

        """
        self._coordinator = coordinator
        self._controller = coordinator.controller
        self._coordinator_listener_unsub = None

        config = self._controller.config
        self._attr_unique_id = f"{unique_id}_{config.tile_id}"
        self._attr_min_temp = config.min_temp
        self._attr_max_temp = config.max_temp
        self._attr_target_temperature_step = config.temp_step
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, unique_id)},
            manufacturer=MANUFACTURER,
            model=MODEL,
            name=device_name,
        )

    @property
    def _thermostat_state(self) -> ThermostatState:
        return self._coordinator.data or self._controller.state

    @property
    def available(self) -> bool:
        """Return True if the last poll succeeded."""
        return self._coordinator.last_update_success

    @property
    def current_temperature(self) -> float | None:
        """Return the measured temperature."""
        return self._thermostat_state.current_temperature

    @property
    def target_temperature(self) -> float | None:
        """Return the target temperature."""
        return self._thermostat_state.target_temperature

    @property
    def hvac_mode(self) -> HVACMode:
        """Return heat while the target is above the off threshold."""
        return HVACMode.HEAT if self._thermostat_state.heating else HVACMode.OFF

    async def async_added_to_hass(self) -> None:
        """Subscribe to coordinator updates."""
        await super().async_added_to_hass()
        self._coordinator_listener_unsub = self._coordinator.async_add_listener(
            self._handle_coordinator_update
        )

    async def async_will_remove_from_hass(self) -> None:
        """Unsubscribe from coordinator updates."""
        await super().async_will_remove_from_hass()

        if self._coordinator_listener_unsub is not None:
            self._coordinator_listener_unsub()
            self._coordinator_listener_unsub = None

    @callback
    def _handle_coordinator_update(self) -> None:
        """Handle updated data from the coordinator."""
        self.async_write_ha_state()

    async def async_set_temperature(self, **kwargs: Any) -> None:  # noqa: ANN401
        """Set the target temperature.

        Args:
            **kwargs: Keyword arguments containing temperature data.

        """
        temperature = kwargs.get(ATTR_TEMPERATURE)
        if temperature is None:
            return
        await self._async_execute(self._controller.async_request_set(temperature))

    async def async_set_hvac_mode(self, hvac_mode: HVACMode) -> None:
        """Set the HVAC mode.

        Args:
            hvac_mode: HEAT resumes the last heating target, OFF writes the
                off threshold.

        """
        if hvac_mode == HVACMode.OFF:
            await self._async_execute(self._controller.async_turn_off())
        elif hvac_mode == HVACMode.HEAT:
            await self._async_execute(self._controller.async_turn_on())
        else:
            _LOGGER.warning("Unsupported HVAC mode for %s: %s", self.entity_id, hvac_mode)

    async def async_turn_on(self) -> None:
        """Turn heating on."""
        await self.async_set_hvac_mode(HVACMode.HEAT)

    async def async_turn_off(self) -> None:
        """Turn heating off."""
        await self.async_set_hvac_mode(HVACMode.OFF)

    async def _async_execute(self, command: Awaitable[None]) -> None:
        """Await a controller command and surface failures to the user."""
        try:
            await command
        except VeranoError as err:
            _LOGGER.error("Failed to update %s: %s", self.entity_id, err)
            error_msg = f"Failed to update Verano thermostat: {err}"
            raise HomeAssistantError(error_msg) from err
