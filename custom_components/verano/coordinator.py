"""Coordinator for Verano eModul integration."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING

from homeassistant.core import callback
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from .const import DOMAIN
from .exceptions import VeranoNotFoundError
from .models import ThermostatState

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant

    from .controller import VeranoTemperatureController

_LOGGER = logging.getLogger(__name__)


class VeranoDataUpdateCoordinator(DataUpdateCoordinator[ThermostatState]):
    """Coordinator that periodically refreshes the heating zone state.

    Refresh failures are non-fatal: the controller keeps its previous
    state and polling continues on the next interval.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        controller: VeranoTemperatureController,
        config_entry: ConfigEntry | None = None,
    ) -> None:
        """Initialize the coordinator."""
        super().__init__(
            hass,
            _LOGGER,
            name=DOMAIN,
            update_interval=timedelta(seconds=controller.config.poll_interval),
        )
        self.config_entry = config_entry
        self.controller = controller
        self.data = controller.state
        self._controller_listener_unsub = controller.async_add_listener(
            self._handle_controller_state
        )

    async def _async_update_data(self) -> ThermostatState:
        try:
            refreshed = await self.controller.async_refresh()
        except VeranoNotFoundError as err:
            error_msg = f"Configured tile missing from module data: {err}"
            raise UpdateFailed(error_msg) from err

        if not refreshed:
            _LOGGER.debug("Keeping previous thermostat state after failed poll")
        return self.controller.state

    @callback
    def _handle_controller_state(self, state: ThermostatState) -> None:
        """Push controller state to entities without resetting the poll timer."""
        self.data = state
        self.async_update_listeners()

    async def async_shutdown(self) -> None:
        """Stop polling and cancel pending writes."""
        if self._controller_listener_unsub is not None:
            self._controller_listener_unsub()
            self._controller_listener_unsub = None
        await self.controller.async_shutdown()
        await super().async_shutdown()
