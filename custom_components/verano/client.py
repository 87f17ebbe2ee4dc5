"""Device state client for Verano controllers on the eModul backend."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

import httpx

from . import api
from .exceptions import VeranoAuthError, VeranoTransportError
from .models import DeviceConfig, ThermostatState, Tile
from .session import VeranoSession

_LOGGER = logging.getLogger(__name__)

_T = TypeVar("_T")


class VeranoDeviceClient:
    """Read tiles from and write setpoints to a single heating zone."""

    def __init__(self, session: VeranoSession, config: DeviceConfig) -> None:
        """Initialize the client.

        Args:
            session: Session used to authenticate every request.
            config: Encoding and addressing of the heating zone.

        """
        self._session = session
        self._config = config

    @property
    def config(self) -> DeviceConfig:
        """Return the device configuration."""
        return self._config

    async def async_fetch_tiles(self) -> list[Tile]:
        """Fetch the device tiles, reauthenticating once if needed.

        Raises:
            VeranoAuthError: If reauthentication itself was rejected.
            VeranoTransportError: If the request failed.

        """
        return await self._async_call(
            "tiles fetch",
            lambda cookie: api.async_get_tiles(self._session.http, cookie),
        )

    def parse_state(self, tiles: list[Tile]) -> ThermostatState:
        """Decode the thermostat state using the configured tile."""
        return api.parse_state(
            tiles,
            self._config.tile_id,
            self._config.temperature_divider,
            self._config.off_threshold,
        )

    async def async_get_state(self) -> ThermostatState:
        """Fetch the tiles and decode the thermostat state."""
        return self.parse_state(await self.async_fetch_tiles())

    async def async_write_setpoint(self, target: float) -> None:
        """Write a new target temperature, reauthenticating once if needed.

        Raises:
            VeranoAuthError: If reauthentication itself was rejected.
            VeranoTransportError: If the write failed.

        """
        payload = api.build_setpoint_payload(
            self._config.setpoint_ido, target, self._config.temperature_divider
        )
        _LOGGER.info("Changing target temperature to %s", target)
        await self._async_call(
            "setpoint write",
            lambda cookie: api.async_send_control_data(
                self._session.http, cookie, payload
            ),
        )

    async def _async_call(
        self,
        description: str,
        request: Callable[[str], Awaitable[_T]],
    ) -> _T:
        """Run an authenticated request with a single reauth-and-retry."""
        await self._session.async_ensure_session()
        try:
            return await self._async_attempt(description, request)
        except VeranoAuthError:
            _LOGGER.warning("Session rejected during %s, reauthorizing", description)
            self._session.invalidate()

        await self._session.async_authorize()
        try:
            return await self._async_attempt(description, request)
        except VeranoAuthError as err:
            self._session.invalidate()
            error_msg = f"Session rejected again during {description}: {err}"
            raise VeranoTransportError(error_msg) from err

    async def _async_attempt(
        self,
        description: str,
        request: Callable[[str], Awaitable[_T]],
    ) -> _T:
        try:
            return await request(self._session.cookie)
        except httpx.TimeoutException as err:
            error_msg = f"Timeout during {description}: {err}"
            raise VeranoTransportError(error_msg) from err
        except httpx.RequestError as err:
            error_msg = f"Connection error during {description}: {err}"
            raise VeranoTransportError(error_msg) from err
