"""Temperature controller for Verano heating zones.

The controller keeps the locally displayed thermostat state, applies
requested targets optimistically, coalesces rapid requests into a single
debounced write, and reconciles the optimistic target against polled
server state.

Reconciliation policy: the optimistic target is kept while a write is in
flight, while a debounced write is pending, or while the last requested
target differs from the server target by more than half a step. Otherwise
the server target is authoritative and the last requested marker is
cleared.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import math
from collections.abc import Callable

from .const import DEBOUNCE_DELAY
from .client import VeranoDeviceClient
from .exceptions import VeranoAuthError, VeranoTransportError
from .models import DeviceConfig, ThermostatState

_LOGGER = logging.getLogger(__name__)

# Decimal places kept after stepping, to drop float noise
_STEP_PRECISION = 6


def clamp_and_step(
    value: float, min_temp: float, max_temp: float, step: float
) -> float:
    """Clamp a temperature into range and snap it to the step grid.

    The grid is measured from min_temp; halves round up. A snapped value
    that would overshoot max_temp is moved one step down.
    """
    clamped = min(max(value, min_temp), max_temp)
    steps = math.floor((clamped - min_temp) / step + 0.5)
    stepped = min_temp + steps * step
    if stepped > max_temp:
        stepped -= step
    return round(stepped, _STEP_PRECISION)


class VeranoTemperatureController:
    """Coordinate optimistic setpoint writes with polled device state."""

    def __init__(
        self,
        client: VeranoDeviceClient,
        config: DeviceConfig,
        debounce_delay: float = DEBOUNCE_DELAY,
    ) -> None:
        """Initialize the controller.

        Args:
            client: Client used for reads and writes.
            config: Range, step and threshold of the heating zone.
            debounce_delay: Quiet period in seconds before a write is sent.

        """
        self._client = client
        self._config = config
        self._debounce_delay = debounce_delay
        self._state = ThermostatState(
            current_temperature=None,
            target_temperature=config.min_temp,
            heating=config.min_temp > config.off_threshold,
        )
        self._listeners: list[Callable[[ThermostatState], None]] = []

        self._debounce_task: asyncio.Task[None] | None = None
        self._pending_target: float | None = None
        self._pending_future: asyncio.Future[None] | None = None
        self._write_in_flight = False
        self._last_requested: float | None = None
        self._last_heating_target: float | None = None

    @property
    def state(self) -> ThermostatState:
        """Return the state currently shown to the host."""
        return self._state

    @property
    def config(self) -> DeviceConfig:
        """Return the device configuration."""
        return self._config

    @property
    def write_in_flight(self) -> bool:
        """Return True while a setpoint write is executing."""
        return self._write_in_flight

    @property
    def write_pending(self) -> bool:
        """Return True while a debounced write has not fired yet."""
        return self._debounce_task is not None and not self._debounce_task.done()

    @property
    def last_requested(self) -> float | None:
        """Return the last requested target not yet confirmed by the server."""
        return self._last_requested

    def clamp_and_step(self, value: float) -> float:
        """Clamp and step a value using the configured range."""
        return clamp_and_step(
            value, self._config.min_temp, self._config.max_temp, self._config.temp_step
        )

    def async_add_listener(
        self, listener: Callable[[ThermostatState], None]
    ) -> Callable[[], None]:
        """Register a callback for state changes; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def remove_listener() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove_listener

    async def async_request_set(self, value: float) -> None:
        """Request a new target temperature.

        The state is updated and pushed at once; the write itself is sent
        after the debounce period. Calls arriving within that period replace
        the pending value and share the outcome of the single write.

        Raises:
            VeranoAuthError: If reauthentication was rejected.
            VeranoTransportError: If the write failed or was dropped.

        """
        target = self.clamp_and_step(value)
        _LOGGER.debug("Requested target %s (stepped to %s)", value, target)
        self._last_requested = target
        self._set_state(
            ThermostatState(
                current_temperature=self._state.current_temperature,
                target_temperature=target,
                heating=target > self._config.off_threshold,
            )
        )
        future = self._schedule_write(target)
        await asyncio.shield(future)

    async def async_turn_off(self) -> None:
        """Stop heating by requesting the off threshold as target."""
        _LOGGER.info("Turning heating off")
        await self.async_request_set(self._config.off_threshold)

    async def async_turn_on(self) -> None:
        """Resume heating at the last heating target seen."""
        target = self._last_heating_target
        if target is None:
            target = self._config.off_threshold + self._config.temp_step
        _LOGGER.info("Turning heating on at %s", target)
        await self.async_request_set(target)

    async def async_refresh(self) -> bool:
        """Read the device and reconcile the displayed state.

        Auth and transport failures are logged and leave the previous state
        in place.

        Returns:
            True if the state was refreshed from the server.

        Raises:
            VeranoNotFoundError: If the configured tile is missing.

        """
        try:
            server_state = await self._client.async_get_state()
        except (VeranoAuthError, VeranoTransportError) as err:
            _LOGGER.warning("Failed to refresh thermostat state: %s", err)
            return False

        self._reconcile(server_state)
        return True

    async def async_shutdown(self) -> None:
        """Cancel any pending debounced write."""
        task = self._debounce_task
        self._debounce_task = None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        if self._pending_future is not None and not self._pending_future.done():
            self._pending_future.cancel()
        self._pending_future = None
        self._pending_target = None

    def _holds_optimistic_target(self, server_target: float) -> bool:
        if self._write_in_flight or self.write_pending:
            return True
        if self._last_requested is None:
            return False
        return abs(server_target - self._last_requested) > self._config.temp_step / 2

    def _reconcile(self, server_state: ThermostatState) -> None:
        if self._holds_optimistic_target(server_state.target_temperature):
            target = self._state.target_temperature
            _LOGGER.debug(
                "Keeping optimistic target %s over server target %s",
                target,
                server_state.target_temperature,
            )
        else:
            target = server_state.target_temperature
            self._last_requested = None

        self._set_state(
            ThermostatState(
                current_temperature=server_state.current_temperature,
                target_temperature=target,
                heating=target > self._config.off_threshold,
            )
        )

    def _set_state(self, state: ThermostatState) -> None:
        self._state = state
        if state.heating:
            self._last_heating_target = state.target_temperature
        for listener in list(self._listeners):
            listener(state)

    def _schedule_write(self, target: float) -> asyncio.Future[None]:
        self._pending_target = target
        if self._pending_future is None or self._pending_future.done():
            self._pending_future = asyncio.get_running_loop().create_future()

        if self._debounce_task is not None and not self._debounce_task.done():
            self._debounce_task.cancel()

        self._debounce_task = asyncio.create_task(
            self._async_debounced_write(self._pending_future)
        )
        return self._pending_future

    async def _async_debounced_write(self, future: asyncio.Future[None]) -> None:
        try:
            await asyncio.sleep(self._debounce_delay)
        except asyncio.CancelledError:
            return

        target = self._pending_target
        self._debounce_task = None
        self._pending_target = None
        self._pending_future = None
        if target is None or future.done():
            return

        if self._write_in_flight:
            _LOGGER.warning(
                "Dropping write of %s, another write is still in flight", target
            )
            self._clear_last_requested(target)
            future.set_exception(
                VeranoTransportError("Another setpoint write is in progress")
            )
            return

        self._write_in_flight = True
        try:
            await self._client.async_write_setpoint(target)
        except Exception as err:  # noqa: BLE001
            _LOGGER.error("Failed to write target temperature %s: %s", target, err)
            self._clear_last_requested(target)
            if not future.done():
                future.set_exception(err)
        else:
            if not future.done():
                future.set_result(None)
        finally:
            self._write_in_flight = False
            # Reached without a result only when the task itself was cancelled
            if not future.done():
                future.cancel()

    def _clear_last_requested(self, target: float) -> None:
        if self._last_requested == target:
            self._last_requested = None
