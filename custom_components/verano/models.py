"""Data models for Verano eModul integration."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

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
)
from .exceptions import (
    VeranoConfigError,
    VeranoNotFoundError,
    VeranoTransportError,
)


@dataclass(frozen=True)
class Credentials:
    """Represents the eModul account used to log in."""

    username: str
    password: str = field(repr=False)

    def __post_init__(self) -> None:
        """Reject missing credentials before any request is made."""
        if not self.username:
            error_msg = "Username is required"
            raise VeranoConfigError(error_msg)
        if not self.password:
            error_msg = "Password is required"
            raise VeranoConfigError(error_msg)


@dataclass(frozen=True)
class DeviceConfig:
    """Describes how the heating zone is encoded on the eModul backend.

    Attributes:
        tile_id: Tile carrying target and current temperature.
        setpoint_ido: Control identifier used for setpoint writes.
        temperature_divider: Wire value is celsius multiplied by this.
        off_threshold: Targets at or below this mean heating is off.
        min_temp: Lowest target accepted.
        max_temp: Highest target accepted.
        temp_step: Target granularity, measured from min_temp.
        poll_interval: Seconds between background refreshes.

    """

    tile_id: int = DEFAULT_TILE_ID
    setpoint_ido: int = DEFAULT_SETPOINT_IDO
    temperature_divider: int = DEFAULT_TEMPERATURE_DIVIDER
    off_threshold: float = DEFAULT_OFF_THRESHOLD
    min_temp: float = DEFAULT_MIN_TEMP
    max_temp: float = DEFAULT_MAX_TEMP
    temp_step: float = DEFAULT_TEMP_STEP
    poll_interval: int = DEFAULT_POLL_INTERVAL

    def __post_init__(self) -> None:
        """Validate the settings once; instances are immutable afterwards."""
        if self.temperature_divider <= 0:
            error_msg = f"Temperature divider must be positive: {self.temperature_divider}"
            raise VeranoConfigError(error_msg)
        if self.temp_step <= 0:
            error_msg = f"Temperature step must be positive: {self.temp_step}"
            raise VeranoConfigError(error_msg)
        if self.poll_interval <= 0:
            error_msg = f"Poll interval must be positive: {self.poll_interval}"
            raise VeranoConfigError(error_msg)
        if self.min_temp >= self.max_temp:
            error_msg = (
                f"Minimum temperature {self.min_temp} must be below "
                f"maximum temperature {self.max_temp}"
            )
            raise VeranoConfigError(error_msg)
        if not self.min_temp <= self.off_threshold < self.max_temp:
            error_msg = (
                f"Off threshold {self.off_threshold} must lie within "
                f"[{self.min_temp}, {self.max_temp})"
            )
            raise VeranoConfigError(error_msg)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> DeviceConfig:
        """Build a DeviceConfig from config entry data, using defaults for gaps."""
        return cls(
            tile_id=int(data.get(CONF_TILE_ID, DEFAULT_TILE_ID)),
            setpoint_ido=int(data.get(CONF_SETPOINT_IDO, DEFAULT_SETPOINT_IDO)),
            temperature_divider=int(
                data.get(CONF_TEMPERATURE_DIVIDER, DEFAULT_TEMPERATURE_DIVIDER)
            ),
            off_threshold=float(data.get(CONF_OFF_THRESHOLD, DEFAULT_OFF_THRESHOLD)),
            min_temp=float(data.get(CONF_MIN_TEMP, DEFAULT_MIN_TEMP)),
            max_temp=float(data.get(CONF_MAX_TEMP, DEFAULT_MAX_TEMP)),
            temp_step=float(data.get(CONF_TEMP_STEP, DEFAULT_TEMP_STEP)),
            poll_interval=int(data.get(CONF_POLL_INTERVAL, DEFAULT_POLL_INTERVAL)),
        )


@dataclass(frozen=True)
class Tile:
    """Represents a device tile as reported by the eModul backend."""

    id: int
    params: dict[str, Any]

    def widget_value(self, name: str) -> float:
        """Return the raw value of a named widget."""
        widget = self.params.get(name)
        if not isinstance(widget, Mapping) or "value" not in widget:
            error_msg = f"Tile {self.id} has no value for {name}"
            raise VeranoNotFoundError(error_msg)
        value = widget["value"]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            error_msg = f"Tile {self.id} has a non-numeric {name}: {value!r}"
            raise VeranoTransportError(error_msg)
        return value


@dataclass(frozen=True, slots=True)
class ThermostatState:
    """Represents the heating zone state in Celsius."""

    current_temperature: float | None
    target_temperature: float
    heating: bool
