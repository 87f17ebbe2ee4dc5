"""Tests for the Verano data update coordinator."""

from datetime import timedelta
from unittest.mock import AsyncMock, Mock, patch

import pytest
from homeassistant.helpers.update_coordinator import (
    DataUpdateCoordinator,
    UpdateFailed,
)

from custom_components.verano.controller import VeranoTemperatureController
from custom_components.verano.coordinator import VeranoDataUpdateCoordinator
from custom_components.verano.exceptions import (
    VeranoNotFoundError,
    VeranoTransportError,
)
from custom_components.verano.models import DeviceConfig, ThermostatState


@pytest.fixture
def mock_hass() -> Mock:
    """Create a mock Home Assistant instance."""
    hass = Mock()
    hass.config_entries = Mock()
    return hass


@pytest.fixture
def mock_client() -> Mock:
    """Create a mocked device client."""
    client = Mock()
    client.async_write_setpoint = AsyncMock()
    client.async_get_state = AsyncMock(
        return_value=ThermostatState(
            current_temperature=19.5, target_temperature=21.0, heating=True
        )
    )
    return client


@pytest.fixture
def controller(mock_client: Mock) -> VeranoTemperatureController:
    """Create a controller with a short debounce."""
    return VeranoTemperatureController(
        mock_client, DeviceConfig(poll_interval=45), debounce_delay=0.01
    )


@pytest.fixture
def mock_config_entry() -> Mock:
    """Create a mock config entry."""
    entry = Mock()
    entry.entry_id = "test_entry_id"
    return entry


@pytest.fixture
def coordinator(
    mock_hass: Mock,
    controller: VeranoTemperatureController,
    mock_config_entry: Mock,
) -> VeranoDataUpdateCoordinator:
    """Create a coordinator around the controller."""
    return VeranoDataUpdateCoordinator(mock_hass, controller, mock_config_entry)


class TestVeranoDataUpdateCoordinatorInit:
    """Tests for VeranoDataUpdateCoordinator initialization."""

    def test_init_uses_poll_interval_and_controller_state(
        self,
        coordinator: VeranoDataUpdateCoordinator,
        controller: VeranoTemperatureController,
        mock_config_entry: Mock,
    ) -> None:
        """Test that init sets interval, config entry and initial data."""
        assert coordinator.update_interval == timedelta(seconds=45)
        assert coordinator.config_entry == mock_config_entry
        assert coordinator.controller is controller
        assert coordinator.data == controller.state


class TestVeranoDataUpdateCoordinatorUpdate:
    """Tests for _async_update_data method."""

    @pytest.mark.asyncio
    async def test_update_returns_refreshed_state(
        self, coordinator: VeranoDataUpdateCoordinator
    ) -> None:
        """Test that a successful poll returns the server state."""
        coordinator.async_update_listeners = Mock()

        result = await coordinator._async_update_data()

        assert result == ThermostatState(
            current_temperature=19.5, target_temperature=21.0, heating=True
        )

    @pytest.mark.asyncio
    async def test_update_keeps_previous_state_on_transport_error(
        self,
        coordinator: VeranoDataUpdateCoordinator,
        controller: VeranoTemperatureController,
        mock_client: Mock,
    ) -> None:
        """Test that a failed poll does not fail the coordinator."""
        coordinator.async_update_listeners = Mock()
        mock_client.async_get_state.side_effect = VeranoTransportError("down")

        result = await coordinator._async_update_data()

        assert result == controller.state
        assert result.current_temperature is None

    @pytest.mark.asyncio
    async def test_update_raises_update_failed_for_missing_tile(
        self, coordinator: VeranoDataUpdateCoordinator, mock_client: Mock
    ) -> None:
        """Test that a missing tile is reported as UpdateFailed."""
        mock_client.async_get_state.side_effect = VeranoNotFoundError("Tile 58")

        with pytest.raises(UpdateFailed, match="Tile 58"):
            await coordinator._async_update_data()


class TestVeranoDataUpdateCoordinatorPush:
    """Tests for pushing controller state to listeners."""

    @pytest.mark.asyncio
    async def test_controller_state_is_pushed_to_listeners(
        self,
        coordinator: VeranoDataUpdateCoordinator,
        controller: VeranoTemperatureController,
    ) -> None:
        """Test that an optimistic update reaches the coordinator at once."""
        coordinator.async_update_listeners = Mock()

        await controller.async_request_set(23.0)

        assert coordinator.data.target_temperature == 23.0
        coordinator.async_update_listeners.assert_called()


class TestVeranoDataUpdateCoordinatorShutdown:
    """Tests for async_shutdown method."""

    @pytest.mark.asyncio
    async def test_shutdown_unsubscribes_and_stops_controller(
        self,
        coordinator: VeranoDataUpdateCoordinator,
        controller: VeranoTemperatureController,
    ) -> None:
        """Test that shutdown detaches from the controller."""
        coordinator.async_update_listeners = Mock()

        with (
            patch.object(
                controller, "async_shutdown", new=AsyncMock()
            ) as mock_controller_shutdown,
            patch.object(
                DataUpdateCoordinator, "async_shutdown", new=AsyncMock()
            ) as mock_super_shutdown,
        ):
            await coordinator.async_shutdown()

        mock_controller_shutdown.assert_awaited_once()
        mock_super_shutdown.assert_awaited_once()

        await controller.async_refresh()
        coordinator.async_update_listeners.assert_not_called()
