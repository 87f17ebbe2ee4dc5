"""Pytest configuration and fixtures for Verano eModul tests."""

from typing import Any

import pytest

from custom_components.verano.models import Credentials, DeviceConfig

SESSION_COOKIE = "session=abc123"


@pytest.fixture
def credentials() -> Credentials:
    """Fixture providing valid account credentials."""
    return Credentials(username="user@example.com", password="password123")


@pytest.fixture
def device_config() -> DeviceConfig:
    """Fixture providing the default device configuration."""
    return DeviceConfig()


@pytest.fixture
def login_headers() -> dict[str, str]:
    """Fixture providing headers of a successful login response."""
    return {"set-cookie": f"{SESSION_COOKIE}; Path=/; HttpOnly; Secure"}


@pytest.fixture
def sample_module_data() -> dict[str, Any]:
    """Fixture providing a sample module_data response.

    Returns:
        A dictionary with the temperature tile (21.5 target, 18.0 current)
        and an unrelated tile.

    """
    return {
        "tiles": [
            {
                "id": 58,
                "params": {
                    "widget1": {"value": 215, "unit": 7},
                    "widget2": {"value": 180, "unit": 7},
                },
            },
            {
                "id": 61,
                "params": {"statusId": 1},
            },
        ],
    }
