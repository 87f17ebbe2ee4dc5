"""API client for the eModul cloud backend used by Verano controllers.

This module provides functions to interact with the eModul API,
including login, reading device tiles, and sending control data.
"""

import logging
import re
from collections.abc import Sequence
from typing import Any

import httpx
from homeassistant.core import HomeAssistant
from homeassistant.helpers.httpx_client import create_async_httpx_client
from httpx_retries import Retry, RetryTransport

from .const import (
    CONTROL_URL,
    CURRENT_TEMPERATURE_WIDGET,
    DEFAULT_TIMEOUT,
    LOGIN_LANGUAGE,
    LOGIN_URL,
    MODULE_DATA_URL,
    SESSION_COOKIE_PATTERN,
    TARGET_TEMPERATURE_WIDGET,
)
from .exceptions import VeranoAuthError, VeranoNotFoundError, VeranoTransportError
from .models import Credentials, ThermostatState, Tile

_LOGGER = logging.getLogger(__name__)

# HTTP status codes
HTTP_OK = 200
HTTP_BAD_REQUEST = 400
HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403

_SESSION_COOKIE_RE = re.compile(SESSION_COOKIE_PATTERN, re.IGNORECASE)


def create_headers(cookie: str | None = None) -> dict[str, str]:
    """Create HTTP headers for eModul API requests.

    Args:
        cookie: Optional session cookie (``key=value``) to include.

    Returns:
        Dictionary containing HTTP headers for API requests.

    """
    headers = {
        "content-type": "application/json",
        "accept": "application/json, text/plain, */*",
    }
    if cookie:
        headers["Cookie"] = cookie
    return headers


def is_http_error(status: int) -> bool:
    """Check if HTTP status code indicates an error.

    Args:
        status: HTTP status code to check.

    Returns:
        True if status code is 400 or higher, False otherwise.

    """
    return status >= HTTP_BAD_REQUEST


def is_auth_error(status: int) -> bool:
    """Check if HTTP status code indicates an unauthenticated request.

    Args:
        status: HTTP status code to check.

    Returns:
        True if status code is 401 or 403, False otherwise.

    """
    return status in (HTTP_UNAUTHORIZED, HTTP_FORBIDDEN)


def validate_response(response: httpx.Response) -> httpx.Response:
    """Validate the HTTP status of an authenticated request.

    Args:
        response: HTTP response object to validate.

    Returns:
        The same response, for chaining.

    Raises:
        VeranoAuthError: If the session was rejected (401/403).
        VeranoTransportError: For any other error status.

    """
    if not is_http_error(response.status_code):
        return response

    if is_auth_error(response.status_code):
        auth_error = f"Session rejected: {response.status_code}"
        raise VeranoAuthError(auth_error)

    transport_error = f"Request failed: {response.status_code}"
    raise VeranoTransportError(transport_error)


def _decode_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as err:
        error_msg = f"Invalid JSON response: {err}"
        raise VeranoTransportError(error_msg) from err


def extract_session_cookie(response: httpx.Response) -> str | None:
    """Extract the session cookie from a login response.

    Only the ``key=value`` portion is kept; attributes such as ``Path`` or
    ``HttpOnly`` are stripped.

    Args:
        response: Login response.

    Returns:
        The cookie pair, or None if no session cookie was set.

    """
    for header in response.headers.get_list("set-cookie"):
        pair = header.split(";", 1)[0].strip()
        name, sep, _ = pair.partition("=")
        if sep and _SESSION_COOKIE_RE.search(name):
            return pair
    return None


def extract_tiles(data: dict[str, Any]) -> list[Tile]:
    """Extract tiles from a module_data response.

    Args:
        data: API response data dictionary.

    Returns:
        List of Tile objects. Entries without an id are skipped.

    Raises:
        VeranoTransportError: If a tile carries a malformed id or params.

    """
    tiles: list[Tile] = []
    for tile_data in data.get("tiles") or []:
        if not isinstance(tile_data, dict) or tile_data.get("id") is None:
            continue
        params = tile_data.get("params") or {}
        try:
            tile_id = int(tile_data["id"])
        except (TypeError, ValueError) as err:
            error_msg = f"Malformed tile id in module data: {tile_data['id']!r}"
            raise VeranoTransportError(error_msg) from err
        if not isinstance(params, dict):
            error_msg = f"Malformed params for tile {tile_id}"
            raise VeranoTransportError(error_msg)
        tiles.append(Tile(id=tile_id, params=params))
    return tiles


def encode_temperature(celsius: float, divider: int) -> int:
    """Encode a Celsius value into the integer wire representation."""
    return round(celsius * divider)


def decode_temperature(raw: float, divider: int) -> float:
    """Decode an integer wire value into Celsius."""
    return raw / divider


def find_tile(tiles: Sequence[Tile], tile_id: int) -> Tile:
    """Return the tile with the given id.

    Raises:
        VeranoNotFoundError: If no tile carries that id.

    """
    for tile in tiles:
        if tile.id == tile_id:
            return tile
    error_msg = f"Tile {tile_id} not found in module data"
    raise VeranoNotFoundError(error_msg)


def parse_state(
    tiles: Sequence[Tile],
    tile_id: int,
    divider: int,
    off_threshold: float,
) -> ThermostatState:
    """Decode the thermostat state from the temperature tile.

    Args:
        tiles: Tiles returned by the backend.
        tile_id: Id of the temperature tile.
        divider: Wire encoding divider.
        off_threshold: Targets at or below this mean heating is off.

    Returns:
        ThermostatState in Celsius.

    Raises:
        VeranoNotFoundError: If the tile or one of its widgets is missing.
        VeranoTransportError: If a widget value is not numeric.

    """
    tile = find_tile(tiles, tile_id)
    target = decode_temperature(tile.widget_value(TARGET_TEMPERATURE_WIDGET), divider)
    current = decode_temperature(
        tile.widget_value(CURRENT_TEMPERATURE_WIDGET), divider
    )
    return ThermostatState(
        current_temperature=current,
        target_temperature=target,
        heating=target > off_threshold,
    )


def build_setpoint_payload(
    setpoint_ido: int, target: float, divider: int
) -> list[dict[str, int]]:
    """Build the control record list for a setpoint write."""
    return [
        {
            "ido": setpoint_ido,
            "params": encode_temperature(target, divider),
            "module_index": 0,
        }
    ]


def create_session_client(hass: HomeAssistant) -> httpx.AsyncClient:
    """Create the HTTP client for the eModul API.

    The retry transport is configured with no retries: every request is
    sent exactly once and the only retry is the reauthentication retry in
    VeranoDeviceClient.

    Args:
        hass: Home Assistant instance.

    Returns:
        Configured httpx AsyncClient with retry transport.

    """
    base_client = create_async_httpx_client(hass, timeout=DEFAULT_TIMEOUT)
    retry = Retry(total=0)
    base_client._transport = RetryTransport(  # noqa: SLF001
        transport=base_client._transport,  # noqa: SLF001
        retry=retry,
    )
    return base_client


async def async_login(
    session: httpx.AsyncClient,
    credentials: Credentials,
) -> str:
    """Log in to the eModul backend.

    Args:
        session: HTTP client session.
        credentials: Account credentials.

    Returns:
        The session cookie as a ``key=value`` pair.

    Raises:
        VeranoAuthError: If the login is rejected or no session cookie is set.

    """
    payload = {
        "username": credentials.username,
        "password": credentials.password,
        "rememberMe": True,
        "languageId": LOGIN_LANGUAGE,
    }

    _LOGGER.debug("Logging in to eModul as %s", credentials.username)
    response = await session.post(LOGIN_URL, headers=create_headers(), json=payload)
    if response.status_code != HTTP_OK:
        error_msg = f"Login rejected: {response.status_code}"
        raise VeranoAuthError(error_msg)

    cookie = extract_session_cookie(response)
    if not cookie:
        error_msg = "Login response did not set a session cookie"
        raise VeranoAuthError(error_msg)

    _LOGGER.debug("Successfully logged in to eModul")
    return cookie


async def async_get_tiles(session: httpx.AsyncClient, cookie: str) -> list[Tile]:
    """Fetch the device tiles.

    Args:
        session: HTTP client session.
        cookie: Session cookie.

    Returns:
        List of Tile objects.

    Raises:
        VeranoAuthError: If the session was rejected.
        VeranoTransportError: If the request failed.

    """
    _LOGGER.debug("Fetching module data from eModul")
    response = await session.get(MODULE_DATA_URL, headers=create_headers(cookie))
    data = _decode_json(validate_response(response))
    if not isinstance(data, dict):
        error_msg = "Unexpected module data payload"
        raise VeranoTransportError(error_msg)
    tiles = extract_tiles(data)
    _LOGGER.debug("Retrieved %d tiles from eModul", len(tiles))
    return tiles


async def async_send_control_data(
    session: httpx.AsyncClient,
    cookie: str,
    payload: list[dict[str, int]],
) -> None:
    """Send control records to the device.

    Args:
        session: HTTP client session.
        cookie: Session cookie.
        payload: Control records, see build_setpoint_payload.

    Raises:
        VeranoAuthError: If the session was rejected.
        VeranoTransportError: If the request failed.

    """
    _LOGGER.debug("Sending control data: %s", payload)
    response = await session.post(
        CONTROL_URL, headers=create_headers(cookie), json=payload
    )
    validate_response(response)
    _LOGGER.debug("Control data accepted with status %s", response.status_code)
