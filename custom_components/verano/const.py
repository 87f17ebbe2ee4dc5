"""Constants for Verano eModul integration.

This module contains all the constants used throughout the integration,
including API endpoints, configuration keys, and device defaults.
"""

DOMAIN = "verano"

MANUFACTURER = "Verano"
MODEL = "VER-24 WiFi"

BASE_URL = "https://emodul.pl"
LOGIN_URL = f"{BASE_URL}/login"
MODULE_DATA_URL = f"{BASE_URL}/frontend/module_data"
CONTROL_URL = f"{BASE_URL}/send_control_data"

LOGIN_LANGUAGE = "en"
SESSION_COOKIE_PATTERN = r"session"

DEFAULT_TIMEOUT = 10.0  # Seconds, applies to every outbound request
DEBOUNCE_DELAY = 1.0  # Quiet period before a setpoint write is sent

CONF_TILE_ID = "tile_id"
CONF_SETPOINT_IDO = "setpoint_ido"
CONF_TEMPERATURE_DIVIDER = "temperature_divider"
CONF_OFF_THRESHOLD = "off_threshold"
CONF_MIN_TEMP = "min_temp"
CONF_MAX_TEMP = "max_temp"
CONF_TEMP_STEP = "temp_step"
CONF_POLL_INTERVAL = "poll_interval"

DEFAULT_NAME = "Verano"
DEFAULT_TILE_ID = 58
DEFAULT_SETPOINT_IDO = 139
DEFAULT_TEMPERATURE_DIVIDER = 10
DEFAULT_OFF_THRESHOLD = 10.0
DEFAULT_MIN_TEMP = 10.0
DEFAULT_MAX_TEMP = 30.0
DEFAULT_TEMP_STEP = 0.5
DEFAULT_POLL_INTERVAL = 30

# Widgets of the temperature tile
TARGET_TEMPERATURE_WIDGET = "widget1"
CURRENT_TEMPERATURE_WIDGET = "widget2"

ERROR_INVALID_AUTH = "invalid_auth"
ERROR_CANNOT_CONNECT = "cannot_connect"
ERROR_TILE_NOT_FOUND = "tile_not_found"
ERROR_INVALID_CONFIG = "invalid_config"
ERROR_UNKNOWN = "unknown_error"
