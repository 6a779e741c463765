from datetime import timedelta

DOMAIN = "hyperx_headset"
DATA_BROKER = f"{DOMAIN}_broker"

CONF_CLIENT_FACTORY = "client_factory"
CONF_HEALTH_CHECK_INTERVAL = "health_check_interval"
CONF_FULL_RECONNECT_INTERVAL = "full_reconnect_interval"
CONF_RECONNECT_ON_STALE = "reconnect_on_stale"

DEFAULT_HEALTH_CHECK_INTERVAL = timedelta(seconds=30)
DEFAULT_FULL_RECONNECT_INTERVAL = timedelta(minutes=10)

DEFAULT_NAME = "HyperX Cloud Flight"
MANUFACTURER = "HyperX"
MODEL = "Cloud Flight Wireless"

RAW_BATTERY = "battery"
RAW_POWER = "power"
RAW_MUTED = "muted"
RAW_CONNECTED = "connected"
RAW_DISCONNECTED = "disconnected"
RAW_ERROR = "error"
RAW_VOLUME = "volume"
RAW_CHARGING = "charging"
RAW_UNKNOWN = "unknown"


class HyperXError(Exception):
    """Base error for the HyperX headset integration."""


class ConnectionOpenError(HyperXError):
    """Raised when the headset client cannot be created."""


class ConnectionCloseError(HyperXError):
    """Raised when the headset client fails to close."""


class ListenerError(HyperXError):
    """Raised when a subscriber callback fails."""


class DeviceError(HyperXError):
    """Raised when the headset library reports an error."""
