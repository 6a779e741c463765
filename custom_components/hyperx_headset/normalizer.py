"""Translate raw headset library events into HyperX events."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from homeassistant.util import dt as dt_util

from .const import (
    RAW_BATTERY,
    RAW_CHARGING,
    RAW_CONNECTED,
    RAW_DISCONNECTED,
    RAW_ERROR,
    RAW_MUTED,
    RAW_POWER,
    RAW_UNKNOWN,
    RAW_VOLUME,
    DeviceError,
)
from .models import (
    BatteryEvent,
    ErrorEvent,
    HealthState,
    HyperXEvent,
    MutedEvent,
    PowerEvent,
    PowerState,
)

_LOGGER = logging.getLogger(__name__)


class EventNormalizer:
    """Map the loosely typed raw stream onto the four public event types.

    The raw library under-reports power: after the headset comes back it
    may only send ``connected``. When the last known power state is off,
    that signal is turned into ``PowerEvent(ON)``. A ``power("on")`` directly
    after an inferred one is dropped, and ``connected`` is silent once power
    is known to be on, so one transition never yields two power-on events.
    """

    def __init__(self, health: HealthState) -> None:
        """Init the normalizer."""
        self._health = health
        self._pending_power_on = False
        self._handlers: dict[str, Callable[..., HyperXEvent | None]] = {
            RAW_BATTERY: self._battery,
            RAW_POWER: self._power,
            RAW_MUTED: self._muted,
            RAW_CONNECTED: self._connected,
            RAW_DISCONNECTED: self._disconnected,
            RAW_ERROR: self._error,
            RAW_VOLUME: self._ignored,
            RAW_CHARGING: self._ignored,
            RAW_UNKNOWN: self._ignored,
        }

    @property
    def raw_event_names(self) -> list[str]:
        """Return the raw event names the client should be listened on."""
        return list(self._handlers)

    def reset(self) -> None:
        """Forget inference state tied to the previous client handle."""
        self._pending_power_on = False

    def normalize(self, name: str, *args: Any) -> HyperXEvent | None:
        """Refresh the event timestamp and translate one raw event."""
        self._health.last_event = dt_util.utcnow()
        if name != RAW_POWER:
            # Only the power report right after an inferred one is a duplicate
            self._pending_power_on = False
        handler = self._handlers.get(name, self._ignored)
        return handler(*args)

    def _battery(self, percent: int, *_: Any) -> HyperXEvent:
        _LOGGER.debug("Battery: %s", percent)
        return BatteryEvent(percent)

    def _power(self, state: Any, *_: Any) -> HyperXEvent | None:
        _LOGGER.debug("Power: %s", state)
        try:
            power = PowerState(str(state).lower())
        except ValueError:
            _LOGGER.warning("Ignoring unrecognised power state: %s", state)
            return None
        synthesized, self._pending_power_on = self._pending_power_on, False
        if synthesized and power is PowerState.ON:
            _LOGGER.debug("Power on already inferred from connected")
            return None
        return PowerEvent(power)

    def _muted(self, muted: Any, *_: Any) -> HyperXEvent:
        _LOGGER.debug("Muted: %s", muted)
        return MutedEvent(bool(muted))

    def _connected(self, *_: Any) -> HyperXEvent | None:
        _LOGGER.debug("Device connected")
        if self._health.power is PowerState.OFF:
            self._pending_power_on = True
            return PowerEvent(PowerState.ON)
        return None

    def _disconnected(self, err: Any = None, *_: Any) -> None:
        # The library sends an explicit power "off" of its own
        _LOGGER.debug("Device disconnected: %s", err)

    def _error(self, err: Any = None, *_: Any) -> HyperXEvent:
        _LOGGER.error("Error from headset library: %s", err)
        return ErrorEvent(DeviceError(err))

    def _ignored(self, *_: Any) -> None:
        return None
