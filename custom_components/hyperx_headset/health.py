from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from homeassistant.core import CALLBACK_TYPE, HomeAssistant, callback
from homeassistant.helpers.event import async_track_time_interval

from .models import HealthState

_LOGGER = logging.getLogger(__name__)


class HealthMonitor:
    """Periodic staleness check that forces full reconnects."""

    def __init__(
        self,
        hass: HomeAssistant,
        health: HealthState,
        reconnect: Callable[[], None],
        check_interval: timedelta,
        reconnect_interval: timedelta,
        reconnect_on_stale: bool = False,
    ) -> None:
        """Init the health monitor."""
        self._hass = hass
        self._health = health
        self._reconnect = reconnect
        self.check_interval = check_interval
        self.reconnect_interval = reconnect_interval
        self.reconnect_on_stale = reconnect_on_stale
        self._unsub_timer: CALLBACK_TYPE | None = None

    @property
    def active(self) -> bool:
        """Return True while the timer is armed."""
        return self._unsub_timer is not None

    @callback
    def async_start(self) -> None:
        """Arm the timer if it is not running."""
        if self._unsub_timer is not None:
            return
        _LOGGER.debug("Health check started (every %s)", self.check_interval)
        self._unsub_timer = async_track_time_interval(
            self._hass,
            self.async_check,
            self.check_interval,
            name="HyperX headset health check",
        )

    @callback
    def async_stop(self) -> None:
        """Disarm the timer."""
        if self._unsub_timer is None:
            return
        self._unsub_timer()
        self._unsub_timer = None
        _LOGGER.debug("Health check stopped")

    @callback
    def async_check(self, now: datetime) -> None:
        """Log staleness and reconnect once the full period has passed."""
        last_event = self._health.last_event
        if last_event is not None:
            idle = now - last_event
            if idle <= self.check_interval:
                return
            _LOGGER.info("No headset events for %s", idle)

        last_reconnect = self._health.last_reconnect
        if (
            self.reconnect_on_stale
            or last_reconnect is None
            or now - last_reconnect > self.reconnect_interval
        ):
            _LOGGER.warning("Forcing a full reconnect to the headset")
            self._reconnect()
