"""Shared connection to the HyperX headset.

One broker exists per Home Assistant instance. It owns the single client
handle built by the headset library and fans normalized events out to any
number of subscribers (the integration's entities).

Lifecycle
---------
The connection is opened lazily when the first subscriber arrives and closed
when the last one cancels. While subscribers exist a :class:`HealthMonitor`
watches for silence and periodically rebuilds the handle, since the library
can stop emitting events without reporting a disconnect.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import timedelta
from typing import Any

from homeassistant.core import CALLBACK_TYPE, Event, HomeAssistant, callback
from homeassistant.util import dt as dt_util

from .const import (
    DATA_BROKER,
    DEFAULT_FULL_RECONNECT_INTERVAL,
    DEFAULT_HEALTH_CHECK_INTERVAL,
    ConnectionCloseError,
    ConnectionOpenError,
    ListenerError,
)
from .health import HealthMonitor
from .models import ConnectionState, ErrorEvent, HealthState, HyperXEvent
from .normalizer import EventNormalizer

_LOGGER = logging.getLogger(__name__)

ClientFactory = Callable[[], Any]
EventCallback = Callable[[HyperXEvent], None]


class _Subscriber:
    """Subscription handle, compared by identity."""

    __slots__ = ("callback", "active")

    def __init__(self, callback: EventCallback) -> None:
        self.callback = callback
        self.active = True


class HyperXBroker:
    """Multiplexes one headset connection to many subscribers."""

    def __init__(
        self,
        hass: HomeAssistant,
        client_factory: ClientFactory,
        health_check_interval: timedelta = DEFAULT_HEALTH_CHECK_INTERVAL,
        full_reconnect_interval: timedelta = DEFAULT_FULL_RECONNECT_INTERVAL,
        reconnect_on_stale: bool = False,
    ) -> None:
        """Init the broker. Use :meth:`get_or_create` instead."""
        self._hass = hass
        self._client_factory = client_factory
        self._client: Any | None = None
        self._state = ConnectionState.DISCONNECTED
        self._subscribers: set[_Subscriber] = set()
        self._connecting = False
        self._health = HealthState()
        self._normalizer = EventNormalizer(self._health)
        self._monitor = HealthMonitor(
            hass,
            self._health,
            self._connect,
            health_check_interval,
            full_reconnect_interval,
            reconnect_on_stale,
        )

    @classmethod
    def get_or_create(
        cls, hass: HomeAssistant, client_factory: ClientFactory, **kwargs: Any
    ) -> HyperXBroker:
        """Return the broker for this instance, creating it on first use."""
        if (broker := hass.data.get(DATA_BROKER)) is None:
            broker = hass.data[DATA_BROKER] = cls(hass, client_factory, **kwargs)
        return broker

    @property
    def state(self) -> ConnectionState:
        """Return the connection state."""
        return self._state

    @property
    def connected(self) -> bool:
        """Return True while a client handle exists."""
        return self._client is not None

    @property
    def subscriber_count(self) -> int:
        """Return the number of active subscribers."""
        return len(self._subscribers)

    @property
    def health(self) -> HealthState:
        """Return the health bookkeeping."""
        return self._health

    @property
    def monitor(self) -> HealthMonitor:
        """Return the health monitor."""
        return self._monitor

    @callback
    def subscribe(self, event_callback: EventCallback) -> CALLBACK_TYPE:
        """Register a callback for headset events.

        The callback must not block. Events that happened before the call are
        not replayed. Returns a function that cancels the subscription; it may
        be called any number of times.
        """
        subscriber = _Subscriber(event_callback)
        first = not self._subscribers
        self._subscribers.add(subscriber)

        if first:
            self._monitor.async_start()
        if first or self._client is None:
            self._connect()

        @callback
        def cancel() -> None:
            if not subscriber.active:
                return
            subscriber.active = False
            self._subscribers.discard(subscriber)
            if not self._subscribers:
                self._monitor.async_stop()
                self._cleanup()

        return cancel

    @callback
    def async_shutdown(self, event: Event | None = None) -> None:
        """Drop every subscriber and close the connection."""
        _LOGGER.debug("Shutting down headset broker")
        for subscriber in self._subscribers:
            subscriber.active = False
        self._subscribers.clear()
        self._monitor.async_stop()
        self._cleanup()

    @callback
    def _notify_listeners(self, event: HyperXEvent) -> None:
        """Track state and hand the event to every subscriber."""
        self._health.track(event)
        for subscriber in list(self._subscribers):
            if not subscriber.active:
                continue
            try:
                subscriber.callback(event)
            except Exception as ex:  # noqa: BLE001
                error = ListenerError(f"Listener failed to handle {event}")
                error.__cause__ = ex
                _LOGGER.error("Error in listener callback", exc_info=error)

    @callback
    def _connect(self) -> None:
        """Replace the client handle with a fresh one."""
        if self._connecting:
            # A subscriber reacted to the open failure by subscribing again
            _LOGGER.debug("Connection attempt already in progress")
            return
        self._connecting = True
        try:
            self._open()
        finally:
            self._connecting = False

    def _open(self) -> None:
        _LOGGER.debug("Connecting to headset")
        self._cleanup()
        self._state = ConnectionState.CONNECTING
        now = dt_util.utcnow()
        self._health.last_reconnect = now
        self._health.last_event = now
        self._normalizer.reset()

        try:
            self._client = client = self._client_factory()
            for name in self._normalizer.raw_event_names:
                client.on(name, self._raw_listener(client, name))
        except Exception as ex:  # noqa: BLE001
            _LOGGER.error("Failed to connect to headset: %s", ex)
            self._cleanup()
            error = ConnectionOpenError(f"Unable to open headset client: {ex}")
            error.__cause__ = ex
            self._notify_listeners(ErrorEvent(error))
            return

        self._state = ConnectionState.CONNECTED
        _LOGGER.debug("Connected to headset")

    @callback
    def _cleanup(self) -> None:
        """Close and forget the client handle, if any."""
        client = self._client
        self._client = None
        self._state = ConnectionState.DISCONNECTED
        if client is None:
            return

        _LOGGER.debug("Cleaning up headset connection")
        close = getattr(client, "close", None)
        if not callable(close):
            return
        try:
            close()
        except Exception as ex:  # noqa: BLE001
            error = ConnectionCloseError(f"Unable to close headset client: {ex}")
            error.__cause__ = ex
            _LOGGER.error("Error during close", exc_info=error)

    def _raw_listener(self, client: Any, name: str) -> Callable[..., None]:
        """Build the listener registered with the client for one event name."""

        def _listener(*args: Any) -> None:
            if threading.get_ident() == self._hass.loop_thread_id:
                self._async_handle_raw(client, name, args)
            else:
                self._hass.loop.call_soon_threadsafe(
                    self._async_handle_raw, client, name, args
                )

        return _listener

    @callback
    def _async_handle_raw(self, client: Any, name: str, args: tuple[Any, ...]) -> None:
        """Normalize a raw event from the current handle and fan it out."""
        if client is not self._client:
            _LOGGER.debug("Ignoring %s from a closed headset handle", name)
            return
        if (event := self._normalizer.normalize(name, *args)) is not None:
            self._notify_listeners(event)
