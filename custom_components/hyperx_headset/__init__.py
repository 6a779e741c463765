"""The HyperX headset integration."""

from __future__ import annotations

import importlib
import logging
from datetime import timedelta

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import EVENT_HOMEASSISTANT_STOP, Platform
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ConfigEntryError

from .broker import ClientFactory, HyperXBroker
from .const import (
    CONF_CLIENT_FACTORY,
    CONF_FULL_RECONNECT_INTERVAL,
    CONF_HEALTH_CHECK_INTERVAL,
    CONF_RECONNECT_ON_STALE,
    DATA_BROKER,
    DEFAULT_FULL_RECONNECT_INTERVAL,
    DEFAULT_HEALTH_CHECK_INTERVAL,
    DOMAIN,
)
from .models import HyperXData

PLATFORMS: list[Platform] = [Platform.BINARY_SENSOR, Platform.SENSOR]

_LOGGER = logging.getLogger(__name__)


def load_client_factory(path: str) -> ClientFactory:
    """Import the headset client factory named by a dotted path."""
    module_name, _, attr = path.rpartition(".")
    if not module_name:
        raise ImportError(f"{path} is not a dotted path")
    module = importlib.import_module(module_name)
    factory = getattr(module, attr, None)
    if not callable(factory):
        raise ImportError(f"{path} is not callable")
    return factory


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up HyperX headset from a config entry."""
    path = entry.data[CONF_CLIENT_FACTORY]
    try:
        factory = await hass.async_add_executor_job(load_client_factory, path)
    except ImportError as ex:
        raise ConfigEntryError(f"Unable to load headset client {path}: {ex}") from ex

    options = entry.options
    broker = HyperXBroker.get_or_create(
        hass,
        factory,
        health_check_interval=timedelta(
            seconds=options.get(
                CONF_HEALTH_CHECK_INTERVAL,
                DEFAULT_HEALTH_CHECK_INTERVAL.total_seconds(),
            )
        ),
        full_reconnect_interval=timedelta(
            seconds=options.get(
                CONF_FULL_RECONNECT_INTERVAL,
                DEFAULT_FULL_RECONNECT_INTERVAL.total_seconds(),
            )
        ),
        reconnect_on_stale=options.get(CONF_RECONNECT_ON_STALE, False),
    )
    _LOGGER.debug("%s: Using headset client %s", entry.title, path)

    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = HyperXData(entry.title, broker)
    entry.async_on_unload(
        hass.bus.async_listen_once(EVENT_HOMEASSISTANT_STOP, broker.async_shutdown)
    )
    entry.async_on_unload(entry.add_update_listener(async_reload_entry))
    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    return True


async def async_reload_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload the entry so changed options reach a new broker."""
    await hass.config_entries.async_reload(entry.entry_id)


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    if unload_ok := await hass.config_entries.async_unload_platforms(entry, PLATFORMS):
        hass.data[DOMAIN].pop(entry.entry_id)
        if not hass.data[DOMAIN]:
            hass.data.pop(DOMAIN)
            hass.data.pop(DATA_BROKER).async_shutdown()
    return unload_ok
