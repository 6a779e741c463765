"""Config flow for the HyperX headset integration."""

from __future__ import annotations

import logging
from typing import Any

import voluptuous as vol
from homeassistant.config_entries import (
    ConfigEntry,
    ConfigFlow,
    ConfigFlowResult,
    OptionsFlow,
)
from homeassistant.const import CONF_NAME
from homeassistant.core import callback

from . import load_client_factory
from .const import (
    CONF_CLIENT_FACTORY,
    CONF_FULL_RECONNECT_INTERVAL,
    CONF_HEALTH_CHECK_INTERVAL,
    CONF_RECONNECT_ON_STALE,
    DEFAULT_FULL_RECONNECT_INTERVAL,
    DEFAULT_HEALTH_CHECK_INTERVAL,
    DEFAULT_NAME,
    DOMAIN,
)

_LOGGER = logging.getLogger(__name__)


class HyperXConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle a config flow for HyperX headset."""

    VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Ask for the headset client factory."""
        errors: dict[str, str] = {}
        if user_input is not None:
            path = user_input[CONF_CLIENT_FACTORY]
            try:
                await self.hass.async_add_executor_job(load_client_factory, path)
            except ImportError as ex:
                _LOGGER.debug("Rejected headset client %s: %s", path, ex)
                errors[CONF_CLIENT_FACTORY] = "invalid_factory"
            else:
                # Only one physical headset is supported
                await self.async_set_unique_id(DOMAIN)
                self._abort_if_unique_id_configured()
                return self.async_create_entry(
                    title=user_input[CONF_NAME],
                    data={CONF_CLIENT_FACTORY: path},
                )

        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_NAME, default=DEFAULT_NAME): str,
                    vol.Required(CONF_CLIENT_FACTORY): str,
                }
            ),
            errors=errors,
        )

    @staticmethod
    @callback
    def async_get_options_flow(config_entry: ConfigEntry) -> OptionsFlow:
        """Return the options flow."""
        return HyperXOptionsFlow()


class HyperXOptionsFlow(OptionsFlow):
    """Tune the health check and reconnect periods."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Manage the options."""
        errors: dict[str, str] = {}
        if user_input is not None:
            if (
                user_input[CONF_FULL_RECONNECT_INTERVAL]
                <= user_input[CONF_HEALTH_CHECK_INTERVAL]
            ):
                errors["base"] = "reconnect_too_short"
            else:
                return self.async_create_entry(data=user_input)

        options = self.config_entry.options
        return self.async_show_form(
            step_id="init",
            data_schema=vol.Schema(
                {
                    vol.Required(
                        CONF_HEALTH_CHECK_INTERVAL,
                        default=options.get(
                            CONF_HEALTH_CHECK_INTERVAL,
                            int(DEFAULT_HEALTH_CHECK_INTERVAL.total_seconds()),
                        ),
                    ): vol.All(vol.Coerce(int), vol.Range(min=1)),
                    vol.Required(
                        CONF_FULL_RECONNECT_INTERVAL,
                        default=options.get(
                            CONF_FULL_RECONNECT_INTERVAL,
                            int(DEFAULT_FULL_RECONNECT_INTERVAL.total_seconds()),
                        ),
                    ): vol.All(vol.Coerce(int), vol.Range(min=1)),
                    vol.Required(
                        CONF_RECONNECT_ON_STALE,
                        default=options.get(CONF_RECONNECT_ON_STALE, False),
                    ): bool,
                }
            ),
            errors=errors,
        )
