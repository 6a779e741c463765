from homeassistant.components.binary_sensor import (
    BinarySensorDeviceClass,
    BinarySensorEntity,
    BinarySensorEntityDescription,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import DOMAIN
from .entity import HyperXEntity
from .models import (
    ErrorEvent,
    HyperXData,
    HyperXEvent,
    MutedEvent,
    PowerEvent,
    PowerState,
)

ICON_MUTED = "mdi:microphone-off"
ICON_UNMUTED = "mdi:microphone"
ICON_MIC_DISCONNECTED = "mdi:microphone-question"

MICROPHONE_DESCRIPTION = BinarySensorEntityDescription(
    key="microphone_muted",
    entity_registry_enabled_default=True,
    entity_registry_visible_default=True,
    has_entity_name=True,
    name="Microphone muted",
)

POWER_DESCRIPTION = BinarySensorEntityDescription(
    key="power",
    device_class=BinarySensorDeviceClass.POWER,
    entity_registry_enabled_default=True,
    entity_registry_visible_default=True,
    has_entity_name=True,
    name="Power",
)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the binary sensor platform for HyperX headset"""
    data: HyperXData = hass.data[DOMAIN][entry.entry_id]
    async_add_entities(
        [
            HyperXMicrophoneSensor(
                data.broker, entry.entry_id, data.title, MICROPHONE_DESCRIPTION
            ),
            HyperXPowerSensor(data.broker, entry.entry_id, data.title, POWER_DESCRIPTION),
        ]
    )


class HyperXMicrophoneSensor(HyperXEntity, BinarySensorEntity):
    """Microphone mute state, on when muted"""

    _attr_icon = ICON_UNMUTED
    _attr_is_on = False

    def _apply_event(self, event: HyperXEvent) -> None:
        if isinstance(event, MutedEvent):
            self._attr_is_on = event.muted
            self._attr_icon = ICON_MUTED if event.muted else ICON_UNMUTED
        elif isinstance(event, PowerEvent) and event.state is PowerState.ON:
            self._attr_is_on = False
            self._attr_icon = ICON_UNMUTED
        elif isinstance(event, (PowerEvent, ErrorEvent)):
            self._attr_is_on = None
            self._attr_icon = ICON_MIC_DISCONNECTED


class HyperXPowerSensor(HyperXEntity, BinarySensorEntity):
    """Headset power, unavailable after a connection or device error"""

    _attr_is_on: bool | None = None

    def _apply_event(self, event: HyperXEvent) -> None:
        if isinstance(event, PowerEvent):
            self._attr_available = True
            self._attr_is_on = event.state is PowerState.ON
        elif isinstance(event, ErrorEvent):
            self._attr_available = False
        elif not self.available:
            # Any other report means the headset is talking again
            self._attr_available = True
