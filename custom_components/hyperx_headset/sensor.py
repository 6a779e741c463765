from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorEntityDescription,
    SensorStateClass,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import PERCENTAGE
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import DOMAIN
from .entity import HyperXEntity
from .models import (
    BatteryEvent,
    ErrorEvent,
    HyperXData,
    HyperXEvent,
    PowerEvent,
    PowerState,
)

ICON_DISCONNECTED = "mdi:battery-off-outline"
ICON_PENDING = "mdi:battery-sync-outline"

# (upper bound, icon); the first bound above the level wins
BATTERY_ICONS = [
    (5, "mdi:battery-outline"),
    (45, "mdi:battery-30"),
    (55, "mdi:battery-50"),
    (95, "mdi:battery-80"),
]
ICON_FULL = "mdi:battery"

BATTERY_LEVEL_DESCRIPTION = SensorEntityDescription(
    key="battery",
    device_class=SensorDeviceClass.BATTERY,
    entity_registry_enabled_default=True,
    entity_registry_visible_default=True,
    has_entity_name=True,
    name="Battery",
    native_unit_of_measurement=PERCENTAGE,
    state_class=SensorStateClass.MEASUREMENT,
)


def battery_icon(percent: int) -> str:
    """Return the icon for a battery level."""
    for bound, icon in BATTERY_ICONS:
        if percent < bound:
            return icon
    return ICON_FULL


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the sensor platform for HyperX headset"""
    data: HyperXData = hass.data[DOMAIN][entry.entry_id]
    async_add_entities(
        [
            HyperXBatterySensor(
                data.broker, entry.entry_id, data.title, BATTERY_LEVEL_DESCRIPTION
            )
        ]
    )


class HyperXBatterySensor(HyperXEntity, SensorEntity):
    """Battery level of the headset"""

    _attr_icon = ICON_DISCONNECTED
    _attr_native_value: int | None = None

    def _apply_event(self, event: HyperXEvent) -> None:
        if isinstance(event, BatteryEvent):
            self._attr_native_value = event.percent
            self._attr_icon = battery_icon(event.percent)
        elif isinstance(event, PowerEvent) and event.state is PowerState.ON:
            # Wait for the battery report that follows power on
            self._attr_native_value = None
            self._attr_icon = ICON_PENDING
        elif isinstance(event, (PowerEvent, ErrorEvent)):
            self._attr_native_value = None
            self._attr_icon = ICON_DISCONNECTED
