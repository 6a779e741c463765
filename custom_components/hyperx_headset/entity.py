from homeassistant.core import callback
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.entity import Entity, EntityDescription

from .broker import HyperXBroker
from .const import DOMAIN, MANUFACTURER, MODEL
from .models import HyperXEvent


class HyperXEntity(Entity):
    """Entity fed by the shared headset broker."""

    _attr_has_entity_name = True
    _attr_should_poll = False

    def __init__(
        self,
        broker: HyperXBroker,
        entry_id: str,
        name: str,
        description: EntityDescription,
    ) -> None:
        """Initialize the entity."""
        self._broker = broker
        self.entity_description = description
        self._attr_unique_id = f"{entry_id}_{description.key}"
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, entry_id)},
            name=name,
            manufacturer=MANUFACTURER,
            model=MODEL,
        )

    async def async_added_to_hass(self) -> None:
        """Subscribe to headset events while the entity exists."""
        await super().async_added_to_hass()
        self.async_on_remove(self._broker.subscribe(self._handle_event))

    @callback
    def _handle_event(self, event: HyperXEvent) -> None:
        """Render the event and write the new state."""
        self._apply_event(event)
        self.async_write_ha_state()

    def _apply_event(self, event: HyperXEvent) -> None:
        """Update the entity attributes from an event; platforms override this."""
        raise NotImplementedError
