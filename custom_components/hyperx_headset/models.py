from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from enum import Enum, StrEnum, auto
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from .broker import HyperXBroker


class ConnectionState(Enum):
    """Lifecycle of the broker's client handle."""

    DISCONNECTED = auto()
    CONNECTING = auto()
    CONNECTED = auto()


class PowerState(StrEnum):
    """Headset power as reported by the device library."""

    ON = "on"
    OFF = "off"


@dataclass(frozen=True)
class BatteryEvent:
    """Battery level in percent, passed through unclamped."""

    percent: int


@dataclass(frozen=True)
class PowerEvent:
    """Headset switched on or off."""

    state: PowerState


@dataclass(frozen=True)
class MutedEvent:
    """Microphone mute toggled."""

    muted: bool


@dataclass(frozen=True)
class ErrorEvent:
    """Connection or device failure."""

    error: Exception


HyperXEvent = BatteryEvent | PowerEvent | MutedEvent | ErrorEvent


@dataclass
class HealthState:
    """Bookkeeping shared by the normalizer and the health monitor."""

    last_event: datetime | None = None
    last_reconnect: datetime | None = None
    power: PowerState | None = None
    muted: bool | None = None

    def track(self, event: HyperXEvent) -> None:
        """Remember the last known power and mute values."""
        if isinstance(event, PowerEvent):
            self.power = event.state
        elif isinstance(event, MutedEvent):
            self.muted = event.muted


@dataclass
class HyperXData:
    """Data for the HyperX headset integration."""

    title: str
    broker: HyperXBroker
