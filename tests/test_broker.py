"""Tests for the headset connection broker."""

import pytest
from homeassistant.core import HomeAssistant

from custom_components.hyperx_headset.broker import HyperXBroker
from custom_components.hyperx_headset.const import (
    ConnectionOpenError,
    DeviceError,
)
from custom_components.hyperx_headset.models import (
    BatteryEvent,
    ConnectionState,
    ErrorEvent,
    MutedEvent,
    PowerEvent,
    PowerState,
)

from .common import BrokenCloseHeadset, FakeHeadset, NoCloseHeadset, failing_factory


async def test_get_or_create_returns_same_broker(
    hass: HomeAssistant, broker: HyperXBroker
) -> None:
    assert HyperXBroker.get_or_create(hass, failing_factory) is broker


async def test_first_subscribe_connects_once(
    broker: HyperXBroker, headsets: list[FakeHeadset]
) -> None:
    assert broker.state is ConnectionState.DISCONNECTED
    assert not broker.connected

    cancel_one = broker.subscribe(lambda event: None)
    cancel_two = broker.subscribe(lambda event: None)

    assert len(headsets) == 1
    assert broker.state is ConnectionState.CONNECTED
    assert broker.connected
    assert broker.subscriber_count == 2
    assert broker.monitor.active

    cancel_one()
    cancel_two()


async def test_last_cancel_cleans_up_once(
    broker: HyperXBroker, headsets: list[FakeHeadset]
) -> None:
    cancel_one = broker.subscribe(lambda event: None)
    cancel_two = broker.subscribe(lambda event: None)
    headset = headsets[0]

    cancel_one()
    assert headset.close_calls == 0
    assert broker.connected

    cancel_two()
    assert headset.close_calls == 1
    assert broker.state is ConnectionState.DISCONNECTED
    assert not broker.connected
    assert not broker.monitor.active

    cancel_two()
    cancel_one()
    assert headset.close_calls == 1
    assert len(headsets) == 1


async def test_fan_out_reaches_every_subscriber(
    broker: HyperXBroker, headsets: list[FakeHeadset]
) -> None:
    first: list = []
    second: list = []
    cancel_first = broker.subscribe(first.append)
    cancel_second = broker.subscribe(second.append)
    headset = headsets[0]

    headset.emit("battery", 42)
    headset.emit("muted", True)
    headset.emit("volume", 3)
    headset.emit("charging", True)
    headset.emit("power", "off")

    assert first == second == [
        BatteryEvent(42),
        MutedEvent(True),
        PowerEvent(PowerState.OFF),
    ]

    cancel_first()
    cancel_second()


async def test_resubscribe_opens_fresh_connection(
    broker: HyperXBroker, headsets: list[FakeHeadset]
) -> None:
    events: list = []
    cancel = broker.subscribe(events.append)
    headset = headsets[0]

    headset.emit("battery", 42)
    assert events == [BatteryEvent(42)]

    cancel()
    headset.emit("battery", 50)
    assert events == [BatteryEvent(42)]

    cancel = broker.subscribe(events.append)
    assert len(headsets) == 2
    assert headsets[1] is not headset

    headsets[1].emit("battery", 55)
    assert events == [BatteryEvent(42), BatteryEvent(55)]

    cancel()


async def test_failing_subscriber_does_not_block_others(
    broker: HyperXBroker,
    headsets: list[FakeHeadset],
    caplog: pytest.LogCaptureFixture,
) -> None:
    calls: list = []
    received: list = []

    def broken(event) -> None:
        calls.append(event)
        raise RuntimeError("render failed")

    cancel_broken = broker.subscribe(broken)
    cancel_good = broker.subscribe(received.append)

    headsets[0].emit("battery", 10)
    headsets[0].emit("battery", 11)

    assert received == [BatteryEvent(10), BatteryEvent(11)]
    assert calls == [BatteryEvent(10), BatteryEvent(11)]
    assert broker.state is ConnectionState.CONNECTED
    assert "Error in listener callback" in caplog.text

    cancel_broken()
    cancel_good()


async def test_open_failure_emits_error(hass: HomeAssistant) -> None:
    broker = HyperXBroker(hass, failing_factory)
    events: list = []

    cancel = broker.subscribe(events.append)

    assert len(events) == 1
    assert isinstance(events[0], ErrorEvent)
    assert isinstance(events[0].error, ConnectionOpenError)
    assert isinstance(events[0].error.__cause__, OSError)
    assert broker.state is ConnectionState.DISCONNECTED
    assert not broker.connected
    assert broker.monitor.active

    cancel()
    assert not broker.monitor.active


async def test_subscribe_retries_when_disconnected(hass: HomeAssistant) -> None:
    attempts: list = []

    def factory() -> FakeHeadset:
        attempts.append(None)
        if len(attempts) == 1:
            raise OSError("no dongle found")
        return FakeHeadset()

    broker = HyperXBroker(hass, factory)
    cancel_one = broker.subscribe(lambda event: None)
    assert not broker.connected

    cancel_two = broker.subscribe(lambda event: None)
    assert len(attempts) == 2
    assert broker.state is ConnectionState.CONNECTED

    cancel_one()
    cancel_two()


async def test_close_errors_are_logged(
    hass: HomeAssistant, caplog: pytest.LogCaptureFixture
) -> None:
    headset = BrokenCloseHeadset()
    broker = HyperXBroker(hass, lambda: headset)

    cancel = broker.subscribe(lambda event: None)
    cancel()

    assert headset.close_calls == 1
    assert broker.state is ConnectionState.DISCONNECTED
    assert "Error during close" in caplog.text


async def test_client_without_close(hass: HomeAssistant) -> None:
    headset = NoCloseHeadset()
    broker = HyperXBroker(hass, lambda: headset)
    events: list = []

    cancel = broker.subscribe(events.append)
    headset.listeners["battery"][0](80)
    cancel()

    assert events == [BatteryEvent(80)]
    assert not broker.connected


async def test_device_error_does_not_reconnect(
    broker: HyperXBroker, headsets: list[FakeHeadset]
) -> None:
    events: list = []
    cancel = broker.subscribe(events.append)

    headsets[0].emit("error", "usb read failed")

    assert len(events) == 1
    assert isinstance(events[0].error, DeviceError)
    assert events[0].error.args == ("usb read failed",)
    assert len(headsets) == 1
    assert broker.state is ConnectionState.CONNECTED

    cancel()


async def test_subscriber_cancelling_itself(
    broker: HyperXBroker, headsets: list[FakeHeadset]
) -> None:
    once: list = []
    others: list = []

    def handle_once(event) -> None:
        once.append(event)
        cancel_once()

    cancel_once = broker.subscribe(handle_once)
    cancel_others = broker.subscribe(others.append)

    headsets[0].emit("battery", 1)
    headsets[0].emit("battery", 2)

    assert once == [BatteryEvent(1)]
    assert others == [BatteryEvent(1), BatteryEvent(2)]

    cancel_others()


async def test_cancelled_during_fan_out_gets_no_later_events(
    broker: HyperXBroker, headsets: list[FakeHeadset]
) -> None:
    victim: list = []
    seen_at_cancel: list = []
    cancel_victim = broker.subscribe(victim.append)

    def canceller(event) -> None:
        if not seen_at_cancel:
            seen_at_cancel.append(list(victim))
            cancel_victim()

    cancel_canceller = broker.subscribe(canceller)

    headsets[0].emit("battery", 1)
    headsets[0].emit("battery", 2)

    # Whatever the fan-out order, nothing arrives once cancel has returned
    assert victim == seen_at_cancel[0]
    assert broker.subscriber_count == 1

    cancel_canceller()


async def test_subscriber_added_during_fan_out(
    broker: HyperXBroker, headsets: list[FakeHeadset]
) -> None:
    late: list = []
    cancels: list = []

    def add_late(event) -> None:
        if not cancels:
            cancels.append(broker.subscribe(late.append))

    cancel = broker.subscribe(add_late)

    headsets[0].emit("battery", 1)
    assert late == []

    headsets[0].emit("battery", 2)
    assert late == [BatteryEvent(2)]
    assert len(headsets) == 1

    cancel()
    cancels[0]()


async def test_events_from_other_threads(
    hass: HomeAssistant, broker: HyperXBroker, headsets: list[FakeHeadset]
) -> None:
    events: list = []
    cancel = broker.subscribe(events.append)

    await hass.async_add_executor_job(headsets[0].emit, "battery", 64)
    await hass.async_block_till_done()

    assert events == [BatteryEvent(64)]

    cancel()


async def test_shutdown_drops_subscribers(
    broker: HyperXBroker, headsets: list[FakeHeadset]
) -> None:
    events: list = []
    cancel = broker.subscribe(events.append)

    broker.async_shutdown()

    assert broker.subscriber_count == 0
    assert headsets[0].close_calls == 1
    assert not broker.monitor.active

    cancel()
    headsets[0].emit("battery", 12)
    assert events == []
    assert headsets[0].close_calls == 1


async def test_resubscribe_on_open_failure_does_not_recurse(
    hass: HomeAssistant,
) -> None:
    attempts: list = []
    cancels: list = []

    def factory() -> FakeHeadset:
        attempts.append(None)
        raise OSError("no dongle found")

    broker = HyperXBroker(hass, factory)

    def resubscribe(event) -> None:
        if isinstance(event, ErrorEvent) and len(cancels) < 5:
            cancels.append(broker.subscribe(resubscribe))

    cancels.append(broker.subscribe(resubscribe))

    assert len(attempts) == 1
    assert broker.subscriber_count == 2
    assert broker.state is ConnectionState.DISCONNECTED

    for cancel in cancels:
        cancel()
    assert not broker.monitor.active
