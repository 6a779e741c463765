from collections.abc import AsyncGenerator

import pytest
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.hyperx_headset.broker import HyperXBroker
from custom_components.hyperx_headset.const import CONF_CLIENT_FACTORY, DOMAIN

from .common import HEADSETS, FakeHeadset, create_headset


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations):
    yield


@pytest.fixture
def headsets():
    HEADSETS.clear()
    yield HEADSETS
    HEADSETS.clear()


@pytest.fixture
async def broker(
    hass: HomeAssistant, headsets: list[FakeHeadset]
) -> AsyncGenerator[HyperXBroker, None]:
    broker = HyperXBroker.get_or_create(hass, create_headset)
    yield broker
    broker.async_shutdown()


@pytest.fixture
def config_entry() -> MockConfigEntry:
    return MockConfigEntry(
        domain=DOMAIN,
        title="HyperX Cloud Flight",
        data={CONF_CLIENT_FACTORY: "tests.common.create_headset"},
    )
