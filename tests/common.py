"""Fake headset clients used by the tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any


class FakeHeadset:
    """Stands in for the headset library's client."""

    def __init__(self) -> None:
        self.listeners: dict[str, list[Callable[..., None]]] = {}
        self.close_calls = 0

    def on(self, name: str, listener: Callable[..., None]) -> None:
        self.listeners.setdefault(name, []).append(listener)

    def emit(self, name: str, *args: Any) -> None:
        for listener in list(self.listeners.get(name, [])):
            listener(*args)

    def close(self) -> None:
        self.close_calls += 1


class BrokenCloseHeadset(FakeHeadset):
    def close(self) -> None:
        super().close()
        raise OSError("device busy")


class NoCloseHeadset:
    def __init__(self) -> None:
        self.listeners: dict[str, list[Callable[..., None]]] = {}

    def on(self, name: str, listener: Callable[..., None]) -> None:
        self.listeners.setdefault(name, []).append(listener)


HEADSETS: list[FakeHeadset] = []


def create_headset() -> FakeHeadset:
    headset = FakeHeadset()
    HEADSETS.append(headset)
    return headset


def failing_factory() -> FakeHeadset:
    raise OSError("no dongle found")
