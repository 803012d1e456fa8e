# tests/conftest.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from typing import Any, Dict, List

import pytest

from statelens.inspector import reset_inspector


def pytest_configure(config):
    """Register custom marks."""
    config.addinivalue_line("markers", "property: mark test as a property-based test")
    config.addinivalue_line("markers", "memory: mark test as a memory usage test")


class RecordingDispatch:
    """Dispatch stand-in that remembers every event it receives."""

    def __init__(self) -> None:
        self.events: List[Dict[str, Any]] = []

    def __call__(self, event: Dict[str, Any]) -> None:
        self.events.append(dict(event))


class RecordingOpener:
    """Browser opener stand-in that never opens anything."""

    def __init__(self) -> None:
        self.urls: List[str] = []

    def __call__(self, url: str) -> bool:
        self.urls.append(url)
        return True


@pytest.fixture
def dispatch():
    """A dispatch function that records events."""
    return RecordingDispatch()


@pytest.fixture
def opener():
    """A browser opener that records URLs."""
    return RecordingOpener()


@pytest.fixture
def toggle_actor():
    """A started toggle machine."""
    from statelens.machines import toggle_machine
    from statelens.runtime import interpret

    return interpret(toggle_machine)


@pytest.fixture
def traffic_light_actor():
    """A started traffic light machine."""
    from statelens.machines import traffic_light_machine
    from statelens.runtime import interpret

    return interpret(traffic_light_machine)


@pytest.fixture
def counter_actor():
    """A started counter machine."""
    from statelens.machines import counter_machine
    from statelens.runtime import interpret

    return interpret(counter_machine)


@pytest.fixture
def nested_machine():
    """A pedestrian-crossing style machine with a compound state and a wildcard."""
    from statelens.core.definitions import create_machine

    return create_machine(
        {
            "id": "crossing",
            "initial": "walk",
            "on": {"POWER_OUTAGE": "#crossing.blinking"},
            "states": {
                "walk": {
                    "initial": "countdown",
                    "on": {"STOP": "wait", "*": "walk"},
                    "states": {
                        "countdown": {"on": {"TICK": "hurry", "PAUSE": "countdown"}},
                        "hurry": {"on": {"TICK": "countdown"}},
                    },
                },
                "wait": {"on": {"GO": "walk", "STOP": "wait"}},
                "blinking": {"on": {"POWER_RESTORED": "walk"}},
            },
        }
    )


@pytest.fixture(autouse=True)
def fresh_inspector():
    """Each test resolves the process-wide inspector from scratch."""
    reset_inspector()
    yield
    reset_inspector()
