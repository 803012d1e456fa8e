# statelens/machines/catalog.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from statelens.core.definitions import MachineDefinition
from statelens.core.types import Dispatch
from statelens.interfaces.protocols import SnapshotView
from statelens.machines.counter import counter_machine
from statelens.machines.toggle import toggle_machine
from statelens.machines.traffic_light import traffic_light_machine
from statelens.view.harness import MachineDemo


@dataclass(frozen=True)
class MachineEntry:
    """
    One example machine as presented to readers: how to find it, what it
    demonstrates and the definition that runs it.
    """

    id: str
    name: str
    description: str
    path: str
    definition: MachineDefinition
    demo_description: str
    about: Tuple[Tuple[str, str], ...] = ()

    @property
    def source(self) -> str:
        return self.definition.source_text()

    def demo(self, snapshot: Optional[SnapshotView], dispatch: Dispatch) -> MachineDemo:
        """Wrap a live instance of this machine in the generic demo harness."""
        return MachineDemo(
            snapshot,
            dispatch,
            title="Interactive Demo",
            description=self.demo_description,
            machine_code=self.source,
        )


MACHINES: Tuple[MachineEntry, ...] = (
    MachineEntry(
        id="toggle",
        name="Toggle Machine",
        description="A simple on/off toggle demonstrating basic state transitions",
        path="/toggle",
        definition=toggle_machine,
        demo_description="Click the available events below to trigger state transitions.",
        about=(
            ("States", 'The machine can be in either "inactive" or "active" state'),
            ("Event", "The TOGGLE event switches between the two states"),
            ("Use Case", "Perfect for on/off switches, boolean flags, or binary states"),
        ),
    ),
    MachineEntry(
        id="counter",
        name="Counter Machine",
        description="Demonstrates context (data storage) and actions",
        path="/counter",
        definition=counter_machine,
        demo_description="Click the available events below to change the count kept in context.",
        about=(
            ("States", 'A single "active" state; the value never changes'),
            ("Events", "INCREMENT, DECREMENT and RESET update the count in context"),
            ("Use Case", "Any machine that carries data alongside its state"),
        ),
    ),
    MachineEntry(
        id="traffic-light",
        name="Traffic Light Machine",
        description="Cyclical state flow: green -> yellow -> red -> green",
        path="/traffic-light",
        definition=traffic_light_machine,
        demo_description=(
            "Click the available events below to trigger state transitions through the traffic light cycle."
        ),
        about=(
            ("States", "The machine cycles through three states: green, yellow, and red"),
            ("Event", "The NEXT event advances to the next state in the cycle"),
            ("Use Case", "Perfect for workflows, wizards, or any cyclical process"),
        ),
    ),
)

_BY_ID: Dict[str, MachineEntry] = {entry.id: entry for entry in MACHINES}


def get_machine(machine_id: str) -> MachineEntry:
    """
    Look up a catalog entry.

    :raises KeyError: If no example has this id.
    """
    return _BY_ID[machine_id]
