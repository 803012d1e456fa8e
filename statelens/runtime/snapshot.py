# statelens/runtime/snapshot.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import copy
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

from statelens.core import state_value as sv
from statelens.core.types import EventObject, StateValue

if TYPE_CHECKING:
    from statelens.core.definitions import MachineDefinition

ACTIVE = "active"
DONE = "done"
STOPPED = "stopped"


def _plain(value: Any) -> Any:
    """Detach nested mappings and sequences into plain dicts and lists."""
    if isinstance(value, Mapping):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return copy.deepcopy(value)


@dataclass(frozen=True)
class Snapshot:
    """
    Immutable view of a running instance: its state value, its context and a
    little engine metadata. A new snapshot is produced for every change.

    :param machine: The definition the instance runs.
    :param value: Current state value.
    :param context: Read-only context mapping.
    :param status: ``"active"``, ``"done"`` (a top-level final state was
        reached) or ``"stopped"``.
    :param event: The event that produced this snapshot, if any.
    """

    machine: "MachineDefinition"
    value: StateValue
    context: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    status: str = ACTIVE
    event: Optional[EventObject] = None

    @classmethod
    def create(
        cls,
        machine: "MachineDefinition",
        value: StateValue,
        context: Mapping[str, Any],
        status: str = ACTIVE,
        event: Optional[EventObject] = None,
    ) -> "Snapshot":
        """Build a snapshot that shares no mutable data with its inputs."""
        return cls(
            machine=machine,
            value=sv.normalize(value),
            context=MappingProxyType(_plain(context)),
            status=status,
            event=MappingProxyType(_plain(event)) if event is not None else None,
        )

    def matches(self, parent: StateValue) -> bool:
        """True if the current value is ``parent`` or nested within it."""
        return sv.matches_state(parent, self.value)

    def can(self, event: Any) -> bool:
        """True if sending ``event`` now would take a transition (guards evaluated)."""
        from statelens.runtime.interpreter import select_transition, to_event

        if self.status != ACTIVE:
            return False
        return select_transition(self.machine, self.value, self.context, to_event(event)) is not None

    def to_dict(self) -> Dict[str, Any]:
        """Full diagnostic dump: state, context and engine metadata."""
        return {
            "machine": self.machine.id,
            "value": _plain(self.value),
            "context": _plain(self.context),
            "status": self.status,
            "event": _plain(self.event) if self.event is not None else None,
        }


class InspectionKind(Enum):
    """Kinds of records handed to an inspection observer."""

    ACTOR = auto()  # Instance started
    EVENT = auto()  # Event received
    SNAPSHOT = auto()  # New snapshot produced


@dataclass(frozen=True)
class InspectionEvent:
    """One record delivered to an inspection observer."""

    kind: InspectionKind
    actor_id: str
    snapshot: Optional[Snapshot] = None
    event: Optional[EventObject] = None
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.name.lower(),
            "actor": self.actor_id,
            "snapshot": self.snapshot.to_dict() if self.snapshot is not None else None,
            "event": _plain(self.event) if self.event is not None else None,
            "timestamp": self.timestamp,
        }
