# statelens/core/types.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
"""
Type definitions and value objects shared across the library.

This module contains the shared data model used by the machine definitions,
the introspection engine, the runtime interpreter and the visualizer. It helps
break circular dependencies between modules and provides a central location
for type information.

Design:
- No runtime dependencies on other statelens modules
- Only contains type aliases and immutable value objects
- Event matching is a tagged union (Named | Wildcard) rather than a magic string
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, Mapping, Optional, Tuple, Union

# Type aliases for common types
StateID = str
EventType = str
StateValue = Union[str, Mapping[str, "StateValue"]]
Context = Dict[str, Any]
EventObject = Mapping[str, Any]

GuardFunction = Callable[[Mapping[str, Any], EventObject], bool]
ActionFunction = Callable[[Mapping[str, Any], EventObject], Optional[Mapping[str, Any]]]
Dispatch = Callable[[EventObject], Any]

WILDCARD = "*"


@dataclass(frozen=True)
class Named:
    """Matches exactly one event type."""

    name: EventType

    def matches(self, event_type: EventType) -> bool:
        return event_type == self.name


@dataclass(frozen=True)
class Wildcard:
    """Matches any event type. Never externally triggerable on its own."""

    def matches(self, event_type: EventType) -> bool:
        return True

    def __repr__(self) -> str:
        return "Wildcard()"


EventMatcher = Union[Named, Wildcard]


def parse_event_matcher(descriptor: str) -> EventMatcher:
    """
    Turn an event descriptor from a machine configuration into a matcher.

    :param descriptor: An event name, or ``"*"`` for a catch-all transition.
    :raises ValueError: If the descriptor is empty.
    """
    if not descriptor or not isinstance(descriptor, str):
        raise ValueError("Event descriptor must be a non-empty string")
    if descriptor == WILDCARD:
        return Wildcard()
    return Named(descriptor)


@dataclass(frozen=True)
class Transition:
    """
    A structural description of one outgoing transition.

    :param source: Dotted id of the state node that declares the transition.
    :param event: The event matcher that triggers it.
    :param targets: Resolved dotted ids of the targets; empty when targetless.
    :param guarded: Whether a guard must pass for the transition to be taken.
    """

    source: StateID
    event: EventMatcher
    targets: Tuple[StateID, ...] = ()
    guarded: bool = False

    @property
    def event_type(self) -> Optional[EventType]:
        """The concrete event name, or None for wildcard transitions."""
        if isinstance(self.event, Named):
            return self.event.name
        return None

    @property
    def is_wildcard(self) -> bool:
        return isinstance(self.event, Wildcard)

    @property
    def is_targetless(self) -> bool:
        return not self.targets


class EventSet:
    """
    Immutable, sorted, duplicate-free collection of event names.

    Runtime Invariants:
    - Never contains the wildcard marker.
    - Iteration order is lexicographic ascending.
    """

    __slots__ = ("_names",)

    def __init__(self, names: Iterable[EventType] = ()) -> None:
        self._names: Tuple[EventType, ...] = tuple(sorted({n for n in names if n and n != WILDCARD}))

    @classmethod
    def empty(cls) -> "EventSet":
        return cls()

    @property
    def names(self) -> Tuple[EventType, ...]:
        return self._names

    def __iter__(self) -> Iterator[EventType]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __getitem__(self, index: int) -> EventType:
        return self._names[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, EventSet):
            return self._names == other._names
        if isinstance(other, (list, tuple)):
            return list(self._names) == list(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._names)

    def __repr__(self) -> str:
        return f"EventSet({list(self._names)!r})"
