# statelens/core/introspection.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
"""
Transition introspection: which events would a running machine accept now?

The functions here are machine-agnostic. They see a snapshot only through the
read-only :class:`~statelens.interfaces.protocols.SnapshotView` capability and
get the transitions from an enumerator supplied by the engine, so any
compliant engine can be plugged in.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Iterable, Optional, Sequence

from statelens.core.types import EventSet, Named, Transition

if TYPE_CHECKING:
    from statelens.interfaces.protocols import SnapshotView

TransitionEnumerator = Callable[["SnapshotView"], Sequence[Transition]]


def event_set_from_transitions(transitions: Iterable[Transition]) -> EventSet:
    """
    Collect the externally triggerable event names of ``transitions``.

    Only ``Named`` matchers contribute; wildcard transitions are dropped. The
    result is deduplicated and sorted.
    """
    return EventSet(t.event.name for t in transitions if isinstance(t.event, Named))


def available_events(
    snapshot: Optional[SnapshotView],
    transitions_of: Optional[TransitionEnumerator] = None,
) -> EventSet:
    """
    Return the events the machine would accept from ``snapshot``.

    Every transition declared on an active state (the active leaf and each of
    its ancestors) is considered; guards are not evaluated. The snapshot is
    never modified.

    :param snapshot: The current snapshot, or None before an instance exists.
    :param transitions_of: Engine query listing the transitions reachable from
        a snapshot. Defaults to the bundled runtime's ``get_next_transitions``.
    :return: An empty EventSet for a missing snapshot.
    """
    if snapshot is None:
        return EventSet.empty()

    if transitions_of is None:
        from statelens.runtime.interpreter import get_next_transitions

        transitions_of = get_next_transitions

    return event_set_from_transitions(transitions_of(snapshot))
