# tests/unit/introspection/test_available_events.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import string
from types import SimpleNamespace
from typing import Dict, List

import pytest
from hypothesis import given
from hypothesis import strategies as st

from statelens.core.definitions import create_machine
from statelens.core.introspection import available_events, event_set_from_transitions
from statelens.core.types import WILDCARD, EventSet, Named, Transition, Wildcard
from statelens.runtime import Snapshot, interpret

# -----------------------------------------------------------------------------
# STRATEGIES
# -----------------------------------------------------------------------------

event_names = st.one_of(
    st.text(alphabet=string.ascii_uppercase + "_", min_size=1, max_size=8),
    st.just(WILDCARD),
)


@st.composite
def flat_machines(draw):
    """A flat machine whose states carry random (possibly wildcard) transitions."""
    state_names = draw(st.lists(st.sampled_from("abcdef"), min_size=1, max_size=6, unique=True))
    states: Dict[str, Dict] = {}
    for name in state_names:
        on = {}
        for event in draw(st.lists(event_names, max_size=6)):
            on[event] = draw(st.lists(st.sampled_from(state_names), min_size=1, max_size=3))
        states[name] = {"on": on}
    current = draw(st.sampled_from(state_names))
    machine = create_machine({"id": "generated", "initial": state_names[0], "states": states})
    return machine, current


# -----------------------------------------------------------------------------
# EXAMPLES
# -----------------------------------------------------------------------------


def test_missing_snapshot_yields_empty_set() -> None:
    events = available_events(None)
    assert isinstance(events, EventSet)
    assert len(events) == 0
    assert list(events) == []


def test_toggle_machine_events(toggle_actor) -> None:
    assert available_events(toggle_actor.snapshot) == ["TOGGLE"]


def test_counter_machine_events(counter_actor) -> None:
    assert available_events(counter_actor.snapshot) == ["DECREMENT", "INCREMENT", "RESET"]


def test_nested_events_include_every_active_region(nested_machine) -> None:
    actor = interpret(nested_machine)
    assert available_events(actor.snapshot) == ["PAUSE", "POWER_OUTAGE", "STOP", "TICK"]

    actor.send("STOP")
    assert available_events(actor.snapshot) == ["GO", "POWER_OUTAGE", "STOP"]


def test_wildcard_is_never_listed() -> None:
    machine = create_machine({"id": "m", "initial": "a", "states": {"a": {"on": {"*": "a", "GO": "a"}}}})
    events = available_events(interpret(machine).snapshot)
    assert WILDCARD not in events
    assert events == ["GO"]


def test_guarded_transitions_are_listed_without_evaluation() -> None:
    machine = create_machine(
        {"id": "m", "initial": "a", "states": {"a": {"on": {"GO": {"target": "a", "guard": lambda c, e: False}}}}}
    )
    assert available_events(interpret(machine).snapshot) == ["GO"]


def test_done_snapshot_accepts_nothing() -> None:
    machine = create_machine({"id": "m", "initial": "a", "states": {"a": {"on": {"END": "z"}}, "z": {"type": "final"}}})
    actor = interpret(machine)
    actor.send("END")
    assert actor.snapshot.status == "done"
    assert available_events(actor.snapshot) == []


def test_snapshot_is_not_mutated(counter_actor) -> None:
    snapshot = counter_actor.snapshot
    before = snapshot.to_dict()
    available_events(snapshot)
    available_events(snapshot)
    assert snapshot.to_dict() == before


def test_custom_enumerator_for_foreign_snapshots() -> None:
    snapshot = SimpleNamespace(value="idle", context={})
    transitions: List[Transition] = [
        Transition(source="x.idle", event=Named("START")),
        Transition(source="x.idle", event=Named("ABORT")),
        Transition(source="x", event=Named("START")),
        Transition(source="x", event=Wildcard()),
    ]
    calls = []

    def enumerate_transitions(s):
        calls.append(s)
        return transitions

    assert available_events(snapshot, enumerate_transitions) == ["ABORT", "START"]
    assert calls == [snapshot]


def test_event_set_from_transitions_is_pure() -> None:
    transitions = (
        Transition(source="m.a", event=Named("B")),
        Transition(source="m.a", event=Named("A")),
        Transition(source="m", event=Named("B")),
    )
    assert event_set_from_transitions(transitions) == ["A", "B"]
    assert event_set_from_transitions(iter(transitions)) == EventSet(["B", "A"])


def test_event_set_value_semantics() -> None:
    events = EventSet(["b", "a", "b", "*"])
    assert events.names == ("a", "b")
    assert events[0] == "a"
    assert "b" in events and "*" not in events
    assert events == ("a", "b")
    assert hash(events) == hash(EventSet(["a", "b"]))
    assert repr(events) == "EventSet(['a', 'b'])"
    assert not EventSet.empty()


# -----------------------------------------------------------------------------
# PROPERTY-BASED TESTS
# -----------------------------------------------------------------------------


@pytest.mark.property
@given(machine_and_state=flat_machines())
def test_event_set_is_sorted_unique_and_wildcard_free(machine_and_state) -> None:
    machine, current = machine_and_state
    snapshot = Snapshot.create(machine, current, {})
    events = list(available_events(snapshot))

    assert events == sorted(events)
    assert len(events) == len(set(events))
    assert WILDCARD not in events


@pytest.mark.property
@given(machine_and_state=flat_machines())
def test_event_set_covers_every_named_transition(machine_and_state) -> None:
    machine, current = machine_and_state
    snapshot = Snapshot.create(machine, current, {})
    expected = {t.event_type for t in machine.transitions_from(current) if not t.is_wildcard}
    assert set(available_events(snapshot)) == expected
