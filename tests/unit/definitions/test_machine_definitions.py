# tests/unit/definitions/test_machine_definitions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import pytest

from statelens.core.definitions import COMPOUND, FINAL, create_machine, validate_definition
from statelens.core.errors import DefinitionError
from statelens.core.types import Named, Transition, Wildcard
from statelens.machines import counter_machine, toggle_machine, traffic_light_machine

# -----------------------------------------------------------------------------
# EXAMPLE MACHINES
# -----------------------------------------------------------------------------


def test_toggle_machine_topology() -> None:
    assert toggle_machine.id == "toggle"
    assert toggle_machine.initial_value == "inactive"
    assert set(toggle_machine.root.states) == {"inactive", "active"}
    assert toggle_machine.transitions_from("inactive") == [
        Transition(source="toggle.inactive", event=Named("TOGGLE"), targets=("toggle.active",))
    ]
    assert toggle_machine.transitions_from("active") == [
        Transition(source="toggle.active", event=Named("TOGGLE"), targets=("toggle.inactive",))
    ]


def test_traffic_light_machine_topology() -> None:
    assert traffic_light_machine.id == "trafficLight"
    assert traffic_light_machine.initial_value == "green"
    cycle = {"green": "yellow", "yellow": "red", "red": "green"}
    for source, target in cycle.items():
        (transition,) = traffic_light_machine.transitions_from(source)
        assert transition.event_type == "NEXT"
        assert transition.targets == (f"trafficLight.{target}",)


def test_counter_machine_has_context_and_targetless_transitions() -> None:
    assert counter_machine.initial_value == "active"
    assert counter_machine.initial_context() == {"count": 0}
    transitions = counter_machine.transitions_from("active")
    assert {t.event_type for t in transitions} == {"INCREMENT", "DECREMENT", "RESET"}
    assert all(t.is_targetless for t in transitions)


def test_example_machines_validate_cleanly() -> None:
    for machine in (toggle_machine, traffic_light_machine, counter_machine):
        assert validate_definition(machine) == []


def test_initial_context_is_a_fresh_copy() -> None:
    first = counter_machine.initial_context()
    first["count"] = 99
    assert counter_machine.initial_context() == {"count": 0}


# -----------------------------------------------------------------------------
# CONFIGURATION FORMS
# -----------------------------------------------------------------------------


def test_transition_config_forms() -> None:
    def is_ready(context, event):
        return context.get("ready", False)

    machine = create_machine(
        {
            "id": "forms",
            "initial": "a",
            "states": {
                "a": {
                    "on": {
                        "PLAIN": "b",
                        "NOTHING": None,
                        "MAPPED": {"target": "b", "guard": "isReady"},
                        "CHOICE": [{"target": "b", "guard": is_ready}, {"target": "c"}],
                        "*": "c",
                    }
                },
                "b": {},
                "c": {},
            },
        },
        guards={"isReady": is_ready},
    )
    transitions = machine.transitions_from("a")
    assert [t.event for t in transitions] == [
        Named("PLAIN"),
        Named("NOTHING"),
        Named("MAPPED"),
        Named("CHOICE"),
        Named("CHOICE"),
        Wildcard(),
    ]
    assert transitions[1].targets == ()
    assert transitions[2].guarded
    assert transitions[3].guarded and not transitions[4].guarded
    assert transitions[5].is_wildcard
    assert transitions[5].event_type is None


def test_unknown_guard_or_action_name_raises() -> None:
    with pytest.raises(DefinitionError, match="Unknown guard"):
        create_machine({"id": "m", "initial": "a", "states": {"a": {"on": {"GO": {"target": "a", "guard": "nope"}}}}})
    with pytest.raises(DefinitionError, match="Unknown action"):
        create_machine({"id": "m", "initial": "a", "states": {"a": {"entry": ["nope"]}}})


def test_invalid_configuration_shapes_raise() -> None:
    with pytest.raises(DefinitionError):
        create_machine(["not", "a", "mapping"])
    with pytest.raises(DefinitionError):
        create_machine({"id": "m", "initial": "a", "states": {"a": "not-a-mapping"}})
    with pytest.raises(DefinitionError):
        create_machine({"id": "m", "initial": "a", "states": {"a": {"on": {"": "a"}}}})
    with pytest.raises(DefinitionError):
        create_machine({"id": "m", "initial": "a", "states": {"a": {"on": {"GO": 42}}}})


# -----------------------------------------------------------------------------
# UNCHECKED AND STRICT DEFINITIONS
# -----------------------------------------------------------------------------


def test_unknown_target_is_tolerated_by_default() -> None:
    machine = create_machine({"id": "m", "initial": "a", "states": {"a": {"on": {"GO": "nowhere"}}}})
    (transition,) = machine.transitions_from("a")
    assert transition.targets == ("nowhere",)
    assert any("nowhere" in problem for problem in validate_definition(machine))


def test_unknown_target_is_rejected_in_strict_mode() -> None:
    with pytest.raises(DefinitionError, match="nowhere"):
        create_machine({"id": "m", "initial": "a", "states": {"a": {"on": {"GO": "nowhere"}}}}, strict=True)


def test_problems_found_while_building_transitions_are_kept() -> None:
    machine = create_machine(
        {"id": "m", "initial": "a", "states": {"a": {"on": {"GO": "nowhere", "BACK": {"target": "#m.gone"}}}}}
    )
    assert machine.problems == (
        "Transition from 'm.a' targets unknown state 'nowhere'",
        "Transition from 'm.a' targets unknown state '#m.gone'",
    )


def test_machine_without_states_is_reported_and_rejected_in_strict_mode() -> None:
    machine = create_machine({"id": "m"})
    assert validate_definition(machine) == ["Machine 'm' declares no states"]
    with pytest.raises(DefinitionError, match="declares no states"):
        create_machine({"id": "m"}, strict=True)


def test_unreachable_states_are_reported() -> None:
    machine = create_machine(
        {"id": "m", "initial": "a", "states": {"a": {"on": {"GO": "b"}}, "b": {}, "island": {}}}
    )
    problems = validate_definition(machine)
    assert problems == ["States ['m.island'] are not reachable from the initial state"]


def test_compound_state_without_initial_uses_first_child() -> None:
    machine = create_machine({"id": "m", "initial": "p", "states": {"p": {"states": {"x": {}, "y": {}}}}})
    assert machine.get_node("m.p").type == COMPOUND
    assert machine.initial_value == {"p": "x"}
    assert any("no initial state" in problem for problem in validate_definition(machine))


def test_invalid_initial_state_is_reported_and_fails_at_resolution() -> None:
    machine = create_machine({"id": "m", "initial": "missing", "states": {"a": {}}})
    assert any("missing" in problem for problem in validate_definition(machine))
    with pytest.raises(DefinitionError):
        machine.initial_value


def test_unknown_keys_are_reported() -> None:
    machine = create_machine({"id": "m", "initial": "a", "states": {"a": {"onn": {}}}})
    assert any("unknown keys" in problem for problem in validate_definition(machine))


# -----------------------------------------------------------------------------
# HIERARCHY AND TARGET RESOLUTION
# -----------------------------------------------------------------------------


def test_nested_machine_structure(nested_machine) -> None:
    assert nested_machine.initial_value == {"walk": "countdown"}
    assert nested_machine.get_node("crossing.walk.hurry").path == ("walk", "hurry")
    assert [n.id for n in nested_machine.active_nodes({"walk": "hurry"})] == [
        "crossing.walk.hurry",
        "crossing.walk",
        "crossing",
    ]
    assert validate_definition(nested_machine) == []


def test_transitions_from_lists_leaf_first(nested_machine) -> None:
    sources = [t.source for t in nested_machine.transitions_from({"walk": "countdown"})]
    assert sources == [
        "crossing.walk.countdown",
        "crossing.walk.countdown",
        "crossing.walk",
        "crossing.walk",
        "crossing",
    ]


def test_resolve_target_reference_forms(nested_machine) -> None:
    walk = nested_machine.get_node("crossing.walk")
    countdown = nested_machine.get_node("crossing.walk.countdown")
    assert nested_machine.resolve_target(countdown, "hurry").id == "crossing.walk.hurry"
    assert nested_machine.resolve_target(walk, ".hurry").id == "crossing.walk.hurry"
    assert nested_machine.resolve_target(walk, "wait").id == "crossing.wait"
    assert nested_machine.resolve_target(walk, "walk.hurry").id == "crossing.walk.hurry"
    assert nested_machine.resolve_target(countdown, "#crossing.blinking").id == "crossing.blinking"
    assert nested_machine.resolve_target(countdown, "#crossing.nope") is None


def test_leaf_for_rejects_foreign_values(nested_machine) -> None:
    with pytest.raises(DefinitionError):
        nested_machine.leaf_for("nope")
    with pytest.raises(DefinitionError):
        nested_machine.leaf_for({"walk": "nope"})


def test_final_state_type() -> None:
    machine = create_machine({"id": "m", "initial": "a", "states": {"a": {"on": {"END": "z"}}, "z": {"type": FINAL}}})
    assert machine.get_node("m.z").is_final
    assert not machine.get_node("m.a").is_final


# -----------------------------------------------------------------------------
# SOURCE TEXT
# -----------------------------------------------------------------------------


def test_source_text_shows_configuration() -> None:
    text = toggle_machine.source_text()
    assert "'id': 'toggle'" in text
    assert "'TOGGLE': 'active'" in text


def test_source_text_names_callables() -> None:
    def bump(context, event):
        return {"n": context["n"] + 1}

    machine = create_machine(
        {"id": "m", "initial": "a", "context": {"n": 0}, "states": {"a": {"on": {"BUMP": {"actions": [bump]}}}}}
    )
    assert "bump" in machine.source_text()
    assert "<function" not in machine.source_text()
