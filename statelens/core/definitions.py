# statelens/core/definitions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
"""
Machine definitions built from plain configuration mappings.

A definition is pure data: a tree of state nodes, each carrying its outgoing
transitions, plus an identifier, an initial state and an initial context.
Definitions are immutable once constructed and have no side effects.

Target references inside transitions are resolved against the tree when the
definition is built. References that cannot be resolved are kept as written
and are not rejected unless ``strict=True`` is requested; the interpreter
raises ``DefinitionError`` if such a transition is ever taken.
"""

from __future__ import annotations

import copy
import logging
import pprint
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from statelens.core import state_value as sv
from statelens.core.errors import DefinitionError
from statelens.core.types import (
    ActionFunction,
    Context,
    EventMatcher,
    GuardFunction,
    StateID,
    StateValue,
    Transition,
    parse_event_matcher,
)

logger = logging.getLogger(__name__)

ATOMIC = "atomic"
COMPOUND = "compound"
FINAL = "final"

_NODE_KEYS = {"id", "initial", "context", "states", "on", "entry", "exit", "type", "description"}


class TransitionDefinition:
    """
    One configured transition: the event it reacts to, where it goes, the
    guard that must pass and the actions it runs.
    """

    def __init__(
        self,
        source: "StateNode",
        event: EventMatcher,
        target_refs: Tuple[str, ...],
        guard: Optional[GuardFunction] = None,
        actions: Tuple[ActionFunction, ...] = (),
    ) -> None:
        self._source = source
        self._event = event
        self._target_refs = target_refs
        self._guard = guard
        self._actions = actions
        self._targets: Tuple[Optional["StateNode"], ...] = ()

    @property
    def source(self) -> "StateNode":
        return self._source

    @property
    def event(self) -> EventMatcher:
        return self._event

    @property
    def target_refs(self) -> Tuple[str, ...]:
        """Target references exactly as written in the configuration."""
        return self._target_refs

    @property
    def targets(self) -> Tuple[Optional["StateNode"], ...]:
        """Resolved target nodes; None where a reference did not resolve."""
        return self._targets

    @property
    def guard(self) -> Optional[GuardFunction]:
        return self._guard

    @property
    def actions(self) -> Tuple[ActionFunction, ...]:
        return self._actions

    @property
    def unresolved(self) -> Tuple[str, ...]:
        return tuple(ref for ref, node in zip(self._target_refs, self._targets) if node is None)

    def describe(self) -> Transition:
        """Return the structural value object used by introspection."""
        return Transition(
            source=self._source.id,
            event=self._event,
            targets=tuple(node.id if node is not None else ref for ref, node in zip(self._target_refs, self._targets)),
            guarded=self._guard is not None,
        )


class StateNode:
    """
    A node in the state tree. The root node stands for the machine itself.
    """

    def __init__(self, key: str, path: Tuple[str, ...], machine_id: str, parent: Optional["StateNode"]) -> None:
        self._key = key
        self._path = path
        self._id = ".".join((machine_id,) + path)
        self._parent = parent
        self._type = ATOMIC
        self._initial: Optional[str] = None
        self._states: Mapping[str, "StateNode"] = MappingProxyType({})
        self._transitions: Tuple[TransitionDefinition, ...] = ()
        self._entry: Tuple[ActionFunction, ...] = ()
        self._exit: Tuple[ActionFunction, ...] = ()
        self._description: Optional[str] = None

    @property
    def key(self) -> str:
        return self._key

    @property
    def id(self) -> StateID:
        return self._id

    @property
    def path(self) -> Tuple[str, ...]:
        """Keys from the root (exclusive) down to this node."""
        return self._path

    @property
    def parent(self) -> Optional["StateNode"]:
        return self._parent

    @property
    def type(self) -> str:
        return self._type

    @property
    def initial(self) -> Optional[str]:
        return self._initial

    @property
    def states(self) -> Mapping[str, "StateNode"]:
        return self._states

    @property
    def transitions(self) -> Tuple[TransitionDefinition, ...]:
        return self._transitions

    @property
    def entry(self) -> Tuple[ActionFunction, ...]:
        return self._entry

    @property
    def exit(self) -> Tuple[ActionFunction, ...]:
        return self._exit

    @property
    def description(self) -> Optional[str]:
        return self._description

    @property
    def is_final(self) -> bool:
        return self._type == FINAL

    def ancestors(self) -> List["StateNode"]:
        """Ancestors from the immediate parent up to the root."""
        result = []
        current = self._parent
        while current is not None:
            result.append(current)
            current = current._parent
        return result

    def __repr__(self) -> str:
        return f"StateNode({self._id!r})"


class MachineDefinition:
    """
    Immutable description of a finite automaton.

    Built by :func:`create_machine`; owned by whichever caller instantiates a
    running instance from it.
    """

    def __init__(
        self,
        machine_id: str,
        root: StateNode,
        nodes: Dict[StateID, StateNode],
        context: Context,
        config: Mapping[str, Any],
        problems: List[str],
    ) -> None:
        self._id = machine_id
        self._root = root
        self._nodes = MappingProxyType(nodes)
        self._context = copy.deepcopy(context)
        self._config = config
        self._problems = tuple(problems)

    @property
    def id(self) -> str:
        return self._id

    @property
    def root(self) -> StateNode:
        return self._root

    @property
    def nodes(self) -> Mapping[StateID, StateNode]:
        return self._nodes

    @property
    def problems(self) -> Tuple[str, ...]:
        """Construction-time findings, see :func:`validate_definition`."""
        return self._problems

    @property
    def initial_value(self) -> StateValue:
        return self.value_of(self.resolve_initial(self._root))

    def initial_context(self) -> Context:
        """A fresh copy of the initial context for a new instance."""
        return copy.deepcopy(self._context)

    def get_node(self, state_id: StateID) -> StateNode:
        """
        Look up a node by its dotted id.

        :raises KeyError: If no node has this id.
        """
        return self._nodes[state_id]

    def get_node_by_path(self, path: Sequence[str]) -> Optional[StateNode]:
        node = self._root
        for key in path:
            node = node.states.get(key)
            if node is None:
                return None
        return node

    def resolve_initial(self, node: StateNode) -> StateNode:
        """
        Descend from ``node`` through initial children down to a leaf.

        :raises DefinitionError: If an initial child is missing.
        """
        current = node
        while current.states:
            child = current.states.get(current.initial) if current.initial else None
            if child is None:
                raise DefinitionError(f"State '{current.id}' has no valid initial state '{current.initial}'")
            current = child
        return current

    def value_of(self, leaf: StateNode) -> StateValue:
        """The state value for a single active leaf node."""
        if not leaf.path:
            raise DefinitionError(f"Machine '{self._id}' has no states")
        return sv.from_path(leaf.path)

    def leaf_for(self, value: StateValue) -> StateNode:
        """
        Map a state value to its active leaf node.

        :raises DefinitionError: If the value does not name a state of this machine.
        """
        paths = sv.to_paths(value)
        if len(paths) != 1:
            raise DefinitionError(f"State value {value!r} must name exactly one active state")
        node = self.get_node_by_path(paths[0])
        if node is None:
            raise DefinitionError(f"State value {value!r} is not a state of machine '{self._id}'")
        return node

    def active_nodes(self, value: StateValue) -> List[StateNode]:
        """The active leaf followed by each of its ancestors up to the root."""
        leaf = self.leaf_for(value)
        return [leaf] + leaf.ancestors()

    def transitions_from(self, value: StateValue) -> List[Transition]:
        """
        Enumerate every transition declared on an active node, leaf first.
        Guards are not evaluated.
        """
        result = []
        for node in self.active_nodes(value):
            result.extend(t.describe() for t in node.transitions)
        return result

    def resolve_target(self, source: StateNode, ref: str) -> Optional[StateNode]:
        """
        Resolve a target reference written on ``source``.

        ``"#machine.a.b"`` is absolute, ``".child"`` is below the source and a
        bare ``"sibling"`` or ``"sibling.child"`` is relative to the source's
        parent (or to the root for root-level transitions).
        """
        if ref.startswith("#"):
            return self._nodes.get(ref[1:])
        if ref.startswith("."):
            return self.get_node_by_path(source.path + tuple(ref[1:].split(".")))
        base = source.parent.path if source.parent is not None else ()
        return self.get_node_by_path(base + tuple(ref.split(".")))

    def source_text(self) -> str:
        """Readable text of the configuration this definition was built from."""
        return pprint.pformat(_sourceable(self._config), indent=2, width=88, sort_dicts=False)

    def __repr__(self) -> str:
        return f"MachineDefinition({self._id!r})"


class _SourceRef:
    """Stands in for a callable when printing a configuration."""

    def __init__(self, name: str) -> None:
        self._name = name

    def __repr__(self) -> str:
        return self._name


def _sourceable(value: Any) -> Any:
    if callable(value):
        return _SourceRef(getattr(value, "__name__", type(value).__name__))
    if isinstance(value, Mapping):
        return {k: _sourceable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_sourceable(v) for v in value]
    return value


class _DefinitionBuilder:
    """
    Internal two-pass builder: first the state tree, then the transitions,
    whose targets can only be resolved once every node exists.
    """

    def __init__(
        self,
        config: Mapping[str, Any],
        guards: Optional[Mapping[str, GuardFunction]],
        actions: Optional[Mapping[str, ActionFunction]],
    ) -> None:
        self._config = config
        self._guards = dict(guards or {})
        self._actions = dict(actions or {})
        self._nodes: Dict[StateID, StateNode] = {}
        self._pending: List[Tuple[StateNode, Mapping[str, Any]]] = []
        self._problems: List[str] = []

    def build(self) -> MachineDefinition:
        machine_id = self._config.get("id") or "machine"
        if not isinstance(machine_id, str):
            raise DefinitionError("Machine id must be a string")

        root = self._build_node(machine_id, (), machine_id, None, self._config)
        definition = MachineDefinition(
            machine_id=machine_id,
            root=root,
            nodes=self._nodes,
            context=dict(self._config.get("context") or {}),
            config=copy.deepcopy(dict(self._config)),
            problems=[],
        )

        for node, node_config in self._pending:
            node._transitions = tuple(self._build_transitions(definition, node, node_config.get("on") or {}))

        if not root.states:
            self._problems.append(f"Machine '{machine_id}' declares no states")
        definition._problems = tuple(self._problems)
        return definition

    def _build_node(
        self,
        key: str,
        path: Tuple[str, ...],
        machine_id: str,
        parent: Optional[StateNode],
        config: Mapping[str, Any],
    ) -> StateNode:
        if not isinstance(config, Mapping):
            raise DefinitionError(f"State '{'.'.join((machine_id,) + path)}' must be configured with a mapping")

        node = StateNode(key, path, machine_id, parent)
        self._nodes[node.id] = node

        unknown = set(config) - _NODE_KEYS
        if unknown:
            self._problems.append(f"State '{node.id}' has unknown keys: {sorted(unknown)}")

        node._description = config.get("description")
        node._entry = self._resolve_actions(config.get("entry"))
        node._exit = self._resolve_actions(config.get("exit"))

        children = config.get("states") or {}
        if children:
            node._type = COMPOUND
            node._states = MappingProxyType(
                {
                    child_key: self._build_node(child_key, path + (child_key,), machine_id, node, child_config)
                    for child_key, child_config in children.items()
                }
            )
            initial = config.get("initial")
            if initial is None:
                initial = next(iter(children))
                self._problems.append(f"Compound state '{node.id}' has no initial state; using '{initial}'")
            elif initial not in children:
                self._problems.append(f"Initial state '{initial}' of '{node.id}' is not one of its states")
            node._initial = initial
        elif config.get("type") == FINAL:
            node._type = FINAL

        self._pending.append((node, config))
        return node

    def _build_transitions(
        self, definition: MachineDefinition, node: StateNode, on: Mapping[str, Any]
    ) -> Iterable[TransitionDefinition]:
        for descriptor, value in on.items():
            try:
                matcher = parse_event_matcher(descriptor)
            except ValueError as e:
                raise DefinitionError(f"State '{node.id}': {e}")
            configs = value if isinstance(value, list) else [value]
            for item in configs:
                yield self._build_transition(definition, node, matcher, item)

    def _build_transition(
        self, definition: MachineDefinition, node: StateNode, matcher: EventMatcher, item: Any
    ) -> TransitionDefinition:
        if item is None or isinstance(item, str):
            item = {"target": item}
        if not isinstance(item, Mapping):
            raise DefinitionError(f"State '{node.id}': transition config must be a target or a mapping, got {item!r}")

        target = item.get("target")
        refs: Tuple[str, ...]
        if target is None:
            refs = ()
        elif isinstance(target, str):
            refs = (target,)
        else:
            refs = tuple(target)

        transition = TransitionDefinition(
            source=node,
            event=matcher,
            target_refs=refs,
            guard=self._resolve_guard(item.get("guard")),
            actions=self._resolve_actions(item.get("actions")),
        )
        transition._targets = tuple(definition.resolve_target(node, ref) for ref in refs)
        for ref in transition.unresolved:
            self._problems.append(f"Transition from '{node.id}' targets unknown state '{ref}'")
        return transition

    def _resolve_guard(self, guard: Any) -> Optional[GuardFunction]:
        if guard is None or callable(guard):
            return guard
        if guard in self._guards:
            return self._guards[guard]
        raise DefinitionError(f"Unknown guard '{guard}'")

    def _resolve_actions(self, actions: Any) -> Tuple[ActionFunction, ...]:
        if actions is None:
            return ()
        if callable(actions) or isinstance(actions, str):
            actions = [actions]
        resolved = []
        for action in actions:
            if callable(action):
                resolved.append(action)
            elif action in self._actions:
                resolved.append(self._actions[action])
            else:
                raise DefinitionError(f"Unknown action '{action}'")
        return tuple(resolved)


def create_machine(
    config: Mapping[str, Any],
    *,
    guards: Optional[Mapping[str, GuardFunction]] = None,
    actions: Optional[Mapping[str, ActionFunction]] = None,
    strict: bool = False,
) -> MachineDefinition:
    """
    Build a machine definition from a configuration mapping.

    :param config: Mapping with ``id``, ``initial``, ``context``, ``states`` and ``on``.
    :param guards: Named guards referenced by string from transitions.
    :param actions: Named actions referenced by string from transitions and entry/exit lists.
    :param strict: Raise instead of tolerating unresolved targets and other problems.
    :raises DefinitionError: If the configuration shape is unusable, or in strict
        mode if :func:`validate_definition` reports problems.
    """
    if not isinstance(config, Mapping):
        raise DefinitionError("Machine configuration must be a mapping")

    definition = _DefinitionBuilder(config, guards, actions).build()
    if strict:
        problems = validate_definition(definition)
        if problems:
            raise DefinitionError("\n".join(problems))
    else:
        for problem in definition.problems:
            logger.debug("Machine '%s': %s", definition.id, problem)
    return definition


def validate_definition(definition: MachineDefinition) -> List[str]:
    """
    Report problems found in a definition without raising.

    Covers unresolved transition targets, missing or invalid initial states,
    unknown configuration keys, machines without states and states that can
    never be entered from the initial state.
    """
    problems = list(definition.problems)
    if not definition.root.states:
        return problems

    reachable = set()
    pending = [definition.root]
    while pending:
        node = pending.pop()
        if node.id in reachable:
            continue
        reachable.add(node.id)
        pending.extend(node.ancestors())
        if node.initial and node.initial in node.states:
            pending.append(node.states[node.initial])
        for transition in node.transitions:
            pending.extend(target for target in transition.targets if target is not None)

    unreachable = sorted(state_id for state_id in definition.nodes if state_id not in reachable)
    if unreachable:
        problems.append(f"States {unreachable} are not reachable from the initial state")
    return problems
