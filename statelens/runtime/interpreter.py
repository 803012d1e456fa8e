# statelens/runtime/interpreter.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
"""
A small run-to-completion interpreter for machine definitions.

It plays the part of the execution engine: it accepts events, computes the
next snapshot deterministically and exposes the current snapshot and the
transition-enumeration query used by introspection. Events sent while an
event is being processed are queued and handled afterwards, so no two
dispatches are ever in flight for one instance.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections import deque
from types import MappingProxyType
from typing import Any, Callable, Deque, Dict, List, Mapping, Optional, Sequence, Tuple

from statelens.core.definitions import MachineDefinition, StateNode, TransitionDefinition
from statelens.core.errors import DefinitionError, TransitionError
from statelens.core.types import ActionFunction, Dispatch, EventObject, Named, StateValue, Transition, Wildcard
from statelens.runtime.snapshot import ACTIVE, DONE, STOPPED, InspectionEvent, InspectionKind, Snapshot

logger = logging.getLogger(__name__)

INIT_EVENT: EventObject = MappingProxyType({"type": "statelens.init"})

Listener = Callable[[Snapshot], None]
InspectObserver = Callable[[InspectionEvent], None]

_actor_ids = itertools.count(1)


def to_event(event: Any) -> EventObject:
    """
    Normalize an event given as a bare name or as a ``{"type": ...}`` mapping.

    :raises ValueError: If no event type can be found.
    """
    if isinstance(event, str):
        event = {"type": event}
    if not isinstance(event, Mapping) or not isinstance(event.get("type"), str) or not event.get("type"):
        raise ValueError(f"Event must be a name or a mapping with a 'type', got {event!r}")
    return event


def assign(**updaters: Any) -> ActionFunction:
    """
    Build an action that updates context keys.

    Each keyword is either a plain value or ``fn(context, event)`` returning
    the new value. All updaters see the context as it was before the action.

    Example:
        assign(count=lambda ctx, event: ctx["count"] + 1)
    """

    def _assign(context: Mapping[str, Any], event: EventObject) -> Dict[str, Any]:
        return {key: (fn(context, event) if callable(fn) else fn) for key, fn in updaters.items()}

    _assign.__name__ = f"assign({', '.join(updaters)})"
    return _assign


def select_transition(
    definition: MachineDefinition,
    value: StateValue,
    context: Mapping[str, Any],
    event: EventObject,
) -> Optional[TransitionDefinition]:
    """
    Pick the transition ``event`` would take from ``value``.

    Active nodes are searched from the leaf up to the root. On each node,
    transitions for the exact event type are tried before wildcard ones, in
    declaration order; the first whose guard passes wins.

    :raises TransitionError: If a guard raises.
    """
    event_type = event["type"]
    for node in definition.active_nodes(value):
        named = [t for t in node.transitions if isinstance(t.event, Named) and t.event.matches(event_type)]
        wildcard = [t for t in node.transitions if isinstance(t.event, Wildcard)]
        for transition in named + wildcard:
            if transition.guard is None:
                return transition
            try:
                if transition.guard(context, event):
                    return transition
            except Exception as e:
                raise TransitionError(f"Guard evaluation failed on '{node.id}': {e}")
    return None


def get_next_transitions(snapshot: Snapshot) -> List[Transition]:
    """
    Enumerate every transition structurally available from ``snapshot``.

    Guards are not evaluated. A snapshot that is done or stopped accepts
    nothing and yields an empty list.
    """
    if snapshot.status != ACTIVE:
        return []
    return snapshot.machine.transitions_from(snapshot.value)


class Actor:
    """
    A running instance of a machine definition.

    Thread safety: events are queued and processed one at a time under an
    instance lock; listeners are called after each processed event, outside
    the lock.
    """

    def __init__(
        self,
        definition: MachineDefinition,
        inspect: Optional[InspectObserver] = None,
        actor_id: Optional[str] = None,
    ) -> None:
        """
        :param definition: The machine to run.
        :param inspect: Optional observer receiving InspectionEvent records.
        :param actor_id: Optional identifier; generated when omitted.
        """
        self._definition = definition
        self._inspect = inspect
        self._id = actor_id or f"{definition.id}:{next(_actor_ids)}"
        self._lock = threading.RLock()
        self._queue: Deque[EventObject] = deque()
        self._processing = False
        self._listeners: List[Listener] = []
        self._snapshot: Optional[Snapshot] = None

    @property
    def id(self) -> str:
        return self._id

    @property
    def definition(self) -> MachineDefinition:
        return self._definition

    @property
    def snapshot(self) -> Optional[Snapshot]:
        """The latest snapshot, or None before ``start()``."""
        return self._snapshot

    @property
    def running(self) -> bool:
        return self._snapshot is not None and self._snapshot.status != STOPPED

    def get_snapshot(self) -> Optional[Snapshot]:
        return self._snapshot

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called with every new snapshot.

        :return: A function that removes the listener.
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def start(self) -> "Actor":
        """Enter the initial state. Starting a running actor does nothing."""
        with self._lock:
            if self._snapshot is not None and self._snapshot.status != STOPPED:
                return self

            definition = self._definition
            leaf = definition.resolve_initial(definition.root)
            entered = list(reversed(leaf.ancestors())) + [leaf]
            context = self._run_actions(
                [a for node in entered for a in node.entry], definition.initial_context(), INIT_EVENT
            )
            snapshot = Snapshot.create(
                definition, definition.value_of(leaf), context, status=self._status_for(leaf), event=INIT_EVENT
            )
            self._snapshot = snapshot
            logger.debug("Actor %s started in %r", self._id, snapshot.value)

        self._notify_inspector(InspectionKind.ACTOR, snapshot=snapshot)
        self._publish(snapshot)
        return self

    def stop(self) -> None:
        """Stop the actor. Further events are ignored until it is started again."""
        with self._lock:
            if self._snapshot is None or self._snapshot.status == STOPPED:
                return
            current = self._snapshot
            snapshot = Snapshot.create(
                current.machine, current.value, current.context, status=STOPPED, event=current.event
            )
            self._snapshot = snapshot
            self._queue.clear()
        self._publish(snapshot)

    def send(self, event: Any) -> Optional[Snapshot]:
        """
        Submit an event. Events the current state does not handle are ignored.

        :param event: A ``{"type": ...}`` mapping or a bare event name.
        :return: The latest snapshot. An event sent while another is being
            processed is queued and handled by the sender already processing.
        :raises TransitionError: If a guard or action fails.
        :raises DefinitionError: If the chosen transition targets an unknown state.
        """
        event = to_event(event)
        with self._lock:
            self._queue.append(event)
            if self._processing:
                return self._snapshot
            self._processing = True

        try:
            while True:
                with self._lock:
                    if not self._queue:
                        self._processing = False
                        break
                    current_event = self._queue.popleft()
                self._process(current_event)
        except Exception:
            with self._lock:
                self._processing = False
                self._queue.clear()
            raise
        return self._snapshot

    def _process(self, event: EventObject) -> None:
        current = self._snapshot
        if current is None or current.status != ACTIVE:
            logger.debug("Actor %s ignored %s: not active", self._id, event["type"])
            return

        self._notify_inspector(InspectionKind.EVENT, event=event)

        transition = select_transition(self._definition, current.value, current.context, event)
        if transition is None:
            logger.debug("Actor %s in %r has no transition for %s", self._id, current.value, event["type"])
            return

        snapshot = self._take(current, transition, event)
        with self._lock:
            if self._snapshot is not current:
                logger.debug("Actor %s was stopped while handling %s; result discarded", self._id, event["type"])
                return
            self._snapshot = snapshot
        logger.debug("Actor %s: %s -> %r", self._id, event["type"], snapshot.value)
        self._publish(snapshot)

    def _take(self, current: Snapshot, transition: TransitionDefinition, event: EventObject) -> Snapshot:
        definition = self._definition
        if not transition.target_refs:
            context = self._run_actions(transition.actions, current.context, event)
            return Snapshot.create(definition, current.value, context, status=current.status, event=event)

        target = self._single_target(transition)
        leaf = definition.leaf_for(current.value)
        domain = self._transition_domain(transition.source, target)

        exited = []
        node: Optional[StateNode] = leaf
        while node is not None and node is not domain:
            exited.append(node)
            node = node.parent

        entered = []
        node = target
        while node is not None and node is not domain:
            entered.append(node)
            node = node.parent
        entered.reverse()
        new_leaf = definition.resolve_initial(target)
        node = new_leaf
        below_target = []
        while node is not target:
            below_target.append(node)
            node = node.parent
        entered.extend(reversed(below_target))

        actions = [a for n in exited for a in n.exit] + list(transition.actions) + [a for n in entered for a in n.entry]
        context = self._run_actions(actions, current.context, event)
        return Snapshot.create(
            definition, definition.value_of(new_leaf), context, status=self._status_for(new_leaf), event=event
        )

    @staticmethod
    def _single_target(transition: TransitionDefinition) -> StateNode:
        if len(transition.targets) != 1:
            raise DefinitionError(
                f"Transition from '{transition.source.id}' must have exactly one target, got {transition.target_refs}"
            )
        target = transition.targets[0]
        if target is None:
            raise DefinitionError(
                f"Transition from '{transition.source.id}' targets unknown state '{transition.target_refs[0]}'"
            )
        return target

    def _transition_domain(self, source: StateNode, target: StateNode) -> StateNode:
        """
        The nearest proper ancestor of ``source`` that also strictly contains
        ``target``, or the root. States below it are exited and re-entered.
        """
        target_ancestors = target.ancestors()
        for ancestor in source.ancestors():
            if ancestor in target_ancestors:
                return ancestor
        return self._definition.root

    def _status_for(self, leaf: StateNode) -> str:
        if leaf.is_final and leaf.parent is self._definition.root:
            return DONE
        return ACTIVE

    def _run_actions(
        self, actions: Sequence[ActionFunction], context: Mapping[str, Any], event: EventObject
    ) -> Dict[str, Any]:
        working = dict(context)
        for action in actions:
            try:
                updates = action(MappingProxyType(working), event)
            except Exception as e:
                name = getattr(action, "__name__", repr(action))
                raise TransitionError(f"Action '{name}' failed: {e}")
            if updates:
                working.update(updates)
        return working

    def _publish(self, snapshot: Snapshot) -> None:
        self._notify_inspector(InspectionKind.SNAPSHOT, snapshot=snapshot)
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(snapshot)

    def _notify_inspector(
        self, kind: InspectionKind, snapshot: Optional[Snapshot] = None, event: Optional[EventObject] = None
    ) -> None:
        if self._inspect is None:
            return
        self._inspect(InspectionEvent(kind=kind, actor_id=self._id, snapshot=snapshot, event=event))


def interpret(definition: MachineDefinition, inspect: Optional[InspectObserver] = None) -> Actor:
    """Create and start an actor for ``definition``."""
    return Actor(definition, inspect=inspect).start()


def create_instance(
    definition: MachineDefinition, inspect: Optional[InspectObserver] = None
) -> Tuple[Snapshot, Dispatch]:
    """
    Start an instance and return its initial snapshot and dispatch function.

    Later snapshots are delivered to subscribers; use :func:`interpret` to
    keep a handle on the actor.
    """
    actor = interpret(definition, inspect=inspect)
    return actor.get_snapshot(), actor.send
