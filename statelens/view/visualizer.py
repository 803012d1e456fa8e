# statelens/view/visualizer.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
"""
Generic visualizer for a running machine.

Renders the three observable facets of any machine (state, context and
available events) plus a collapsed diagnostic dump of the whole snapshot,
without knowing which machine it is looking at. Rendering is pure; the only
side effect is the dispatch performed when a trigger is fired.
"""

from __future__ import annotations

import html
import json
import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from statelens.core.state_value import render_state_value
from statelens.core.types import Dispatch, EventSet, EventType, StateValue

logger = logging.getLogger(__name__)

UNINITIALIZED = "(uninitialized)"
NO_EVENTS = "No available events"


def _json_default(value: Any) -> Any:
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=repr)
    return repr(value)


def dump_structure(value: Any) -> str:
    """Pretty, human-readable JSON for arbitrary (nested) data."""
    return json.dumps(value, indent=2, default=_json_default, ensure_ascii=False)


def render_context(context: Optional[Mapping[str, Any]]) -> Optional[str]:
    """Structural dump of the context, or None when there is nothing to show."""
    if not context:
        return None
    return dump_structure(dict(context))


def render_snapshot_dump(snapshot: Any, state_value: Optional[StateValue], context: Optional[Mapping[str, Any]]) -> str:
    """
    Full diagnostic dump. Uses the snapshot's own ``to_dict()`` when it has
    one, so engine metadata is included.
    """
    if snapshot is not None and callable(getattr(snapshot, "to_dict", None)):
        return dump_structure(snapshot.to_dict())
    return dump_structure({"value": state_value, "context": dict(context or {})})


@dataclass(frozen=True)
class Trigger:
    """One actionable event. Firing it dispatches a payload-less event."""

    event_type: EventType
    dispatch: Dispatch

    def fire(self) -> Any:
        logger.debug("Dispatching %s", self.event_type)
        return self.dispatch({"type": self.event_type})


@dataclass(frozen=True)
class VisualizerView:
    """
    The rendered visualizer.

    ``context_text`` is None when the context section is omitted; the
    diagnostic dump is always present and meant to be shown collapsed.
    """

    state_text: str
    triggers: Tuple[Trigger, ...]
    context_text: Optional[str]
    diagnostic_text: str
    diagnostic_collapsed: bool = True

    @property
    def events(self) -> List[EventType]:
        return [t.event_type for t in self.triggers]

    @property
    def has_context(self) -> bool:
        return self.context_text is not None

    def trigger(self, event_type: EventType) -> Trigger:
        """
        Look up the trigger for ``event_type``.

        :raises KeyError: If the event is not available.
        """
        for t in self.triggers:
            if t.event_type == event_type:
                return t
        raise KeyError(event_type)

    def to_text(self) -> str:
        lines = ["Current State", f"  {self.state_text}", "", "Available Events"]
        if self.triggers:
            lines.extend(f"  [{t.event_type}]" for t in self.triggers)
        else:
            lines.append(f"  {NO_EVENTS}")
        if self.context_text is not None:
            lines.extend(["", "Context"])
            lines.extend(f"  {line}" for line in self.context_text.splitlines())
        lines.extend(["", "Full State Object (collapsed)" if self.diagnostic_collapsed else "Full State Object"])
        if not self.diagnostic_collapsed:
            lines.extend(f"  {line}" for line in self.diagnostic_text.splitlines())
        return "\n".join(lines)

    def to_html(self) -> str:
        parts = [
            '<div class="state-visualizer">',
            '<div class="visualizer-section"><h4>Current State</h4>',
            f'<div class="state-badge">{html.escape(self.state_text)}</div></div>',
            '<div class="visualizer-section"><h4>Available Events</h4>',
        ]
        if self.triggers:
            parts.append('<div class="events-grid">')
            for t in self.triggers:
                name = html.escape(t.event_type, quote=True)
                parts.append(f'<button class="event-button" data-event="{name}">{name}</button>')
            parts.append("</div>")
        else:
            parts.append(f'<p class="no-events">{NO_EVENTS}</p>')
        parts.append("</div>")
        if self.context_text is not None:
            parts.append('<div class="visualizer-section"><h4>Context</h4>')
            parts.append(f'<pre class="context-display">{html.escape(self.context_text)}</pre></div>')
        open_attr = "" if self.diagnostic_collapsed else " open"
        parts.append(f'<div class="visualizer-section"><details{open_attr}>')
        parts.append("<summary>View Full State Object</summary>")
        parts.append(f'<pre class="state-display">{html.escape(self.diagnostic_text)}</pre>')
        parts.append("</details></div></div>")
        return "\n".join(parts)


def render_visualizer(
    state_value: Optional[StateValue],
    context: Optional[Mapping[str, Any]],
    events: Iterable[EventType],
    dispatch: Dispatch,
    snapshot: Any = None,
) -> VisualizerView:
    """
    Render state, context and events for any machine.

    :param state_value: Current state value, or None before an instance exists.
    :param context: Current context; an empty or missing context omits the section.
    :param events: Event names to expose as triggers. An EventSet is used as
        is; any other iterable is normalized into one.
    :param dispatch: Called as ``dispatch({"type": name})`` when a trigger fires.
    :param snapshot: Optional full snapshot for the diagnostic dump.
    """
    event_set = events if isinstance(events, EventSet) else EventSet(events)
    return VisualizerView(
        state_text=render_state_value(state_value) if state_value is not None else UNINITIALIZED,
        triggers=tuple(Trigger(name, dispatch) for name in event_set),
        context_text=render_context(context),
        diagnostic_text=render_snapshot_dump(snapshot, state_value, context),
    )
