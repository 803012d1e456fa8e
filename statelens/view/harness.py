# statelens/view/harness.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import html
from dataclasses import dataclass
from typing import Any, Optional

from statelens.core.introspection import TransitionEnumerator, available_events
from statelens.core.types import Dispatch
from statelens.interfaces.protocols import SnapshotView
from statelens.view.visualizer import VisualizerView, render_visualizer


@dataclass(frozen=True)
class DemoView:
    """A rendered demo: optional heading and text around the visualizer."""

    visualizer: VisualizerView
    title: Optional[str] = None
    description: Optional[str] = None
    machine_code: Optional[str] = None

    def to_text(self) -> str:
        blocks = []
        if self.title:
            blocks.append(f"{self.title}\n{'=' * len(self.title)}")
        if self.description:
            blocks.append(self.description)
        blocks.append(self.visualizer.to_text())
        if self.machine_code:
            blocks.append("Machine Definition\n" + "\n".join(f"  {line}" for line in self.machine_code.splitlines()))
        return "\n\n".join(blocks)

    def to_html(self) -> str:
        parts = ['<div class="machine-demo">']
        if self.title:
            parts.append(f"<h2>{html.escape(self.title)}</h2>")
        if self.description:
            parts.append(f'<p class="demo-description">{html.escape(self.description)}</p>')
        parts.append(self.visualizer.to_html())
        if self.machine_code:
            parts.append('<div class="machine-code-section"><h3>Machine Definition</h3>')
            parts.append(f'<pre class="code-block">{html.escape(self.machine_code)}</pre></div>')
        parts.append("</div>")
        return "\n".join(parts)


class MachineDemo:
    """
    Demonstrates any running machine: computes the available events from the
    snapshot and renders them with the generic visualizer, wrapped in an
    optional title, description and machine definition text. There is no
    machine-specific branching.
    """

    def __init__(
        self,
        snapshot: Optional[SnapshotView],
        dispatch: Dispatch,
        title: Optional[str] = None,
        description: Optional[str] = None,
        machine_code: Optional[str] = None,
        transitions_of: Optional[TransitionEnumerator] = None,
    ) -> None:
        """
        :param snapshot: Current snapshot, or None before an instance exists.
        :param dispatch: The instance's dispatch function.
        :param title: Optional heading.
        :param description: Optional explanatory text.
        :param machine_code: Optional literal text of the machine definition.
        :param transitions_of: Engine transition query; the bundled runtime's by default.
        """
        self._snapshot = snapshot
        self._dispatch = dispatch
        self._title = title
        self._description = description
        self._machine_code = machine_code
        self._transitions_of = transitions_of

    def render(self) -> DemoView:
        snapshot = self._snapshot
        events = available_events(snapshot, self._transitions_of)
        value: Any = getattr(snapshot, "value", None)
        context: Any = getattr(snapshot, "context", None)
        return DemoView(
            visualizer=render_visualizer(value, context, events, self._dispatch, snapshot=snapshot),
            title=self._title,
            description=self._description,
            machine_code=self._machine_code,
        )


def render_demo(
    snapshot: Optional[SnapshotView],
    dispatch: Dispatch,
    title: Optional[str] = None,
    description: Optional[str] = None,
    machine_code: Optional[str] = None,
) -> DemoView:
    """Shortcut for ``MachineDemo(...).render()``."""
    return MachineDemo(snapshot, dispatch, title, description, machine_code).render()
