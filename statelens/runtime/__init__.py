"""
Runtime package: a run-to-completion interpreter for machine definitions.

Architecture:
- Runs definitions as actors that accept events and publish snapshots
- Answers the transition-enumeration query used by introspection
- Reports actor, event and snapshot records to an optional inspector

Cross-cutting:
- Per-actor lock; events queued during processing run afterwards
- Guard and action failures raised as TransitionError
"""

from .snapshot import InspectionEvent, InspectionKind, Snapshot
from .interpreter import Actor, assign, create_instance, get_next_transitions, interpret, select_transition, to_event

__all__ = [
    "Actor",
    "InspectionEvent",
    "InspectionKind",
    "Snapshot",
    "assign",
    "create_instance",
    "get_next_transitions",
    "interpret",
    "select_transition",
    "to_event",
]
