"""
Core package: the machine-agnostic data model, definitions and introspection.

Architecture:
- Defines state values, transitions, event matchers and event sets
- Builds immutable machine definitions from configuration mappings
- Derives the externally triggerable events of a running snapshot

Design Patterns:
- Builder Pattern for machine definitions
- Value Object Pattern for transitions and event sets
- Tagged union (Named | Wildcard) for event matching

Cross-cutting:
- Errors rooted in StateLensError
- Logging through module-level loggers, no handlers installed
"""

from .errors import ConfigurationError, DefinitionError, StateLensError, TransitionError
from .types import WILDCARD, EventSet, Named, Transition, Wildcard, parse_event_matcher
from .definitions import MachineDefinition, StateNode, create_machine, validate_definition
from .introspection import available_events, event_set_from_transitions

__all__ = [
    # Errors
    "StateLensError",
    "DefinitionError",
    "TransitionError",
    "ConfigurationError",
    # Data model
    "WILDCARD",
    "EventSet",
    "Named",
    "Wildcard",
    "Transition",
    "parse_event_matcher",
    # Definitions
    "MachineDefinition",
    "StateNode",
    "create_machine",
    "validate_definition",
    # Introspection
    "available_events",
    "event_set_from_transitions",
]
