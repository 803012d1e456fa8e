# statelens/core/state_value.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
"""
Helpers for flat and hierarchical state values.

A state value is either a flat label (``"green"``) or a nested mapping from a
parent state key to its child value (``{"walk": "countdown"}``).
"""

import json
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from statelens.core.types import StateValue


def is_flat(value: StateValue) -> bool:
    """Return True if the value is a single label."""
    return isinstance(value, str)


def normalize(value: Any) -> StateValue:
    """
    Return a detached plain copy of a state value.

    :raises ValueError: If the value is neither a string nor a mapping of
        string keys to state values.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        result: Dict[str, StateValue] = {}
        for key, child in value.items():
            if not isinstance(key, str):
                raise ValueError(f"State value keys must be strings, got {key!r}")
            result[key] = normalize(child)
        return result
    raise ValueError(f"Invalid state value: {value!r}")


def to_paths(value: StateValue) -> List[Tuple[str, ...]]:
    """
    List the active leaf paths of a state value.

    ``{"walk": "countdown"}`` yields ``[("walk", "countdown")]``.
    """
    if isinstance(value, str):
        return [(value,)]
    paths: List[Tuple[str, ...]] = []
    for key, child in value.items():
        child_paths = to_paths(child)
        if not child_paths:
            paths.append((key,))
        for path in child_paths:
            paths.append((key,) + path)
    return paths


def from_path(path: Sequence[str]) -> StateValue:
    """Build a state value from a single root-to-leaf path of state keys."""
    if not path:
        raise ValueError("State path must not be empty")
    value: StateValue = path[-1]
    for key in reversed(path[:-1]):
        value = {key: value}
    return value


def matches_state(parent: StateValue, child: StateValue) -> bool:
    """
    Return True if ``child`` is the same as, or nested within, ``parent``.

    ``matches_state("walk", {"walk": "countdown"})`` is True.
    """
    parent_paths = to_paths(normalize(parent))
    child_paths = to_paths(normalize(child))
    return all(any(path[: len(p)] == p for path in child_paths) for p in parent_paths)


def render_state_value(value: StateValue) -> str:
    """
    Canonical text for a state value: the label verbatim when flat, otherwise
    compact JSON with sorted keys.
    """
    if isinstance(value, str):
        return value
    return json.dumps(normalize(value), sort_keys=True, separators=(",", ":"))
