# statelens/interfaces/protocols.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from typing import Any, Callable, Mapping, Optional, Protocol, runtime_checkable

from statelens.core.types import StateValue


@runtime_checkable
class SnapshotView(Protocol):
    """
    Read-only view of a running machine instance at one point in time.

    Attributes:
        value: The current state value (flat label or nested mapping).
        context: The instance's auxiliary data.

    Runtime Invariants:
    - Consumers never mutate either attribute.
    - Two reads of the same snapshot return equal values.

    Error Handling:
    - Attribute access must not raise. Engines that cannot produce a value
      should not hand out a snapshot at all; callers treat None as
      "uninitialized".
    """

    @property
    def value(self) -> StateValue:
        """The current state value."""
        ...

    @property
    def context(self) -> Mapping[str, Any]:
        """The current context mapping."""
        ...


@runtime_checkable
class VisualizationHandle(Protocol):
    """
    Handle to the external, out-of-process visualization tool.

    Methods:
        start(): Open the external surface. Idempotent.
        disconnect(): Release the connection. Never called by statelens itself.

    Attributes:
        inspect: Observer passed to engine instances, or None when inspection
            is disabled.
        started: Whether ``start()`` has been called.
    """

    inspect: Optional[Callable[[Any], None]]

    @property
    def started(self) -> bool:
        ...

    def start(self) -> None:
        ...

    def disconnect(self) -> None:
        ...
