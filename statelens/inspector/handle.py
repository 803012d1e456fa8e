# statelens/inspector/handle.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
"""
Process-wide handle to the external inspector.

The handle is resolved once per process: a ``RealHandle`` in development
mode, a ``NoOpHandle`` otherwise. ``start()`` opens the external surface and
may be called any number of times. There is no stop operation;
the user closes the surface, and the handle does not track that.
"""

import logging
import threading
import webbrowser
from collections import deque
from typing import Callable, Deque, List, Optional

from statelens.inspector.config import EnvironmentMode, InspectorConfig, load_inspector_config, resolve_environment_mode
from statelens.interfaces.protocols import VisualizationHandle
from statelens.runtime.snapshot import InspectionEvent

logger = logging.getLogger(__name__)

Opener = Callable[[str], object]


class RealHandle:
    """
    Development handle. Buffers inspection events for the external tool and
    opens its surface on ``start()``.

    A browser that fails to open (for example, a blocked popup) is not
    detected or reported.
    """

    def __init__(self, config: Optional[InspectorConfig] = None, opener: Opener = webbrowser.open) -> None:
        """
        :param config: Inspector options; ``auto_start`` defaults to False.
        :param opener: Function opening a URL; the system web browser by default.
        """
        self._config = config or InspectorConfig()
        self._opener = opener
        self._started = False
        self._events: Deque[InspectionEvent] = deque(maxlen=self._config.buffer_size)
        if self._config.auto_start:
            self.start()

    @property
    def config(self) -> InspectorConfig:
        return self._config

    @property
    def started(self) -> bool:
        return self._started

    @property
    def events(self) -> List[InspectionEvent]:
        """Most recent inspection events, oldest first."""
        return list(self._events)

    def inspect(self, event: InspectionEvent) -> None:
        """Observer handed to engine instances."""
        self._events.append(event)
        logger.debug("Inspection %s from %s", event.kind.name, event.actor_id)

    def start(self) -> None:
        if self._started:
            logger.debug("Inspector already started")
            return
        self._started = True
        logger.info("Opening inspector at %s", self._config.url)
        self._opener(self._config.url)

    def disconnect(self) -> None:
        """Drop buffered events. Not used by statelens itself."""
        self._events.clear()


class NoOpHandle:
    """Stand-in used outside development mode. Every operation does nothing."""

    inspect = None

    @property
    def started(self) -> bool:
        return False

    def start(self) -> None:
        pass

    def disconnect(self) -> None:
        pass


def create_inspector(
    mode: EnvironmentMode,
    config: Optional[InspectorConfig] = None,
    opener: Opener = webbrowser.open,
) -> VisualizationHandle:
    """Select the handle implementation for ``mode``."""
    if mode is EnvironmentMode.DEVELOPMENT:
        return RealHandle(config, opener=opener)
    return NoOpHandle()


_inspector: Optional[VisualizationHandle] = None
_inspector_lock = threading.Lock()


def configure_inspector(
    mode: EnvironmentMode,
    config: Optional[InspectorConfig] = None,
    opener: Opener = webbrowser.open,
) -> VisualizationHandle:
    """
    Resolve the process-wide handle explicitly, typically at process start.
    Replaces any handle created earlier.
    """
    global _inspector
    handle = create_inspector(mode, config, opener=opener)
    with _inspector_lock:
        _inspector = handle
    logger.debug("Inspector configured for %s mode", mode.name.lower())
    return handle


def get_inspector() -> VisualizationHandle:
    """Return the process-wide handle, creating it from the environment on first use."""
    global _inspector
    with _inspector_lock:
        if _inspector is None:
            _inspector = create_inspector(resolve_environment_mode(), load_inspector_config())
        return _inspector


def reset_inspector() -> None:
    """Forget the process-wide handle so the next access resolves it again."""
    global _inspector
    with _inspector_lock:
        _inspector = None


def open_inspector() -> None:
    """Page-level trigger: start the process-wide inspector."""
    get_inspector().start()
