"""
Inspector package: the process-wide handle to the external visualization tool.
"""

from .config import EnvironmentMode, InspectorConfig, load_inspector_config, resolve_environment_mode
from .handle import (
    NoOpHandle,
    RealHandle,
    configure_inspector,
    create_inspector,
    get_inspector,
    open_inspector,
    reset_inspector,
)

__all__ = [
    "EnvironmentMode",
    "InspectorConfig",
    "load_inspector_config",
    "resolve_environment_mode",
    "NoOpHandle",
    "RealHandle",
    "configure_inspector",
    "create_inspector",
    "get_inspector",
    "open_inspector",
    "reset_inspector",
]
