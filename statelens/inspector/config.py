# statelens/inspector/config.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import logging
import os
from dataclasses import dataclass
from enum import Enum, auto
from typing import Mapping, Optional

from statelens.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

ENV_MODE_VAR = "STATELENS_ENV"
ENV_URL_VAR = "STATELENS_INSPECTOR_URL"
DEFAULT_INSPECTOR_URL = "https://stately.ai/inspector"
DEFAULT_BUFFER_SIZE = 1000


class EnvironmentMode(Enum):
    """
    Whether the process runs as a development build. Only development builds
    get a real inspector handle.
    """

    DEVELOPMENT = auto()
    PRODUCTION = auto()


_MODE_NAMES = {
    "development": EnvironmentMode.DEVELOPMENT,
    "dev": EnvironmentMode.DEVELOPMENT,
    "production": EnvironmentMode.PRODUCTION,
    "prod": EnvironmentMode.PRODUCTION,
}


@dataclass(frozen=True)
class InspectorConfig:
    """
    Options for the real inspector handle.

    :param auto_start: Open the inspector as soon as the handle is created.
    :param url: Address of the external inspector surface.
    :param buffer_size: Number of recent inspection events kept for the tool.
    """

    auto_start: bool = False
    url: str = DEFAULT_INSPECTOR_URL
    buffer_size: int = DEFAULT_BUFFER_SIZE

    def __post_init__(self) -> None:
        if not self.url:
            raise ConfigurationError("Inspector URL must not be empty")
        if self.buffer_size < 0:
            raise ConfigurationError("Inspector buffer size must be non-negative")


def parse_environment_mode(name: str) -> EnvironmentMode:
    """
    Parse a mode name such as ``"development"`` or ``"prod"``.

    :raises ConfigurationError: If the name is not recognized.
    """
    try:
        return _MODE_NAMES[name.strip().lower()]
    except KeyError:
        raise ConfigurationError(f"Unknown environment mode '{name}'")


def resolve_environment_mode(environ: Optional[Mapping[str, str]] = None) -> EnvironmentMode:
    """
    Read the environment mode from ``STATELENS_ENV``. Missing or unrecognized
    values fall back to production.
    """
    environ = os.environ if environ is None else environ
    raw = environ.get(ENV_MODE_VAR)
    if not raw:
        return EnvironmentMode.PRODUCTION
    try:
        return parse_environment_mode(raw)
    except ConfigurationError:
        logger.warning("Ignoring %s=%r; falling back to production mode", ENV_MODE_VAR, raw)
        return EnvironmentMode.PRODUCTION


def load_inspector_config(environ: Optional[Mapping[str, str]] = None) -> InspectorConfig:
    """Build the inspector configuration, honouring ``STATELENS_INSPECTOR_URL``."""
    environ = os.environ if environ is None else environ
    url = environ.get(ENV_URL_VAR) or DEFAULT_INSPECTOR_URL
    return InspectorConfig(auto_start=False, url=url)
