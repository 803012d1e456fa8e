# statelens/core/errors.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details


class StateLensError(Exception):
    """
    Base exception class for errors raised by the statelens library.
    """


class DefinitionError(StateLensError):
    """
    Raised when a machine definition is malformed, or when a transition refers
    to a state that cannot be resolved at dispatch time.
    """


class TransitionError(StateLensError):
    """
    Raised when an action fails while a transition is being taken.
    """


class ConfigurationError(StateLensError):
    """
    Raised when explicit configuration values (environment mode, inspector
    settings) cannot be interpreted.
    """
