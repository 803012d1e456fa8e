# statelens/machines/toggle.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
"""
A simple toggle machine that switches between "inactive" and "active".
The most basic state machine pattern: two states and one event.
"""

from statelens.core.definitions import create_machine

toggle_machine = create_machine(
    {
        "id": "toggle",
        "initial": "inactive",
        "states": {
            "inactive": {"on": {"TOGGLE": "active"}},
            "active": {"on": {"TOGGLE": "inactive"}},
        },
    },
    strict=True,
)
