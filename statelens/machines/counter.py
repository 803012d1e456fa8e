# statelens/machines/counter.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
"""
A counter that keeps its value in context. Its events only run actions, so
the state value never changes.
"""

from statelens.core.definitions import create_machine
from statelens.runtime.interpreter import assign

increment = assign(count=lambda context, event: context["count"] + 1)
decrement = assign(count=lambda context, event: context["count"] - 1)
reset = assign(count=0)

counter_machine = create_machine(
    {
        "id": "counter",
        "initial": "active",
        "context": {"count": 0},
        "states": {
            "active": {
                "on": {
                    "INCREMENT": {"actions": "increment"},
                    "DECREMENT": {"actions": "decrement"},
                    "RESET": {"actions": "reset"},
                }
            }
        },
    },
    actions={"increment": increment, "decrement": decrement, "reset": reset},
    strict=True,
)
