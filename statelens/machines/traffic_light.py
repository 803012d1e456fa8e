# statelens/machines/traffic_light.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
"""
A traffic light that cycles green -> yellow -> red -> green on NEXT.
"""

from statelens.core.definitions import create_machine

traffic_light_machine = create_machine(
    {
        "id": "trafficLight",
        "initial": "green",
        "states": {
            "green": {"on": {"NEXT": "yellow"}},
            "yellow": {"on": {"NEXT": "red"}},
            "red": {"on": {"NEXT": "green"}},
        },
    },
    strict=True,
)
