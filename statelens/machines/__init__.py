"""
Example machine definitions and the catalog that presents them.
"""

from .counter import counter_machine
from .toggle import toggle_machine
from .traffic_light import traffic_light_machine
from .catalog import MACHINES, MachineEntry, get_machine

__all__ = [
    "counter_machine",
    "toggle_machine",
    "traffic_light_machine",
    "MACHINES",
    "MachineEntry",
    "get_machine",
]
