"""
View package: the generic visualizer and the demo harness built on it.
"""

from .visualizer import Trigger, VisualizerView, render_visualizer
from .harness import DemoView, MachineDemo, render_demo

__all__ = ["Trigger", "VisualizerView", "render_visualizer", "DemoView", "MachineDemo", "render_demo"]
