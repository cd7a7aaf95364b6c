"""Built-in analysis plugins."""

from .heatmap import HeatmapPlugin
from .hottest_pc import HottestPcPlugin
from .jumps import JumpTablePlugin

__all__ = ["HeatmapPlugin", "HottestPcPlugin", "JumpTablePlugin"]
