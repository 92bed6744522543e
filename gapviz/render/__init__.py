# gapviz/render/__init__.py
"""
rendering
=========
turns plot specifications into matplotlib figures and files.
- resolve : binds a plot to its data, checks fields and channels, groups and facets
- palettes : colour/shape/size/alpha scales trained across layers
- stats : smoothing and boxplot statistics
- layout : normalized rectangles and plot regions
- renderer : drawing, render() and show()
- export : ggsave()
"""
from .layout import Rect
from .resolve import ResolvedPlot, resolve_plot
from .stats import smooth_lm, boxplot_stats
from .renderer import PanelSet, draw_plot_into, draw_into, render, show, panel_axes
from .export import ggsave

__all__ = ["Rect", "ResolvedPlot", "resolve_plot", "smooth_lm", "boxplot_stats", "PanelSet", "draw_plot_into", "draw_into", "render", "show", "panel_axes", "ggsave"]
