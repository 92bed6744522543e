# gapviz/compose/__init__.py
"""
composite figures
=================
- canvas : plot_grid (labelled grids), ggdraw/draw_plot/draw_label (free placement on a 0..1 canvas)
"""
from .canvas import Canvas, Placement, TextLabel, ggdraw, draw_plot, draw_label, plot_grid

__all__ = ["Canvas", "Placement", "TextLabel", "ggdraw", "draw_plot", "draw_label", "plot_grid"]
