# gapviz/grammar/__init__.py
"""
plot grammar
============
declarative building blocks combined with `+` into an immutable Plot.
- aes : aesthetic mappings (field -> visual channel)
- layers : geoms (point, line, boxplot, smooth)
- scales : position scales and transforms
- facets : panel partitioning (wrap, grid)
- themes : complete and partial themes
- labels : titles and axis/legend labels
- plot : the Plot specification, ggplot() and the last-plot registry
"""
from .aes import Aes, aes
from .layers import Layer, geom_point, geom_line, geom_boxplot, geom_smooth
from .scales import ContinuousScale, scale_x_continuous, scale_y_continuous, scale_x_log10, scale_y_log10, seq
from .facets import Facet, FacetWrap, FacetGrid, facet_wrap, facet_grid
from .themes import Theme, theme, theme_gray, theme_grey, theme_bw, theme_minimal, theme_classic, theme_cowplot
from .labels import Labels, labs, xlab, ylab, ggtitle
from .plot import Plot, ggplot, last_plot, set_last_plot

__all__ = ["Aes", "aes", "Layer", "geom_point", "geom_line", "geom_boxplot", "geom_smooth", "ContinuousScale", "scale_x_continuous", "scale_y_continuous", "scale_x_log10", "scale_y_log10", "seq", "Facet", "FacetWrap", "FacetGrid", "facet_wrap", "facet_grid", "Theme", "theme", "theme_gray", "theme_grey", "theme_bw", "theme_minimal", "theme_classic", "theme_cowplot", "Labels", "labs", "xlab", "ylab", "ggtitle", "Plot", "ggplot", "last_plot", "set_last_plot"]
