# gapviz/__init__.py
"""
gapviz
======
layered plots of tabular data, composed with `+`.
- data : dataset loading and summaries
- grammar : aesthetics, layers, scales, facets, themes, labels, Plot
- render : matplotlib rendering and ggsave export
- compose : plot_grid and free canvas layouts
- interactive : plotly conversion and html export
- pipelines : the gapminder workshop runner
"""
from .errors import DatasetParseError, PlotError, UnresolvedFieldError, RenderError, ExportError
from .data import load_dataset, check_dataset_schema, summarize_dataset
from .grammar import (
    aes, ggplot, last_plot,
    geom_point, geom_line, geom_boxplot, geom_smooth,
    scale_x_continuous, scale_y_continuous, scale_x_log10, scale_y_log10, seq,
    facet_wrap, facet_grid,
    theme, theme_gray, theme_grey, theme_bw, theme_minimal, theme_classic, theme_cowplot,
    labs, xlab, ylab, ggtitle,
)
from .render import render, show, ggsave
from .compose import ggdraw, draw_plot, draw_label, plot_grid
from .interactive import ggplotly, interactive_mappings, save_html

__version__ = "0.1.0"

__all__ = [
    "DatasetParseError", "PlotError", "UnresolvedFieldError", "RenderError", "ExportError",
    "load_dataset", "check_dataset_schema", "summarize_dataset",
    "aes", "ggplot", "last_plot",
    "geom_point", "geom_line", "geom_boxplot", "geom_smooth",
    "scale_x_continuous", "scale_y_continuous", "scale_x_log10", "scale_y_log10", "seq",
    "facet_wrap", "facet_grid",
    "theme", "theme_gray", "theme_grey", "theme_bw", "theme_minimal", "theme_classic", "theme_cowplot",
    "labs", "xlab", "ylab", "ggtitle",
    "render", "show", "ggsave",
    "ggdraw", "draw_plot", "draw_label", "plot_grid",
    "ggplotly", "interactive_mappings", "save_html",
]
