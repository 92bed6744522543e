"""
Composite figures on a normalized 0..1 canvas.
- plot_grid : automatic grid of plots with optional panel labels
- ggdraw + draw_plot/draw_label : explicit placement of plots and text
Every placed plot is drawn on its own, keeping its scales and theme.
"""

import math
import string
from dataclasses import dataclass, replace
from functools import reduce
from typing import Optional, Sequence, Union
from matplotlib import transforms
from gapviz.grammar import Plot, set_last_plot
from gapviz.render.layout import Rect, UNIT
from gapviz.render.renderer import draw_into


#########################################
##             COMPONENTS              ##
#########################################

@dataclass(frozen=True, eq=False)
class Placement:
    content: object        # Plot or Canvas
    rect: Rect
    label: Optional[str] = None
    label_size: float = 14


@dataclass(frozen=True)
class TextLabel:
    text: str
    x: float = 0.5
    y: float = 0.5
    size: float = 14
    hjust: float = 0.5
    vjust: float = 0.5
    fontface: str = "plain"


def draw_plot(plot, x: float = 0.0, y: float = 0.0, width: float = 1.0, height: float = 1.0) -> Placement:
    """Place `plot` (or a nested canvas) at (x, y) with the given size, in canvas units."""
    if not isinstance(plot, (Plot, Canvas)):
        raise TypeError(f"[ERROR] draw_plot expects a Plot or Canvas, got {type(plot).__name__}")
    return Placement(plot, Rect(x, y, width, height))

def draw_label(text: str, x: float = 0.5, y: float = 0.5, size: float = 14, hjust: float = 0.5, vjust: float = 0.5, fontface: str = "plain") -> TextLabel:
    if fontface not in ("plain", "bold", "italic"):
        raise ValueError(f"[ERROR] fontface must be plain, bold or italic, got {fontface!r}")
    if not (0.0 <= x <= 1.0 and 0.0 <= y <= 1.0):
        raise ValueError(f"[ERROR] Label position ({x}, {y}) is outside the normalized canvas [0, 1]")
    return TextLabel(text, x, y, size, hjust, vjust, fontface)


#########################################
##                CANVAS               ##
#########################################

@dataclass(frozen=True, eq=False)
class Canvas:
    placements: tuple = ()
    texts: tuple = ()

    def _extend(self, component) -> "Canvas":
        if isinstance(component, Placement):
            return replace(self, placements=self.placements + (component,))
        if isinstance(component, TextLabel):
            return replace(self, texts=self.texts + (component,))
        raise TypeError(f"[ERROR] Cannot add {type(component).__name__} to a canvas")

    def __add__(self, other) -> "Canvas":
        if isinstance(other, (list, tuple)):
            new = reduce(Canvas._extend, other, self)
        else:
            new = self._extend(other)
        return set_last_plot(new)

    def __len__(self) -> int:
        return len(self.placements)

    @property
    def labels(self) -> list:
        return [p.label for p in self.placements]

    def overlapping_pairs(self) -> list:
        """Index pairs of placements whose rectangles share area."""
        pairs = []
        for i, a in enumerate(self.placements):
            for j in range(i + 1, len(self.placements)):
                if a.rect.overlaps(self.placements[j].rect):
                    pairs.append((i, j))
        return pairs

    def draw_into(self, fig, rect: Rect = UNIT) -> list:
        """Draws every placement inside `rect`; returns the PanelSets in placement order."""
        drawn = []
        for placement in self.placements:
            target = placement.rect.within(rect)
            drawn.append(draw_into(placement.content, fig, target))
            if placement.label:
                offset = transforms.offset_copy(fig.transFigure, fig=fig, x=4, y=-4, units="points")
                fig.text(
                    target.x, target.top, placement.label,
                    ha="left", va="top",
                    fontsize=placement.label_size,
                    fontweight="bold",
                    transform=offset,
                )
        for label in self.texts:
            fig.text(
                rect.x + label.x * rect.width,
                rect.y + label.y * rect.height,
                label.text,
                ha={0.0: "left", 0.5: "center", 1.0: "right"}.get(label.hjust, "center"),
                va={0.0: "bottom", 0.5: "center", 1.0: "top"}.get(label.vjust, "center"),
                fontsize=label.size,
                fontweight="bold" if label.fontface == "bold" else "normal",
                fontstyle="italic" if label.fontface == "italic" else "normal",
            )
        return drawn


def ggdraw(plot=None) -> Canvas:
    """Empty canvas, or a canvas holding `plot` at full size."""
    canvas = Canvas()
    if plot is not None:
        canvas = canvas._extend(draw_plot(plot))
    return set_last_plot(canvas)


#########################################
##                 GRID                ##
#########################################

def _grid_labels(labels: Union[str, Sequence[str], None], n: int) -> list:
    if labels is None:
        return [None] * n
    if isinstance(labels, str):
        if labels == "AUTO":
            return list(string.ascii_uppercase[:n])
        if labels == "auto":
            return list(string.ascii_lowercase[:n])
        raise ValueError(f"[ERROR] labels must be 'AUTO', 'auto' or a list, got {labels!r}")
    labels = list(labels)
    if len(labels) != n:
        raise ValueError(f"[ERROR] Got {len(labels)} labels for {n} plots")
    return labels

def _relative(sizes: Optional[Sequence[float]], n: int, name: str) -> list:
    if sizes is None:
        return [1.0] * n
    sizes = list(sizes)
    if len(sizes) != n or any(s <= 0 for s in sizes):
        raise ValueError(f"[ERROR] {name} needs {n} positive values, got {sizes}")
    return sizes

def plot_grid(
        *plots,
        labels: Union[str, Sequence[str], None] = None,
        ncol: Optional[int] = None,
        nrow: Optional[int] = None,
        rel_widths: Optional[Sequence[float]] = None,
        rel_heights: Optional[Sequence[float]] = None,
        label_size: float = 14,
        byrow: bool = True,
    ) -> Canvas:
    """
    Arranges plots in a grid, filled left-to-right then top-to-bottom
    (column-wise with byrow=False). Without ncol/nrow the grid is
    ceil(sqrt(n)) columns wide. None entries leave a cell empty.
    """
    if len(plots) == 1 and isinstance(plots[0], (list, tuple)):
        plots = tuple(plots[0])
    n = len(plots)
    if n == 0:
        raise ValueError("[ERROR] plot_grid needs at least one plot")

    if ncol is None and nrow is None:
        ncol = math.ceil(math.sqrt(n))
        nrow = math.ceil(n / ncol)
    elif ncol is None:
        ncol = math.ceil(n / nrow)
    elif nrow is None:
        nrow = math.ceil(n / ncol)
    if nrow * ncol < n:
        raise ValueError(f"[ERROR] {nrow} x {ncol} grid cannot hold {n} plots")

    names = _grid_labels(labels, n)
    widths = _relative(rel_widths, ncol, "rel_widths")
    heights = _relative(rel_heights, nrow, "rel_heights")
    total_w, total_h = sum(widths), sum(heights)

    canvas = Canvas()
    for i, plot in enumerate(plots):
        if plot is None:
            continue
        r, c = (i // ncol, i % ncol) if byrow else (i % nrow, i // nrow)
        x = sum(widths[:c]) / total_w
        w = widths[c] / total_w
        top = 1.0 - sum(heights[:r]) / total_h
        h = heights[r] / total_h
        placement = draw_plot(plot, x, max(0.0, top - h), w, h)
        canvas = canvas._extend(replace(placement, label=names[i], label_size=label_size))

    return set_last_plot(canvas)
