import warnings
from dataclasses import dataclass, field
from typing import Optional
import numpy as np
import pandas as pd
import matplotlib as mpl
import matplotlib.pyplot as plt
from matplotlib import transforms
from matplotlib.cm import ScalarMappable
from matplotlib.lines import Line2D
from matplotlib.patches import Patch
from matplotlib.ticker import NullLocator
from gapviz import config
from gapviz.errors import RenderError
from gapviz.grammar import Plot, FacetGrid
from .layout import Rect, UNIT, plot_regions
from .palettes import DEFAULT_COLORS, GRADIENT, PT, AestheticMaps, ContinuousMap, train_aesthetics
from .resolve import ResolvedLayer, ResolvedPlot, resolve_plot, unknown_aesthetics
from .stats import boxplot_stats, smooth_lm


#########################################
##                PARAMS               ##
#########################################

DEFAULT_POINT_SIZE = 1.5    # mm
DEFAULT_LINEWIDTH = {"line": 0.5, "smooth": 1.0, "boxplot": 0.5}    # mm
SMOOTH_BAND = {"color": "#999999", "alpha": 0.4}

# a few numeric point shapes
SHAPE_CODES = {0: "s", 1: "o", 2: "^", 3: "+", 4: "x", 8: "*", 15: "s", 16: "o", 17: "^", 18: "D", 19: "o", 20: "."}

PANEL_PREFIX = "panel"


#########################################
##              CONTAINERS             ##
#########################################

@dataclass
class PanelSet:
    """Axes drawn for one plot, in facet order."""
    resolved: ResolvedPlot
    axes: list
    legends: list = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.axes)

    @property
    def labels(self) -> list:
        return [self.resolved.panel_label(i) for i in range(len(self.axes))]


@dataclass
class LegendSpec:
    title: str
    handles: list = field(default_factory=list)
    labels: list = field(default_factory=list)
    colorbar: Optional[ContinuousMap] = None


@dataclass
class _Context:
    plot: Plot
    resolved: ResolvedPlot
    maps: AestheticMaps

    def xpos(self, sub: pd.DataFrame) -> np.ndarray:
        return self._pos(sub, "x")

    def ypos(self, sub: pd.DataFrame) -> np.ndarray:
        return self._pos(sub, "y")

    def _pos(self, sub: pd.DataFrame, ch: str) -> np.ndarray:
        panel = int(sub["PANEL"].iloc[0]) if len(sub) else None
        levels = self.resolved.levels_for(ch, panel)
        if levels is None:
            return sub[ch].to_numpy(dtype=float)
        index = {v: i for i, v in enumerate(levels)}
        return np.array([index[v] for v in sub[ch]], dtype=float)


#########################################
##         PER-ROW AESTHETICS          ##
#########################################

def _values(ctx: _Context, rl: ResolvedLayer, sub: pd.DataFrame, channel: str, default):
    """Mapped values (array) if the channel is mapped, else the fixed parameter or default (scalar)."""
    if channel in sub.columns and ctx.maps.get(channel) is not None:
        return ctx.maps.lookup(channel, sub[channel])
    return rl.layer.params.get(channel, default)

def _marker(shape) -> str:
    if isinstance(shape, (int, np.integer)):
        return SHAPE_CODES.get(int(shape), "o")
    return shape

def _first(value):
    if isinstance(value, np.ndarray):
        return value[0] if len(value) else None
    return value


#########################################
##                GEOMS                ##
#########################################

def _draw_points(ax, sub: pd.DataFrame, rl: ResolvedLayer, ctx: _Context, z: float):
    x, y = ctx.xpos(sub), ctx.ypos(sub)
    colors = _values(ctx, rl, sub, "color", DEFAULT_COLORS["point"])
    sizes = _values(ctx, rl, sub, "size", DEFAULT_POINT_SIZE)
    alphas = _values(ctx, rl, sub, "alpha", 1.0)
    shapes = _values(ctx, rl, sub, "shape", "o")

    n = len(sub)
    colors = np.broadcast_to(np.asarray(colors, dtype=object), (n,))
    sizes = np.broadcast_to(np.asarray(sizes, dtype=float), (n,))
    alphas = np.broadcast_to(np.asarray(alphas, dtype=float), (n,))
    shapes = np.broadcast_to(np.asarray(shapes, dtype=object), (n,))

    for marker in dict.fromkeys(shapes):
        m = shapes == marker
        ax.scatter(
            x[m], y[m],
            c=list(colors[m]),
            s=(sizes[m] * PT) ** 2,
            alpha=alphas[m] if len(set(alphas[m])) > 1 else float(alphas[m][0]),
            marker=_marker(marker),
            linewidths=0,
            zorder=z,
        )

def _draw_lines(ax, sub: pd.DataFrame, rl: ResolvedLayer, ctx: _Context, z: float):
    lw = rl.layer.params.get("linewidth", DEFAULT_LINEWIDTH["line"]) * PT
    for _, grp in sub.groupby("GROUP", sort=True):
        grp = grp.sort_values("x", kind="mergesort")
        ax.plot(
            ctx.xpos(grp), ctx.ypos(grp),
            color=_first(_values(ctx, rl, grp, "color", DEFAULT_COLORS["line"])),
            alpha=_first(_values(ctx, rl, grp, "alpha", 1.0)),
            linewidth=lw,
            linestyle=rl.layer.params.get("linetype", "-"),
            zorder=z,
        )

def _draw_smooth(ax, sub: pd.DataFrame, rl: ResolvedLayer, ctx: _Context, z: float):
    if ctx.resolved.x_levels is not None:
        raise RenderError("[ERROR] geom_smooth needs a continuous x")
    xs, ys = ctx.plot.scale_for("x"), ctx.plot.scale_for("y")
    stat = rl.layer.stat
    lw = rl.layer.params.get("linewidth", DEFAULT_LINEWIDTH["smooth"]) * PT
    fill = rl.layer.params.get("fill", SMOOTH_BAND["color"])
    band_alpha = rl.layer.params.get("alpha", SMOOTH_BAND["alpha"])

    for _, grp in sub.groupby("GROUP", sort=True):
        fit = smooth_lm(
            xs.transform(grp["x"]), ys.transform(grp["y"]),
            n=stat["n"], se=stat["se"], level=stat["level"],
        )
        if fit.empty:
            continue
        fx = xs.inverse(fit["x"])
        color = _first(_values(ctx, rl, grp, "color", DEFAULT_COLORS["smooth"]))
        if stat["se"] and fit["ymin"].notna().all():
            ax.fill_between(fx, ys.inverse(fit["ymin"]), ys.inverse(fit["ymax"]), color=fill, alpha=band_alpha, linewidth=0, zorder=z)
        ax.plot(fx, ys.inverse(fit["y"]), color=color, linewidth=lw, zorder=z + 0.01)

def _draw_boxplot(ax, sub: pd.DataFrame, rl: ResolvedLayer, ctx: _Context, z: float):
    ys = ctx.plot.scale_for("y")
    stat = rl.layer.stat
    width = stat["width"]
    lw = rl.layer.params.get("linewidth", DEFAULT_LINEWIDTH["boxplot"]) * PT

    sub = sub.assign(_pos=ctx.xpos(sub) if "x" in sub.columns else 0.0)
    for pos, at_x in sub.groupby("_pos", sort=True):
        groups = sorted(at_x["GROUP"].unique())
        dodge = width / len(groups)
        for k, g in enumerate(groups):
            grp = at_x[at_x["GROUP"] == g]
            box = boxplot_stats(ys.transform(grp["y"]), coef=stat["coef"])
            for key in ("med", "q1", "q3", "whislo", "whishi"):
                box[key] = float(ys.inverse([box[key]])[0])
            box["fliers"] = ys.inverse(box["fliers"])
            center = pos - width / 2 + dodge * (k + 0.5)

            edge = _first(_values(ctx, rl, grp, "color", DEFAULT_COLORS["boxplot"]))
            face = _first(_values(ctx, rl, grp, "fill", "white"))
            outlier = stat["outlier_color"] or edge
            ax.bxp(
                [box],
                positions=[center],
                widths=[dodge * 0.9],
                patch_artist=True,
                manage_ticks=False,
                boxprops={"facecolor": face, "edgecolor": edge, "linewidth": lw, "alpha": rl.layer.params.get("alpha", 1.0)},
                medianprops={"color": edge, "linewidth": lw * 2},
                whiskerprops={"color": edge, "linewidth": lw},
                capprops={"linewidth": 0},
                flierprops={
                    "marker": stat["outlier_shape"],
                    "markerfacecolor": outlier,
                    "markeredgecolor": outlier,
                    "markersize": stat["outlier_size"] * PT,
                    "linestyle": "none",
                },
                zorder=z,
            )

GEOM_DRAWERS = {
    "point": _draw_points,
    "line": _draw_lines,
    "smooth": _draw_smooth,
    "boxplot": _draw_boxplot,
}


#########################################
##               STYLING               ##
#########################################

def style_axes(ax, theme):
    """Applies theme decorations explicitly; ticks created lazily would miss an rc_context."""
    ax.set_facecolor(theme.value("axes.facecolor"))
    if theme.get("panel_grid"):
        ax.grid(
            True,
            which="major",
            color=theme.value("grid.color"),
            linewidth=theme.value("grid.linewidth"),
            linestyle=theme.value("grid.linestyle"),
        )
        ax.set_axisbelow(True)
    else:
        ax.grid(False)

    edge = theme.value("axes.edgecolor")
    for side, spine in ax.spines.items():
        spine.set_color(edge)
        spine.set_linewidth(theme.value("axes.linewidth"))
        if theme.get("panel_border"):
            spine.set_visible(True)
        elif theme.get("axis_line"):
            spine.set_visible(side in ("left", "bottom"))
        else:
            spine.set_visible(False)

    for axis in ("x", "y"):
        shown = theme.value("xtick.bottom" if axis == "x" else "ytick.left")
        ax.tick_params(
            axis=axis,
            which="both",
            labelsize=theme.value(f"{axis}tick.labelsize"),
            labelcolor=theme.value(f"{axis}tick.color"),
            color=theme.value(f"{axis}tick.color"),
            direction=theme.get("tick_direction"),
            length=3.0 if shown else 0.0,
        )

def _configure_axis(ax, plot: Plot, resolved: ResolvedPlot, ch: str, panel: int = 0):
    scale = plot.scale_for(ch)
    levels = resolved.levels_for(ch, panel)
    axis = ax.xaxis if ch == "x" else ax.yaxis
    set_scale = ax.set_xscale if ch == "x" else ax.set_yscale
    set_lim = ax.set_xlim if ch == "x" else ax.set_ylim
    set_ticks = ax.set_xticks if ch == "x" else ax.set_yticks
    set_labels = ax.set_xticklabels if ch == "x" else ax.set_yticklabels

    if levels is not None:
        set_ticks(range(len(levels)))
        set_labels([str(v) for v in levels])
        set_lim(-0.6, len(levels) - 0.4)
        axis.set_minor_locator(NullLocator())
        return

    if scale.is_log:
        set_scale("log")
    if scale.limits is not None:
        set_lim(*scale.limits)
    if scale.breaks is not None:
        set_ticks(scale.breaks)
        axis.set_minor_locator(NullLocator())
        if scale.labels is not None:
            set_labels([str(v) for v in scale.labels])

def _hide_inner_labels(axes: list, resolved: ResolvedPlot, facet):
    occupied ={resolved.positions[i] for i in range(len(axes))}
    for i, ax in enumerate(axes):
        r, c = resolved.positions[i]
        if facet.share_x and (r + 1, c) in occupied:
            ax.tick_params(axis="x", labelbottom=False)
        if facet.share_y and c > 0:
            ax.tick_params(axis="y", labelleft=False)

def _strip(ax, text: str, theme, side: str = "top"):
    bg = theme.get("strip_background")
    bbox = None if bg in (None, "none") else {"facecolor": bg, "edgecolor": "none", "boxstyle": "square,pad=0.3"}
    size = theme.value("axes.titlesize") * 0.85
    color = theme.get("strip_text_color")
    if side == "top":
        ax.set_title(text, fontsize=size, color=color, pad=6, bbox=bbox)
    else:
        ax.text(1.04, 0.5, text, transform=ax.transAxes, rotation=-90, va="center", ha="left", fontsize=size, color=color, bbox=bbox)


#########################################
##               LEGENDS               ##
#########################################

def build_legends(plot: Plot, resolved: ResolvedPlot, maps: AestheticMaps) -> list:
    """One legend per mapped field and title; color/fill/shape on the same field merge."""
    geoms = {rl.geom for rl in resolved.layers}
    with_points = "point" in geoms
    with_lines = bool(geoms & {"line", "smooth"})
    only_boxes = geoms == {"boxplot"}

    fields = {}
    for ch in ("color", "fill", "shape", "size", "alpha"):
        if maps.get(ch) is None:
            continue
        fld = next(rl.mapping[ch] for rl in resolved.layers if ch in rl.mapping)
        key = (fld, plot.label_for(ch, fld))
        fields.setdefault(key, []).append(ch)

    legends = []
    for (fld, title), channels in fields.items():
        first = maps.get(channels[0])
        if isinstance(first, ContinuousMap):
            if channels[0] in ("color", "fill"):
                legends.append(LegendSpec(title, colorbar=first))
            continue
        spec = LegendSpec(title)
        for i, level in enumerate(first.levels):
            def pick(ch, default):
                m = maps.get(ch)
                return m.values[m.levels.index(level)] if ch in channels and level in m.levels else default
            color = pick("color", pick("fill", "#333333"))
            if only_boxes:
                handle = Patch(facecolor=pick("fill", "white"), edgecolor=pick("color", "#333333"))
            else:
                handle = Line2D(
                    [], [],
                    color=color,
                    marker=_marker(pick("shape", "o")) if with_points or "shape" in channels else None,
                    markersize=pick("size", DEFAULT_POINT_SIZE) * PT,
                    alpha=pick("alpha", 1.0),
                    linestyle="-" if with_lines else "none",
                    linewidth=DEFAULT_LINEWIDTH["line"] * PT,
                )
            spec.handles.append(handle)
            spec.labels.append(str(level))
        legends.append(spec)
    return legends

def _legend_extent(legends: list, theme, position: str) -> float:
    if not legends or position == "none":
        return 0.0
    fontsize = theme.value("legend.fontsize")
    if position == "bottom":
        return 0.45 * len(legends) + 0.1
    widest = 0
    for spec in legends:
        chars = max([len(str(spec.title))] + [len(l) for l in spec.labels])
        widest = max(widest, chars)
    return min(2.5, 0.5 + widest * fontsize * 0.55 / 72)

def _draw_legends(fig, legends: list, regions, theme, position: str):
    fontsize = theme.value("legend.fontsize")
    title_size = theme.value("legend.title_fontsize")
    W, H = fig.get_size_inches()
    cursor = regions.top if position == "right" else regions.legend_y
    for spec in legends:
        if spec.colorbar is not None:
            height = min(1.2 / H, (regions.top - regions.bottom) * 0.8)
            if position == "right":
                cax = fig.add_axes([regions.legend_x, cursor - height, 0.15 / W, height * 0.85], label="legend-colorbar")
            else:
                cax = fig.add_axes([regions.legend_x - 0.6 / W, cursor, 1.2 / W, 0.12 / H], label="legend-colorbar")
            fig.colorbar(
                ScalarMappable(norm=spec.colorbar.norm, cmap=GRADIENT),
                cax=cax,
                orientation="vertical" if position == "right" else "horizontal",
            )
            cax.set_title(spec.title, fontsize=title_size, loc="left", pad=4)
            cax.tick_params(labelsize=fontsize)
            cursor -= height + 0.3 / H
            continue

        if position == "right":
            fig.legend(
                spec.handles, spec.labels,
                title=spec.title,
                loc="upper left",
                bbox_to_anchor=(regions.legend_x, cursor),
                bbox_transform=fig.transFigure,
                frameon=False,
                fontsize=fontsize,
                title_fontsize=title_size,
            )
            cursor -= (len(spec.labels) + 1.8) * fontsize * 1.45 / 72 / H
        else:
            fig.legend(
                spec.handles, spec.labels,
                title=spec.title,
                loc="center",
                bbox_to_anchor=(regions.legend_x, cursor),
                bbox_transform=fig.transFigure,
                frameon=False,
                ncol=len(spec.labels),
                fontsize=fontsize,
                title_fontsize=title_size,
            )
            cursor += 0.45 / H


#########################################
##                 DRAW                ##
#########################################

def draw_plot_into(plot: Plot, fig, rect: Rect = UNIT) -> PanelSet:
    """
    Draws `plot` inside the figure-fraction rectangle `rect` of `fig`.
    All field references are resolved here; errors surface as UnresolvedFieldError
    or RenderError before anything is added to the figure.
    """
    resolved = resolve_plot(plot)
    maps = train_aesthetics(resolved)
    ctx = _Context(plot, resolved, maps)

    ignored = unknown_aesthetics(resolved)
    if ignored:
        warnings.warn(f"Ignoring unknown aesthetics: {', '.join(ignored)}", UserWarning, stacklevel=2)

    theme = plot.theme
    facet = plot.facet
    labels = plot.labels
    nrow, ncol = resolved.grid

    with mpl.rc_context(dict(theme.rc)):
        legends = build_legends(plot, resolved, maps)
        position = theme.get("legend_position") if legends else "none"
        title_lines = int("title" in labels) + int("subtitle" in labels)
        regions = plot_regions(
            rect,
            tuple(fig.get_size_inches()),
            title_lines=title_lines,
            legend=position,
            legend_size=_legend_extent(legends, theme, position),
            strip_rows=facet is not None,
            caption="caption" in labels,
        )

        multi = resolved.n_panels > 1
        free = facet is not None and not (facet.share_x and facet.share_y)
        gs = fig.add_gridspec(
            nrow, ncol,
            left=regions.left, right=regions.right,
            bottom=regions.bottom, top=regions.top,
            wspace=(0.3 if free else 0.08) + (0.15 if isinstance(facet, FacetGrid) else 0.0),
            hspace=0.45 if facet is not None else 0.2,
        )

        axes = []
        for i in range(resolved.n_panels):
            r, c = resolved.positions[i]
            share_x = axes[0] if axes and facet is not None and facet.share_x else None
            share_y = axes[0] if axes and facet is not None and facet.share_y else None
            ax = fig.add_subplot(gs[r, c], sharex=share_x, sharey=share_y, label=f"{PANEL_PREFIX}-{i}")
            style_axes(ax, theme)
            axes.append(ax)

        for k, rl in enumerate(resolved.layers):
            drawer = GEOM_DRAWERS[rl.geom]
            z = 2 + k
            for idx, sub in rl.frame.groupby("PANEL", sort=True):
                drawer(axes[int(idx)], sub, rl, ctx, z)

        for i, ax in enumerate(axes):
            _configure_axis(ax, plot, resolved, "x", i)
            _configure_axis(ax, plot, resolved, "y", i)

        if facet is not None:
            _hide_inner_labels(axes, resolved, facet)
            for i, ax in enumerate(axes):
                if isinstance(facet, FacetGrid):
                    row_txt, col_txt = resolved.row_col_labels(i)
                    r, c = resolved.positions[i]
                    if col_txt and r == 0:
                        _strip(ax, col_txt, theme, "top")
                    if row_txt and c == ncol - 1:
                        _strip(ax, row_txt, theme, "right")
                else:
                    _strip(ax, resolved.panel_label(i), theme, "top")

        xlabel = plot.label_for("x", "")
        ylabel = plot.label_for("y", "")
        label_size = theme.value("axes.labelsize")
        W, H = fig.get_size_inches()
        if multi:
            fig.text((regions.left + regions.right) / 2, rect.y + 0.08 / H + (regions.bottom - rect.y) * 0.05, xlabel, ha="center", va="bottom", fontsize=label_size)
            fig.text(rect.x + 0.08 / W, (regions.bottom + regions.top) / 2, ylabel, ha="left", va="center", rotation=90, fontsize=label_size)
        else:
            axes[0].set_xlabel(xlabel, fontsize=label_size)
            axes[0].set_ylabel(ylabel, fontsize=label_size)

        title_size = theme.get("plot_title_size")
        if "title" in labels:
            fig.text(regions.left, regions.title_y, labels["title"], ha="left", va="top", fontsize=title_size)
        if "subtitle" in labels:
            offset = transforms.offset_copy(fig.transFigure, fig=fig, y=-title_size * 1.5 * int("title" in labels), units="points")
            fig.text(regions.left, regions.title_y, labels["subtitle"], ha="left", va="top", fontsize=title_size * 0.8, transform=offset)
        if "caption" in labels:
            fig.text(regions.right, rect.y + 0.05 / H, labels["caption"], ha="right", va="bottom", fontsize=title_size * 0.7)

        if position != "none":
            _draw_legends(fig, legends, regions, theme, position)

    return PanelSet(resolved, axes, legends)

def draw_into(obj, fig, rect: Rect = UNIT):
    """Draws a Plot or any composite exposing draw_into(fig, rect)."""
    if isinstance(obj, Plot):
        return draw_plot_into(obj, fig, rect)
    if hasattr(obj, "draw_into"):
        return obj.draw_into(fig, rect)
    raise TypeError(f"[ERROR] Cannot render {type(obj).__name__}")


#########################################
##               RENDER                ##
#########################################

def render(obj, figsize: Optional[tuple] = None, dpi: Optional[float] = None):
    """Renders a Plot or Canvas into a new matplotlib figure."""
    fig = plt.figure(figsize=figsize or config.SCREEN_FIGSIZE, dpi=dpi or config.SCREEN_DPI)
    try:
        draw_into(obj, fig, UNIT)
    except Exception:
        plt.close(fig)
        raise
    return fig

def show(obj, figsize: Optional[tuple] = None, block: Optional[bool] = None):
    """Renders and displays; the figure is returned for further use."""
    fig = render(obj, figsize=figsize)
    plt.show(block=block)
    return fig

def panel_axes(fig) -> list:
    """Data panels of a rendered figure (legend and colourbar axes excluded)."""
    return [ax for ax in fig.axes if ax.get_label().startswith(PANEL_PREFIX)]
