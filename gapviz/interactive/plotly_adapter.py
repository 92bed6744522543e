"""
Converts a static Plot into an interactive plotly figure (pan, zoom, hover).

The figure is built from the same resolved layers as the matplotlib renderer,
so groups, colours, facets and scales match. The plot's aesthetic mapping is
stored in layout.meta and every mapped field, extra aesthetics included,
appears in the hover text.
"""

from pathlib import Path
from typing import Optional, Sequence, Union
import numpy as np
import pandas as pd
import plotly.graph_objects as go
from plotly.subplots import make_subplots
from gapviz.errors import ExportError
from gapviz.grammar import Plot, FacetGrid
from gapviz.render.palettes import DEFAULT_COLORS, PT, train_aesthetics
from gapviz.render.resolve import ResolvedLayer, resolve_plot
from gapviz.render.stats import smooth_lm


#########################################
##                PARAMS               ##
#########################################

SYMBOLS = {
    "o": "circle",
    "^": "triangle-up",
    "s": "square",
    "P": "cross",
    "X": "x",
    "*": "star",
    "D": "diamond",
    "+": "cross-thin-open",
    "x": "x-thin-open",
    ".": "circle",
}

BAND_FILL = "rgba(153, 153, 153, 0.4)"


#########################################
##               HELPER                ##
#########################################

def _hover_text(rl: ResolvedLayer, sub: pd.DataFrame, channels: Sequence[str]) -> list:
    shown = [ch for ch in channels if ch in sub.columns]
    rows = zip(*(sub[ch].tolist() for ch in shown)) if shown else ([] for _ in range(len(sub)))
    return ["<br>".join(f"{rl.mapping[ch]}: {v}" for ch, v in zip(shown, row)) for row in rows]

def _group_name(rl: ResolvedLayer, grp: pd.DataFrame) -> Optional[str]:
    parts = [str(grp[ch].iloc[0]) for ch in ("color", "fill", "shape") if ch in grp.columns and not pd.api.types.is_numeric_dtype(grp[ch])]
    return ", ".join(dict.fromkeys(parts)) or None

def _fixed_or_mapped(maps, rl: ResolvedLayer, sub: pd.DataFrame, channel: str, default):
    if channel in sub.columns and maps.get(channel) is not None:
        return list(maps.lookup(channel, sub[channel]))
    return rl.layer.params.get(channel, default)

def _scalar(value):
    return value[0] if isinstance(value, list) else value


#########################################
##               TRACES                ##
#########################################

def _point_traces(rl, sub, maps, plot, channels, legend_seen):
    for _, grp in sub.groupby("GROUP", sort=True):
        name = _group_name(rl, grp)
        shape = _fixed_or_mapped(maps, rl, grp, "shape", "o")
        size = _fixed_or_mapped(maps, rl, grp, "size", 1.5)
        yield go.Scatter(
            x=grp["x"], y=grp["y"],
            mode="markers",
            name=name,
            legendgroup=name,
            showlegend=bool(name) and name not in legend_seen,
            marker={
                "color": _fixed_or_mapped(maps, rl, grp, "color", DEFAULT_COLORS["point"]),
                "symbol": SYMBOLS.get(_scalar(shape), "circle"),
                "size": (np.asarray(size, dtype=float) * PT).tolist() if isinstance(size, list) else size * PT,
                "opacity": _scalar(_fixed_or_mapped(maps, rl, grp, "alpha", 1.0)),
            },
            text=_hover_text(rl, grp, channels),
            hoverinfo="text",
        )
        legend_seen.add(name)

def _line_traces(rl, sub, maps, plot, channels, legend_seen):
    for _, grp in sub.groupby("GROUP", sort=True):
        grp = grp.sort_values("x", kind="mergesort")
        name = _group_name(rl, grp)
        yield go.Scatter(
            x=grp["x"], y=grp["y"],
            mode="lines",
            name=name,
            legendgroup=name,
            showlegend=bool(name) and name not in legend_seen,
            line={
                "color": _scalar(_fixed_or_mapped(maps, rl, grp, "color", DEFAULT_COLORS["line"])),
                "width": rl.layer.params.get("linewidth", 0.5) * PT,
            },
            opacity=_scalar(_fixed_or_mapped(maps, rl, grp, "alpha", 1.0)),
            text=_hover_text(rl, grp, channels),
            hoverinfo="text",
        )
        legend_seen.add(name)

def _smooth_traces(rl, sub, maps, plot, channels, legend_seen):
    xs, ys = plot.scale_for("x"), plot.scale_for("y")
    stat = rl.layer.stat
    for _, grp in sub.groupby("GROUP", sort=True):
        fit = smooth_lm(xs.transform(grp["x"]), ys.transform(grp["y"]), n=stat["n"], se=stat["se"], level=stat["level"])
        if fit.empty:
            continue
        fx = xs.inverse(fit["x"])
        fy = ys.inverse(fit["y"])
        if stat["se"] and fit["ymin"].notna().all():
            yield go.Scatter(
                x=np.concatenate([fx, fx[::-1]]),
                y=np.concatenate([ys.inverse(fit["ymax"]), ys.inverse(fit["ymin"])[::-1]]),
                fill="toself",
                fillcolor=BAND_FILL,
                line={"width": 0},
                hoverinfo="skip",
                showlegend=False,
            )
        yield go.Scatter(
            x=fx, y=fy,
            mode="lines",
            line={
                "color": _scalar(_fixed_or_mapped(maps, rl, grp, "color", DEFAULT_COLORS["smooth"])),
                "width": rl.layer.params.get("linewidth", 1.0) * PT,
            },
            name=_group_name(rl, grp),
            showlegend=False,
            hovertemplate=f"{rl.mapping['x']}: %{{x}}<br>fitted {rl.mapping['y']}: %{{y:.3f}}<extra></extra>",
        )

def _box_traces(rl, sub, maps, plot, channels, legend_seen):
    for _, grp in sub.groupby("GROUP", sort=True):
        name = _group_name(rl, grp)
        yield go.Box(
            x=grp["x"] if "x" in grp.columns else None,
            y=grp["y"],
            name=name or rl.mapping.get("y"),
            legendgroup=name,
            showlegend=bool(name) and name not in legend_seen,
            marker={"color": _scalar(_fixed_or_mapped(maps, rl, grp, "color", DEFAULT_COLORS["boxplot"]))},
            fillcolor=_scalar(_fixed_or_mapped(maps, rl, grp, "fill", "white")),
            boxpoints="outliers",
            hoverinfo="y",
        )
        legend_seen.add(name)

TRACE_BUILDERS = {
    "point": _point_traces,
    "line": _line_traces,
    "smooth": _smooth_traces,
    "boxplot": _box_traces,
}


#########################################
##               CONVERT               ##
#########################################

def _subplot_titles(resolved, nrow: int, ncol: int) -> list:
    titles = [""] * (nrow * ncol)
    facet = resolved.plot.facet
    for i in range(resolved.n_panels):
        r, c = resolved.positions[i]
        if isinstance(facet, FacetGrid):
            row_txt, col_txt = resolved.row_col_labels(i)
            titles[r * ncol + c] = " | ".join(t for t in (row_txt, col_txt) if t)
        else:
            titles[r * ncol + c] = resolved.panel_label(i)
    return titles

def ggplotly(
        plot: Plot,
        tooltip: Union[str, Sequence[str]] = "all",
        width: Optional[int] = None,
        height: Optional[int] = None,
    ) -> go.Figure:
    """
    Interactive version of `plot`. `tooltip` restricts the hover text to the
    given channels ("all" keeps every mapped channel).
    """
    resolved = resolve_plot(plot)
    maps = train_aesthetics(resolved)
    facet = plot.facet
    nrow, ncol = resolved.grid

    fig = make_subplots(
        rows=nrow,
        cols=ncol,
        subplot_titles=_subplot_titles(resolved, nrow, ncol) if facet is not None else None,
        shared_xaxes="all" if facet is not None and facet.share_x else False,
        shared_yaxes="all" if facet is not None and facet.share_y else False,
        horizontal_spacing=0.08 if ncol > 1 else 0.0,
        vertical_spacing=min(0.12, 0.3 / nrow) if nrow > 1 else 0.0,
    )

    legend_seen = set()
    for rl in resolved.layers:
        builder = TRACE_BUILDERS[rl.geom]
        channels = list(rl.mapping) if tooltip == "all" else [c for c in tooltip if c in rl.mapping]
        for idx, sub in rl.frame.groupby("PANEL", sort=True):
            r, c = resolved.positions[int(idx)]
            for trace in builder(rl, sub, maps, plot, channels, legend_seen):
                fig.add_trace(trace, row=r + 1, col=c + 1)

    for ch, update in (("x", fig.update_xaxes), ("y", fig.update_yaxes)):
        scale = plot.scale_for(ch)
        if scale.is_log:
            update(type="log")
        if scale.limits is not None and None not in scale.limits:
            lo, hi = scale.limits
            update(range=[np.log10(lo), np.log10(hi)] if scale.is_log else [lo, hi])
        if scale.breaks is not None:
            update(tickvals=list(scale.breaks), ticktext=[str(v) for v in (scale.labels or scale.breaks)])

    fig.update_xaxes(title_text=plot.label_for("x", ""), row=nrow)
    fig.update_yaxes(title_text=plot.label_for("y", ""), col=1)

    legend_title = next((plot.label_for(ch) for ch in ("color", "fill", "shape") if maps.get(ch) is not None), None)
    fig.update_layout(
        title=plot.labels.get("title"),
        legend_title_text=legend_title,
        template="plotly_white" if plot.theme.name in ("minimal", "bw", "classic", "cowplot") else "ggplot2",
        width=width,
        height=height,
        hovermode="closest",
        meta={
            "aesthetics": dict(plot.mapping),
            "layers": [dict(rl.mapping) for rl in resolved.layers],
            "facets": list(facet.fields) if facet is not None else [],
        },
    )
    return fig

def interactive_mappings(fig: go.Figure) -> dict:
    """Plot-level aesthetic mapping carried by a figure built with ggplotly."""
    meta = fig.layout.meta or {}
    return dict(meta.get("aesthetics", {}))

def save_html(fig: go.Figure, path, create_dir: bool = False) -> Path:
    """Writes a self-contained html document (plotly.js embedded)."""
    path = Path(path)
    if path.suffix.lower() not in (".html", ".htm"):
        raise ExportError(f"[ERROR] Interactive figures are written as .html, got {path.suffix!r}")
    if not path.parent.exists():
        if not create_dir:
            raise ExportError(f"[ERROR] Cannot find directory {path.parent}; pass create_dir=True to create it")
        path.parent.mkdir(parents=True, exist_ok=True)
    try:
        fig.write_html(str(path), include_plotlyjs=True, full_html=True)
    except OSError as e:
        raise ExportError(f"[ERROR] Could not write {path}: {e}") from e
    return path
