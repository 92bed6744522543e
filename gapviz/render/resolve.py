"""
Binds a Plot to its data at render time.

Field lookups, required channels, grouping, facet panels and scale limits are
all checked here, so a Plot can be built before (or without) its data being
valid. Both the matplotlib renderer and the plotly adapter draw from the
ResolvedPlot produced by `resolve_plot`.
"""

import warnings
from dataclasses import dataclass, field
from typing import Optional
import numpy as np
import pandas as pd
from gapviz.errors import RenderError, UnresolvedFieldError
from gapviz.grammar import Aes, Layer, Plot, FacetGrid, FacetWrap
from gapviz.grammar.aes import KNOWN_CHANNELS, is_field
from gapviz.grammar.layers import SMOOTH_METHODS


#########################################
##                PARAMS               ##
#########################################

# discrete channels that split observations into groups
GROUPING_CHANNELS = ("group", "color", "fill", "shape", "linetype")


#########################################
##              CONTAINERS             ##
#########################################

@dataclass
class ResolvedLayer:
    layer: Layer
    mapping: Aes
    frame: pd.DataFrame  # one column per channel (data units) + PANEL + GROUP

    @property
    def geom(self) -> str:
        return self.layer.geom

    def has(self, channel: str) -> bool:
        return channel in self.frame.columns


@dataclass
class ResolvedPlot:
    plot: Plot
    layers: list
    panels: list                   # ordered facet keys, [()] without facets
    positions: dict                # panel index -> (row, col)
    grid: tuple                    # (nrow, ncol)
    x_levels: Optional[list] = None
    y_levels: Optional[list] = None
    discrete: dict = field(default_factory=dict)
    panel_levels: dict = field(default_factory=dict)   # (channel, panel) -> levels, free discrete axes only

    @property
    def n_panels(self) -> int:
        return len(self.panels)

    def levels_for(self, channel: str, panel: Optional[int] = None) -> Optional[list]:
        """Discrete levels on `channel` for one panel; None on a continuous axis."""
        if panel is not None and (channel, panel) in self.panel_levels:
            return self.panel_levels[(channel, panel)]
        return self.x_levels if channel == "x" else self.y_levels

    def panel_label(self, idx: int) -> str:
        return ", ".join(str(v) for v in self.panels[idx])

    def row_col_labels(self, idx: int) -> tuple:
        """(row strip, column strip) text for facet_grid panels."""
        facet = self.plot.facet
        key = self.panels[idx]
        n_rows = len(facet.rows)
        row_txt = ", ".join(str(v) for v in key[:n_rows])
        col_txt = ", ".join(str(v) for v in key[n_rows:])
        return row_txt, col_txt


#########################################
##               HELPER                ##
#########################################

def is_discrete(series: pd.Series) -> bool:
    return not (pd.api.types.is_numeric_dtype(series) and not pd.api.types.is_bool_dtype(series))

def levels_of(series: pd.Series) -> list:
    """Level order of a discrete field: categorical order, else sorted values."""
    if isinstance(series.dtype, pd.CategoricalDtype):
        present = set(series.dropna())
        return [c for c in series.cat.categories if c in present]
    values = series.dropna().unique().tolist()
    try:
        return sorted(values)
    except TypeError:
        return sorted(values, key=str)

def merge_levels(*level_lists) -> list:
    seen, out = set(), []
    for levels in level_lists:
        for value in levels:
            if value not in seen:
                seen.add(value)
                out.append(value)
    try:
        return sorted(out)
    except TypeError:
        return out

def _layer_data(plot: Plot, layer: Layer) -> pd.DataFrame:
    data = layer.data if layer.data is not None else plot.data
    if data is None:
        raise RenderError(f"[ERROR] geom_{layer.geom} has no data: pass data to ggplot() or the layer")
    return data

def _layer_mapping(plot: Plot, layer: Layer) -> Aes:
    if layer.inherit_aes:
        return plot.mapping.merge(layer.mapping)
    return layer.mapping

def _check_fields(mapping: Aes, data: pd.DataFrame):
    for channel, fld in mapping.items():
        if is_field(fld) and fld not in data.columns:
            raise UnresolvedFieldError(fld, channel, data.columns)


#########################################
##               LAYERS                ##
#########################################

def resolve_layer(plot: Plot, layer: Layer) -> ResolvedLayer:
    data = _layer_data(plot, layer)
    mapping = _layer_mapping(plot, layer)
    _check_fields(mapping, data)

    facet_fields = plot.facet.fields if plot.facet is not None else ()
    for fld in facet_fields:
        if fld not in data.columns:
            raise UnresolvedFieldError(fld, "facet", data.columns)

    missing = [c for c in layer.required if c not in mapping and c not in layer.params]
    if missing:
        raise RenderError(f"[ERROR] geom_{layer.geom} requires the following missing aesthetics: {', '.join(missing)}")

    if layer.geom == "smooth" and layer.stat.get("method") not in SMOOTH_METHODS:
        raise RenderError(f"[ERROR] Unsupported smoothing method: {layer.stat.get('method')!r}")

    # constants are broadcast to one value per observation
    frame = pd.DataFrame(
        {ch: data[fld].to_numpy() if is_field(fld) else np.full(len(data), fld) for ch, fld in mapping.items()},
        index=data.index,
    )
    for i, fld in enumerate(facet_fields):
        frame[f"_facet{i}"] = data[fld].to_numpy()

    if "shape" in frame and not is_discrete(frame["shape"]):
        raise RenderError("[ERROR] A continuous variable cannot be mapped to shape")

    return ResolvedLayer(layer, mapping, frame)

def _drop_unshowable(plot: Plot, rl: ResolvedLayer, discrete: dict):
    """Removes rows with missing positions or positions outside the scale limits."""
    frame = rl.frame
    bad = np.zeros(len(frame), dtype=bool)
    for ch in ("x", "y"):
        if ch not in frame:
            continue
        if discrete.get(ch):
            bad |= frame[ch].isna().to_numpy()
        else:
            bad |= plot.scale_for(ch).out_of_bounds(frame[ch].to_numpy())
    if bad.any():
        warnings.warn(
            f"Removed {int(bad.sum())} rows containing missing or out-of-range values (geom_{rl.geom})",
            UserWarning,
            stacklevel=3,
        )
        rl.frame = frame.loc[~bad]


#########################################
##               PANELS                ##
#########################################

def _panel_layout(plot: Plot, layers: list) -> tuple:
    facet = plot.facet
    if facet is None:
        for rl in layers:
            rl.frame = rl.frame.assign(PANEL=0)
        return [()], {0: (0, 0)}, (1, 1)

    n_fields = len(facet.fields)
    cols = [f"_facet{i}" for i in range(n_fields)]

    def keys_of(frame: pd.DataFrame, idx: list) -> list:
        subset = frame[[cols[i] for i in idx]].dropna()
        return list(dict.fromkeys(map(tuple, subset.itertuples(index=False, name=None))))

    if isinstance(facet, FacetWrap):
        all_keys = []
        for rl in layers:
            all_keys.extend(keys_of(rl.frame, list(range(n_fields))))
        panels = merge_levels(all_keys)
        nrow, ncol = facet.dims(len(panels))
        positions = {i: (i // ncol, i % ncol) for i in range(len(panels))}
    elif isinstance(facet, FacetGrid):
        n_rows = len(facet.rows)
        row_keys = merge_levels(*[keys_of(rl.frame, list(range(n_rows))) for rl in layers]) or [()]
        col_keys = merge_levels(*[keys_of(rl.frame, list(range(n_rows, n_fields))) for rl in layers]) or [()]
        panels = [r + c for r in row_keys for c in col_keys]
        nrow, ncol = len(row_keys), len(col_keys)
        positions = {i: (i // ncol, i % ncol) for i in range(len(panels))}
    else:
        raise RenderError(f"[ERROR] Unsupported facet: {type(facet).__name__}")

    if not panels:
        raise RenderError("[ERROR] Facet fields contain no values")

    index = {key: i for i, key in enumerate(panels)}
    for rl in layers:
        frame = rl.frame.dropna(subset=cols)
        keys = list(map(tuple, frame[cols].itertuples(index=False, name=None)))
        rl.frame = frame.assign(PANEL=[index[k] for k in keys]).drop(columns=cols)
    return panels, positions, (nrow, ncol)


#########################################
##               RESOLVE               ##
#########################################

def _assign_groups(rl: ResolvedLayer, discrete: dict):
    keys = [ch for ch in GROUPING_CHANNELS if ch in rl.frame and (ch == "group" or discrete.get(ch))]
    if not keys:
        rl.frame = rl.frame.assign(GROUP=0)
        return
    codes = rl.frame.groupby(keys, sort=True, dropna=False).ngroup()
    rl.frame = rl.frame.assign(GROUP=codes.to_numpy())

def resolve_plot(plot: Plot) -> ResolvedPlot:
    """Checks every field and channel of `plot` against its data and returns drawable frames."""
    if not plot.layers:
        raise RenderError("[ERROR] Plot has no layers: add a geom, e.g. + geom_point()")

    layers = [resolve_layer(plot, layer) for layer in plot.layers]

    unknown = sorted({ch for rl in layers for ch in rl.mapping if ch not in KNOWN_CHANNELS})
    discrete = {}
    for rl in layers:
        for ch in rl.frame.columns:
            if ch.startswith("_facet") or ch in unknown:
                continue
            flag = is_discrete(rl.frame[ch])
            if ch in discrete and discrete[ch] != flag and ch in ("x", "y"):
                raise RenderError(f"[ERROR] Discrete and continuous values mixed on the {ch} axis")
            discrete[ch] = discrete.get(ch, False) or flag

    for ch in ("x", "y"):
        if discrete.get(ch) and plot.scale_for(ch).trans != "identity":
            raise RenderError(f"[ERROR] Discrete {ch} cannot use a {plot.scale_for(ch).trans} scale")

    for rl in layers:
        _drop_unshowable(plot, rl, discrete)
        _assign_groups(rl, discrete)

    panels, positions, grid = _panel_layout(plot, layers)

    x_levels = merge_levels(*[levels_of(rl.frame["x"]) for rl in layers if rl.has("x")]) if discrete.get("x") else None
    y_levels = merge_levels(*[levels_of(rl.frame["y"]) for rl in layers if rl.has("y")]) if discrete.get("y") else None

    panel_levels = {}
    facet = plot.facet
    if facet is not None:
        for ch, shared in (("x", facet.share_x), ("y", facet.share_y)):
            if shared or not discrete.get(ch):
                continue
            for idx in range(len(panels)):
                panel_levels[(ch, idx)] = merge_levels(*[
                    levels_of(rl.frame.loc[rl.frame["PANEL"] == idx, ch]) for rl in layers if rl.has(ch)
                ])

    return ResolvedPlot(
        plot=plot,
        layers=layers,
        panels=panels,
        positions=positions,
        grid=grid,
        x_levels=x_levels,
        y_levels=y_levels,
        discrete=discrete,
        panel_levels=panel_levels,
    )

def unknown_aesthetics(resolved: ResolvedPlot) -> list:
    return sorted({ch for rl in resolved.layers for ch in rl.mapping if ch not in KNOWN_CHANNELS})
