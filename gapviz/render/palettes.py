"""Trains colour, shape, size and alpha scales across all layers of a resolved plot."""

from dataclasses import dataclass, field
from typing import Optional
import numpy as np
import pandas as pd
import seaborn as sns
from matplotlib.colors import LinearSegmentedColormap, Normalize, to_hex
from gapviz.errors import RenderError
from .resolve import ResolvedPlot, levels_of, merge_levels


#########################################
##                PARAMS               ##
#########################################

# filled circle, triangle, square, plus, cross, star
SHAPES = ("o", "^", "s", "P", "X", "*")

# light-to-dark blue gradient for continuous colour
GRADIENT = LinearSegmentedColormap.from_list("gradient_blue", ["#132B43", "#56B1F7"])

SIZE_RANGE = (1.0, 6.0)
ALPHA_RANGE = (0.1, 1.0)

# defaults per geom when colour is neither mapped nor fixed
DEFAULT_COLORS = {
    "point": "black",
    "line": "black",
    "smooth": "#3366FF",
    "boxplot": "#333333",
}

PT = 72.27 / 25.4  # points per millimetre


def hue_palette(n: int) -> list:
    """n evenly spaced hues starting at 15 degrees, equal lightness and chroma."""
    if n <= 0:
        return []
    return [to_hex(c) for c in sns.husl_palette(n, h=15 / 360, s=0.9, l=0.65)]


#########################################
##              SCALE MAPS             ##
#########################################

@dataclass
class DiscreteMap:
    channel: str
    levels: list
    values: list
    na_value: object = None

    def lookup(self, series: pd.Series) -> np.ndarray:
        table = dict(zip(self.levels, self.values))
        return np.array([table.get(v, self.na_value) for v in series], dtype=object)

    def items(self):
        return list(zip(self.levels, self.values))


@dataclass
class ContinuousMap:
    channel: str
    vmin: float
    vmax: float
    out_range: Optional[tuple] = None

    @property
    def norm(self) -> Normalize:
        vmax = self.vmax if self.vmax > self.vmin else self.vmin + 1
        return Normalize(vmin=self.vmin, vmax=vmax)

    def lookup(self, series: pd.Series) -> np.ndarray:
        scaled = self.norm(np.asarray(series, dtype=float))
        if self.channel == "color" or self.channel == "fill":
            return np.array([to_hex(c) for c in GRADIENT(np.ma.filled(scaled, np.nan))], dtype=object)
        lo, hi = self.out_range
        return lo + np.clip(np.ma.filled(scaled, 0.5), 0, 1) * (hi - lo)


@dataclass
class AestheticMaps:
    maps: dict = field(default_factory=dict)

    def get(self, channel: str):
        return self.maps.get(channel)

    def lookup(self, channel: str, series: pd.Series) -> np.ndarray:
        return self.maps[channel].lookup(series)


def train_aesthetics(resolved: ResolvedPlot) -> AestheticMaps:
    maps = {}
    for ch in ("color", "fill", "shape", "size", "alpha"):
        columns = [rl.frame[ch] for rl in resolved.layers if rl.has(ch)]
        if not columns:
            continue
        if resolved.discrete.get(ch):
            levels = merge_levels(*[levels_of(c) for c in columns])
            if ch in ("color", "fill"):
                values = hue_palette(len(levels))
            elif ch == "shape":
                if len(levels) > len(SHAPES):
                    raise RenderError(
                        f"[ERROR] The shape palette can deal with a maximum of {len(SHAPES)} discrete values, got {len(levels)}"
                    )
                values = list(SHAPES[:len(levels)])
            elif ch == "size":
                values = list(np.linspace(SIZE_RANGE[0] + 1, SIZE_RANGE[1], len(levels)))
            else:
                values = list(np.linspace(ALPHA_RANGE[0] + 0.2, ALPHA_RANGE[1], len(levels)))
            na_value = {"color": "#7F7F7F", "fill": "#7F7F7F", "shape": "o"}.get(ch, values[0] if values else None)
            maps[ch] = DiscreteMap(ch, levels, values, na_value)
        else:
            stacked = pd.concat(columns).astype(float)
            out_range = {"size": SIZE_RANGE, "alpha": ALPHA_RANGE}.get(ch)
            maps[ch] = ContinuousMap(ch, float(stacked.min()), float(stacked.max()), out_range)

    return AestheticMaps(maps)
