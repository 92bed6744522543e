from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Optional, Mapping
import pandas as pd
from .aes import Aes, normalize_channel


#########################################
##                PARAMS               ##
#########################################

# channels each geom cannot be drawn without
REQUIRED_CHANNELS = {
    "point": ("x", "y"),
    "line": ("x", "y"),
    "smooth": ("x", "y"),
    "boxplot": ("y",),
}

# constant aesthetics a layer accepts as keyword parameters
FIXED_AESTHETICS = ("color", "fill", "shape", "size", "alpha", "linewidth", "linetype")

SMOOTH_METHODS = ("lm",)


#########################################
##                LAYER                ##
#########################################

@dataclass(frozen=True, eq=False)
class Layer:
    """
    One geometric/statistical rendering pass.
        geom   : point, line, boxplot or smooth
        mapping: layer-local aesthetics, merged over the plot mapping
        data   : optional layer-local dataset replacing the plot data
        params : constant aesthetics (color="blue", alpha=0.5, ...)
        stat   : statistic parameters (smoothing method, whisker coefficient, ...)
    """
    geom: str
    mapping: Aes = field(default_factory=Aes)
    data: Optional[pd.DataFrame] = None
    params: Mapping = field(default_factory=dict)
    stat: Mapping = field(default_factory=dict)
    inherit_aes: bool = True

    def __post_init__(self):
        if self.geom not in REQUIRED_CHANNELS:
            raise ValueError(f"[ERROR] Unknown geom: {self.geom}")
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))
        object.__setattr__(self, "stat", MappingProxyType(dict(self.stat)))

    @property
    def required(self) -> tuple:
        return REQUIRED_CHANNELS[self.geom]

    def __repr__(self) -> str:
        return f"geom_{self.geom}({self.mapping!r}, params={dict(self.params)}, stat={dict(self.stat)})"


def _split_params(geom: str, params: dict) -> dict:
    fixed = {}
    for key, value in params.items():
        key = normalize_channel(key)
        if key not in FIXED_AESTHETICS:
            raise TypeError(f"[ERROR] geom_{geom}() got an unexpected parameter '{key}'")
        fixed[key] = value

    # size on line-like geoms means stroke width
    if geom in ("line", "smooth") and "size" in fixed:
        fixed.setdefault("linewidth", fixed.pop("size"))
    return fixed

def _as_aes(mapping) -> Aes:
    if mapping is None:
        return Aes()
    if isinstance(mapping, Aes):
        return mapping
    return Aes(mapping)


#########################################
##                GEOMS                ##
#########################################

def geom_point(mapping: Optional[Aes] = None, data: Optional[pd.DataFrame] = None, inherit_aes: bool = True, **params) -> Layer:
    """Scatter layer."""
    return Layer("point", _as_aes(mapping), data, _split_params("point", params), inherit_aes=inherit_aes)

def geom_line(mapping: Optional[Aes] = None, data: Optional[pd.DataFrame] = None, inherit_aes: bool = True, **params) -> Layer:
    """Connects the observations of each group in order of x."""
    return Layer("line", _as_aes(mapping), data, _split_params("line", params), inherit_aes=inherit_aes)

def geom_boxplot(
        mapping: Optional[Aes] = None,
        data: Optional[pd.DataFrame] = None,
        coef: float = 1.5,
        width: float = 0.75,
        outlier_color: Optional[str] = None,
        outlier_shape: str = "o",
        outlier_size: float = 1.5,
        inherit_aes: bool = True,
        **params
    ) -> Layer:
    """Box-and-whisker summary of y per x level; whiskers reach `coef` times the IQR."""
    if coef < 0:
        raise ValueError(f"[ERROR] coef must be non-negative, got {coef}")
    if not 0 < width <= 1:
        raise ValueError(f"[ERROR] width must be in (0, 1], got {width}")
    stat = {
        "coef": coef,
        "width": width,
        "outlier_color": outlier_color,
        "outlier_shape": outlier_shape,
        "outlier_size": outlier_size,
    }
    return Layer("boxplot", _as_aes(mapping), data, _split_params("boxplot", params), stat, inherit_aes)

def geom_smooth(
        mapping: Optional[Aes] = None,
        data: Optional[pd.DataFrame] = None,
        method: str = "lm",
        se: bool = True,
        level: float = 0.95,
        n: int = 80,
        inherit_aes: bool = True,
        **params
    ) -> Layer:
    """
    Smoothed trend per group. Only ordinary least squares ("lm") is supported;
    the method is validated again when the plot is drawn.
    """
    if not 0 < level < 1:
        raise ValueError(f"[ERROR] level must be in (0, 1), got {level}")
    if n < 2:
        raise ValueError(f"[ERROR] n must be at least 2, got {n}")
    stat = {"method": method, "se": se, "level": level, "n": n}
    return Layer("smooth", _as_aes(mapping), data, _split_params("smooth", params), stat, inherit_aes)
