from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional
import matplotlib as mpl
import seaborn as sns


#########################################
##                CONFIG               ##
#########################################

base_rc = {
    "font.size": 11,
    "axes.titlesize": 11,
    "axes.labelsize": 11,
    "xtick.labelsize": 9,
    "ytick.labelsize": 9,
    "legend.title_fontsize": 11,
    "legend.fontsize": 9,
    "figure.titlesize": 13,
    "lines.solid_capstyle": "butt",
}

# panel decorations that are not plain rcParams
base_style = {
    "legend_position": "right",
    "panel_grid": True,
    "panel_border": False,
    "axis_line": False,
    "strip_background": "#D9D9D9",
    "strip_text_color": "#1A1A1A",
    "plot_title_size": 13,
    "tick_direction": "out",
}

LEGEND_POSITIONS = ("right", "bottom", "none")


#########################################
##                THEME                ##
#########################################

@dataclass(frozen=True)
class Theme:
    """
    Bundle of visual defaults. `rc` is applied as matplotlib rcParams while a
    plot is drawn, `style` holds panel decorations.
    Complete themes replace the current theme; partial ones merge into it.
    """
    name: str
    rc: Mapping = field(default_factory=dict)
    style: Mapping = field(default_factory=dict)
    complete: bool = True

    def __post_init__(self):
        object.__setattr__(self, "rc", MappingProxyType(dict(self.rc)))
        object.__setattr__(self, "style", MappingProxyType(dict(self.style)))

    def __add__(self, other: "Theme") -> "Theme":
        if not isinstance(other, Theme):
            return NotImplemented
        if other.complete:
            return other
        return Theme(
            self.name,
            {**self.rc, **other.rc},
            {**self.style, **other.style},
            self.complete,
        )

    def value(self, key: str):
        """rc value of this theme, falling back to the active matplotlib default."""
        if key in self.rc:
            return self.rc[key]
        return mpl.rcParams[key]

    def get(self, key: str, default=None):
        return self.style.get(key, base_style.get(key, default))


def _complete_theme(name: str, sns_style: str, rc: Optional[dict] = None, style: Optional[dict] = None, base_size: float = 11) -> Theme:
    merged_rc = dict(sns.axes_style(sns_style))
    merged_rc.update(base_rc)
    scale = base_size / 11
    for key in ("font.size", "axes.titlesize", "axes.labelsize", "xtick.labelsize", "ytick.labelsize", "legend.title_fontsize", "legend.fontsize", "figure.titlesize"):
        merged_rc[key] = base_rc[key] * scale
    merged_rc.update(rc or {})
    merged_style = dict(base_style)
    merged_style["plot_title_size"] = base_style["plot_title_size"] * scale
    merged_style.update(style or {})
    return Theme(name, merged_rc, merged_style, complete=True)


#########################################
##           COMPLETE THEMES           ##
#########################################

def theme_gray(base_size: float = 11) -> Theme:
    """Grey panel with white grid lines, the default look."""
    return _complete_theme(
        "gray", "darkgrid",
        rc={
            "axes.facecolor": "#EBEBEB",
            "axes.edgecolor": "#EBEBEB",
            "grid.color": "white",
            "grid.linewidth": 1.0,
            "xtick.color": "#4D4D4D",
            "ytick.color": "#4D4D4D",
            "xtick.bottom": True,
            "ytick.left": True,
        },
        base_size=base_size,
    )

theme_grey = theme_gray

def theme_bw(base_size: float = 11) -> Theme:
    return _complete_theme(
        "bw", "whitegrid",
        rc={"axes.edgecolor": "#333333", "grid.color": "#EBEBEB", "xtick.bottom": True, "ytick.left": True},
        style={"panel_border": True, "strip_background": "#D9D9D9"},
        base_size=base_size,
    )

def theme_minimal(base_size: float = 11) -> Theme:
    """White background, light grid, no axis lines, no boxes."""
    return _complete_theme(
        "minimal", "whitegrid",
        rc={"axes.edgecolor": "white", "grid.color": "#EBEBEB", "xtick.bottom": False, "ytick.left": False},
        style={"strip_background": "none"},
        base_size=base_size,
    )

def theme_classic(base_size: float = 11) -> Theme:
    return _complete_theme(
        "classic", "ticks",
        rc={"axes.edgecolor": "black", "xtick.color": "black", "ytick.color": "black"},
        style={"panel_grid": False, "axis_line": True, "strip_background": "none"},
        base_size=base_size,
    )

def theme_cowplot(font_size: float = 14) -> Theme:
    """Publication theme: white panel, black axis lines, no grid, larger fonts."""
    return _complete_theme(
        "cowplot", "ticks",
        rc={
            "axes.edgecolor": "black",
            "axes.linewidth": 1.0,
            "xtick.color": "black",
            "ytick.color": "black",
            "xtick.major.width": 1.0,
            "ytick.major.width": 1.0,
            "xtick.labelsize": font_size * 0.857,
            "ytick.labelsize": font_size * 0.857,
            "axes.labelsize": font_size,
        },
        style={"panel_grid": False, "axis_line": True, "strip_background": "#F2F2F2"},
        base_size=font_size,
    )


#########################################
##           PARTIAL THEMES            ##
#########################################

def theme(rc: Optional[dict] = None, **style) -> Theme:
    """
    Partial theme merged into the plot's current theme, e.g.
        theme(legend_position="bottom")
        theme(rc={"axes.labelsize": 14})
    """
    unknown = set(style) - set(base_style)
    if unknown:
        raise TypeError(f"[ERROR] Unknown theme element(s): {', '.join(sorted(unknown))}")
    if "legend_position" in style and style["legend_position"] not in LEGEND_POSITIONS:
        raise ValueError(f"[ERROR] legend_position must be one of {', '.join(LEGEND_POSITIONS)}")
    if rc:
        invalid = [k for k in rc if k not in mpl.rcParams]
        if invalid:
            raise ValueError(f"[ERROR] Unknown rc parameter(s): {', '.join(invalid)}")
    return Theme("custom", rc or {}, style, complete=False)
