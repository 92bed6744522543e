import os
from pathlib import Path
from typing import Optional
import matplotlib as mpl
import matplotlib.pyplot as plt
from gapviz import config
from gapviz.errors import ExportError
from gapviz.grammar import last_plot
from .renderer import render


#########################################
##                PARAMS               ##
#########################################

FORMATS = {
    ".png": "png",
    ".pdf": "pdf",
    ".svg": "svg",
    ".jpg": "jpg",
    ".jpeg": "jpeg",
    ".tif": "tiff",
    ".tiff": "tiff",
    ".eps": "eps",
    ".ps": "ps",
}

# timestamps and version stamps dropped so identical input gives identical bytes
METADATA = {
    "png": {"Software": None},
    "pdf": {"CreationDate": None, "Producer": None, "Creator": None},
    "svg": {"Date": None, "Creator": None},
}

UNITS_PER_INCH = {"in": 1.0, "cm": 2.54, "mm": 25.4}


#########################################
##               HELPER                ##
#########################################

def _format_for(path: Path) -> str:
    fmt = FORMATS.get(path.suffix.lower())
    if fmt is None:
        raise ExportError(f"[ERROR] Unsupported output format '{path.suffix}' for {path}; use one of {', '.join(sorted(FORMATS))}")
    return fmt

def to_inches(value: float, units: str, dpi: float) -> float:
    if units == "px":
        return value / dpi
    if units not in UNITS_PER_INCH:
        raise ValueError(f"[ERROR] units must be one of in, cm, mm, px, got {units!r}")
    return value / UNITS_PER_INCH[units]


#########################################
##                SAVE                 ##
#########################################

def ggsave(
        filename,
        plot=None,
        width: Optional[float] = None,
        height: Optional[float] = None,
        units: str = config.DEFAULT_UNITS,
        dpi: Optional[float] = None,
        create_dir: bool = False,
    ) -> Path:
    """
    Renders `plot` (default: the last plot built) and writes it to `filename`.
    The format follows the extension; an existing file is overwritten.
    Returns the written path.
    """
    path = Path(filename)
    fmt = _format_for(path)
    obj = plot if plot is not None else last_plot()
    if obj is None:
        raise ExportError("[ERROR] No plot to save: build a plot first or pass plot=")

    dpi = dpi or config.DEFAULT_DPI
    w_in = to_inches(width, units, dpi) if width is not None else config.DEFAULT_WIDTH
    h_in = to_inches(height, units, dpi) if height is not None else config.DEFAULT_HEIGHT
    if w_in <= 0 or h_in <= 0:
        raise ValueError(f"[ERROR] width and height must be positive, got {width} x {height} {units}")

    folder = path.parent
    if not folder.exists():
        if create_dir:
            os.makedirs(folder, exist_ok=True)
        else:
            raise ExportError(f"[ERROR] Cannot find directory {folder}; pass create_dir=True to create it")

    fig = render(obj, figsize=(w_in, h_in), dpi=dpi)
    try:
        with mpl.rc_context({"svg.hashsalt": "gapviz"}):
            fig.savefig(
                path,
                format=fmt,
                dpi=dpi,
                metadata=METADATA.get(fmt),
                facecolor="white",
            )
    except OSError as e:
        raise ExportError(f"[ERROR] Could not write {path}: {e}") from e
    finally:
        plt.close(fig)

    return path
