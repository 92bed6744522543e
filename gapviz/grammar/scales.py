from dataclasses import dataclass
from typing import Optional, Sequence
import numpy as np


#########################################
##              TRANSFORMS             ##
#########################################

def _identity(values):
    return np.asarray(values, dtype=float)

def _log10(values):
    values = np.asarray(values, dtype=float)
    with np.errstate(divide="ignore", invalid="ignore"):
        out = np.log10(values)
    out[~(values > 0)] = np.nan
    return out

def _pow10(values):
    return np.power(10.0, np.asarray(values, dtype=float))

TRANSFORMS = {
    "identity": (_identity, _identity),
    "log10": (_log10, _pow10),
}


#########################################
##                SCALES               ##
#########################################

@dataclass(frozen=True)
class ContinuousScale:
    """
    Position scale for x or y.
    limits/breaks are given in data units, the transform is applied before
    statistics are computed and reverted for drawing.
    """
    aesthetic: str
    name: Optional[str] = None
    limits: Optional[tuple] = None
    breaks: Optional[tuple] = None
    labels: Optional[tuple] = None
    trans: str = "identity"

    def __post_init__(self):
        if self.aesthetic not in ("x", "y"):
            raise ValueError(f"[ERROR] Position scales exist for x and y only, got {self.aesthetic}")
        if self.trans not in TRANSFORMS:
            raise ValueError(f"[ERROR] Unknown transform: {self.trans}")
        if self.limits is not None:
            if len(self.limits) != 2:
                raise ValueError(f"[ERROR] limits must be a pair, got {self.limits}")
            object.__setattr__(self, "limits", tuple(self.limits))
        if self.breaks is not None:
            object.__setattr__(self, "breaks", tuple(self.breaks))
        if self.labels is not None:
            object.__setattr__(self, "labels", tuple(self.labels))
            if self.breaks is None or len(self.labels) != len(self.breaks):
                raise ValueError("[ERROR] labels need breaks of the same length")

    @property
    def is_log(self) -> bool:
        return self.trans == "log10"

    def transform(self, values) -> np.ndarray:
        return TRANSFORMS[self.trans][0](values)

    def inverse(self, values) -> np.ndarray:
        return TRANSFORMS[self.trans][1](values)

    def out_of_bounds(self, values) -> np.ndarray:
        """Boolean mask of values that cannot be shown: outside limits or invalid after transform."""
        values = np.asarray(values, dtype=float)
        mask = ~np.isfinite(self.transform(values))
        if self.limits is not None:
            lo, hi = self.limits
            if lo is not None:
                mask |= values < lo
            if hi is not None:
                mask |= values > hi
        return mask


def scale_x_continuous(name: Optional[str] = None, limits: Optional[Sequence] = None, breaks: Optional[Sequence] = None, labels: Optional[Sequence] = None, trans: str = "identity") -> ContinuousScale:
    return ContinuousScale("x", name, limits, breaks, labels, trans)

def scale_y_continuous(name: Optional[str] = None, limits: Optional[Sequence] = None, breaks: Optional[Sequence] = None, labels: Optional[Sequence] = None, trans: str = "identity") -> ContinuousScale:
    return ContinuousScale("y", name, limits, breaks, labels, trans)

def scale_x_log10(name: Optional[str] = None, limits: Optional[Sequence] = None, breaks: Optional[Sequence] = None, labels: Optional[Sequence] = None) -> ContinuousScale:
    """Log10 x axis; smoothing is fitted against log10(x)."""
    return ContinuousScale("x", name, limits, breaks, labels, "log10")

def scale_y_log10(name: Optional[str] = None, limits: Optional[Sequence] = None, breaks: Optional[Sequence] = None, labels: Optional[Sequence] = None) -> ContinuousScale:
    return ContinuousScale("y", name, limits, breaks, labels, "log10")

def seq(start: float, stop: float, by: float) -> tuple:
    """Inclusive arithmetic sequence, handy for breaks: seq(0, 100, by=10)."""
    if by <= 0:
        raise ValueError(f"[ERROR] by must be positive, got {by}")
    n = int(np.floor((stop - start) / by + 1e-9)) + 1
    return tuple(start + i * by for i in range(n))
