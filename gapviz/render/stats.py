"""
Statistical transforms computed before drawing:
- smooth_lm : least-squares trend with a Student-t confidence band
- boxplot_stats : Tukey box-and-whisker summary
Both operate on already-transformed (scale space) values.
"""

import numpy as np
import pandas as pd
from scipy import stats as sps
from sklearn.linear_model import LinearRegression


#########################################
##              SMOOTHING              ##
#########################################

def smooth_lm(
        x: np.ndarray,
        y: np.ndarray,
        n: int = 80,
        se: bool = True,
        level: float = 0.95
    ) -> pd.DataFrame:
    """
    Fits y ~ x and evaluates the fit on n evenly spaced points over the x range.
    Returns columns x, y, ymin, ymax (band columns are NaN without se or with
    fewer than 3 observations). Groups with fewer than 2 distinct x are skipped.
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    ok = np.isfinite(x) & np.isfinite(y)
    x, y = x[ok], y[ok]
    if len(np.unique(x)) < 2:
        return pd.DataFrame(columns=["x", "y", "ymin", "ymax"], dtype=float)

    model = LinearRegression()
    model.fit(x.reshape(-1, 1), y)

    grid = np.linspace(x.min(), x.max(), n)
    fit = model.predict(grid.reshape(-1, 1))

    ymin = np.full(n, np.nan)
    ymax = np.full(n, np.nan)
    dof = len(x) - 2
    if se and dof > 0:
        resid = y - model.predict(x.reshape(-1, 1))
        sigma = np.sqrt(np.sum(resid ** 2) / dof)
        sxx = np.sum((x - x.mean()) ** 2)
        se_fit = sigma * np.sqrt(1.0 / len(x) + (grid - x.mean()) ** 2 / sxx)
        tcrit = sps.t.ppf((1 + level) / 2, dof)
        ymin = fit - tcrit * se_fit
        ymax = fit + tcrit * se_fit

    return pd.DataFrame({"x": grid, "y": fit, "ymin": ymin, "ymax": ymax})


#########################################
##               BOXPLOT               ##
#########################################

def boxplot_stats(y: np.ndarray, coef: float = 1.5) -> dict:
    """
    Quartiles (linear interpolation), whiskers at the most extreme observations
    within coef * IQR of the box, everything beyond as outliers.
    Keys follow matplotlib's Axes.bxp: med, q1, q3, whislo, whishi, fliers.
    """
    y = np.asarray(y, dtype=float)
    y = y[np.isfinite(y)]
    if len(y) == 0:
        raise ValueError("[ERROR] boxplot_stats needs at least one finite value")

    q1, med, q3 = np.percentile(y, [25, 50, 75])
    iqr = q3 - q1
    lo_fence = q1 - coef * iqr
    hi_fence = q3 + coef * iqr

    inside = y[(y >= lo_fence) & (y <= hi_fence)]
    whislo = inside.min() if len(inside) else q1
    whishi = inside.max() if len(inside) else q3
    fliers = y[(y < lo_fence) | (y > hi_fence)]

    return {
        "med": med,
        "q1": q1,
        "q3": q3,
        "whislo": whislo,
        "whishi": whishi,
        "fliers": np.sort(fliers),
        "n": len(y),
    }
