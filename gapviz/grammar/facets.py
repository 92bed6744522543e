import abc
import math
from dataclasses import dataclass
from typing import Optional, Sequence, Union


#########################################
##                PARAMS               ##
#########################################

SCALES_MODES = ("fixed", "free", "free_x", "free_y")

FacetSpec = Union[str, Sequence[str], None]


#########################################
##               HELPER                ##
#########################################

def _parse_side(side: str) -> tuple:
    side = side.strip()
    if side in ("", "."):
        return ()
    return tuple(part.strip() for part in side.split("+") if part.strip())

def _parse_fields(spec: FacetSpec) -> tuple:
    if spec is None:
        return ()
    if isinstance(spec, str):
        if "~" not in spec:
            return _parse_side(spec)
        lhs, rhs = spec.split("~", 1)
        if _parse_side(lhs) or "~" in rhs:
            raise ValueError(
                f"[ERROR] Expected a one-sided formula such as '~ a + b', got {spec!r}; "
                "use facet_grid for 'rows ~ cols'"
            )
        return _parse_side(rhs)
    return tuple(spec)

def _check_scales(scales: str) -> str:
    if scales not in SCALES_MODES:
        raise ValueError(f"[ERROR] scales must be one of {', '.join(SCALES_MODES)}, got {scales!r}")
    return scales

def wrap_dims(n: int, ncol: Optional[int] = None, nrow: Optional[int] = None) -> tuple:
    """Grid shape (nrow, ncol) for n wrapped panels."""
    if n < 1:
        return (1, 1)
    if ncol is None and nrow is None:
        ncol = math.ceil(math.sqrt(n))
        nrow = math.ceil(n / ncol)
    elif ncol is None:
        ncol = math.ceil(n / nrow)
    elif nrow is None:
        nrow = math.ceil(n / ncol)
    if nrow * ncol < n:
        raise ValueError(f"[ERROR] {nrow} x {ncol} grid cannot hold {n} panels")
    return (nrow, ncol)


#########################################
##               FACETS                ##
#########################################

@dataclass(frozen=True)
class Facet(abc.ABC):
    scales: str = "fixed"

    @property
    def share_x(self) -> bool:
        return self.scales in ("fixed", "free_y")

    @property
    def share_y(self) -> bool:
        return self.scales in ("fixed", "free_x")

    @property
    @abc.abstractmethod
    def fields(self) -> tuple:
        """Facet fields in panel-key order."""


@dataclass(frozen=True)
class FacetWrap(Facet):
    facets: tuple = ()
    ncol: Optional[int] = None
    nrow: Optional[int] = None

    @property
    def fields(self) -> tuple:
        return self.facets

    def dims(self, n: int) -> tuple:
        return wrap_dims(n, self.ncol, self.nrow)


@dataclass(frozen=True)
class FacetGrid(Facet):
    rows: tuple = ()
    cols: tuple = ()

    @property
    def fields(self) -> tuple:
        return self.rows + self.cols


def facet_wrap(facets: FacetSpec, ncol: Optional[int] = None, nrow: Optional[int] = None, scales: str = "fixed") -> FacetWrap:
    """
    One panel per distinct value of `facets`, wrapped into a grid.
    `facets` can be a field name, a formula such as "~ continent" or a list of fields.
    """
    fields = _parse_fields(facets)
    if not fields:
        raise ValueError("[ERROR] facet_wrap needs at least one field")
    for value, label in ((ncol, "ncol"), (nrow, "nrow")):
        if value is not None and value < 1:
            raise ValueError(f"[ERROR] {label} must be positive, got {value}")
    return FacetWrap(scales=_check_scales(scales), facets=fields, ncol=ncol, nrow=nrow)

def facet_grid(rows: FacetSpec = None, cols: FacetSpec = None, scales: str = "fixed") -> FacetGrid:
    """Panels on a rows x cols lattice. A formula "rows ~ cols" may be passed as `rows`."""
    if isinstance(rows, str) and "~" in rows:
        if cols is not None:
            raise ValueError("[ERROR] pass either a formula or rows/cols, not both")
        lhs, rhs = rows.split("~", 1)
        row_fields, col_fields = _parse_side(lhs), _parse_side(rhs)
    else:
        row_fields, col_fields = _parse_fields(rows), _parse_fields(cols)
    if not row_fields and not col_fields:
        raise ValueError("[ERROR] facet_grid needs rows or cols")
    return FacetGrid(scales=_check_scales(scales), rows=row_fields, cols=col_fields)
