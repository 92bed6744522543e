"""Rectangles on a normalized canvas and the regions a plot occupies inside one."""

from dataclasses import dataclass

EPS = 1e-9


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in normalized [0, 1] canvas units, origin bottom-left."""
    x: float = 0.0
    y: float = 0.0
    width: float = 1.0
    height: float = 1.0

    def __post_init__(self):
        for name in ("x", "y", "width", "height"):
            value = getattr(self, name)
            if not 0.0 - EPS <= value <= 1.0 + EPS:
                raise ValueError(f"[ERROR] {name}={value} is outside the normalized canvas [0, 1]")
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"[ERROR] width and height must be positive, got {self.width} x {self.height}")
        if self.x + self.width > 1.0 + EPS or self.y + self.height > 1.0 + EPS:
            raise ValueError(f"[ERROR] Rectangle {self} extends beyond the canvas")

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def top(self) -> float:
        return self.y + self.height

    def overlaps(self, other: "Rect") -> bool:
        """True when both rectangles share positive area; touching edges do not count."""
        dx = min(self.right, other.right) - max(self.x, other.x)
        dy = min(self.top, other.top) - max(self.y, other.y)
        return dx > EPS and dy > EPS

    def within(self, parent: "Rect") -> "Rect":
        """This rectangle, given relative to `parent`, in the parent's own coordinates."""
        return Rect(
            parent.x + self.x * parent.width,
            parent.y + self.y * parent.height,
            self.width * parent.width,
            self.height * parent.height,
        )

    def as_bounds(self) -> list:
        return [self.x, self.y, self.width, self.height]


UNIT = Rect()


#########################################
##            PLOT REGIONS             ##
#########################################

@dataclass(frozen=True)
class Regions:
    """Figure-fraction coordinates of the parts of one plot."""
    left: float
    right: float
    bottom: float
    top: float
    title_y: float
    legend_x: float
    legend_y: float
    outer: Rect


def plot_regions(
        rect: Rect,
        fig_size: tuple,
        title_lines: int = 0,
        legend: str = "none",
        legend_size: float = 0.0,
        strip_rows: bool = False,
        caption: bool = False,
    ) -> Regions:
    """
    Splits `rect` into a panel area and margins. Margins are given in inches
    and converted to figure fractions, so they stay constant across sizes.
    `legend` is 'right', 'bottom' or 'none'; `legend_size` its extent in inches.
    """
    W, H = fig_size
    pad_left, pad_right, pad_bottom, pad_top = 0.75, 0.15, 0.6, 0.15
    title_h = 0.3 * title_lines
    strip_h = 0.25 if strip_rows else 0.0
    caption_h = 0.25 if caption else 0.0

    legend_w = legend_size if legend == "right" else 0.0
    legend_h = legend_size if legend == "bottom" else 0.0

    left = rect.x + pad_left / W
    right = rect.right - (pad_right + legend_w) / W
    bottom = rect.y + (pad_bottom + legend_h + caption_h) / H
    top = rect.top - (pad_top + title_h + strip_h) / H

    # too small for fixed margins: fall back to proportional ones
    if right - left < 0.2 * rect.width:
        left = rect.x + 0.15 * rect.width
        right = rect.right - (0.05 + (0.25 if legend == "right" else 0.0)) * rect.width
    if top - bottom < 0.2 * rect.height:
        bottom = rect.y + (0.15 + (0.15 if legend == "bottom" else 0.0)) * rect.height
        top = rect.top - (0.05 + 0.08 * title_lines) * rect.height

    return Regions(
        left=left,
        right=right,
        bottom=bottom,
        top=top,
        title_y=rect.top - pad_top / H,
        legend_x=right + 0.1 / W if legend == "right" else (left + right) / 2,
        legend_y=(bottom + top) / 2 if legend == "right" else rect.y + (0.1 + caption_h) / H + legend_h / (2 * H),
        outer=rect,
    )
