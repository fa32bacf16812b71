import math
import os
from dataclasses import dataclass, replace
from typing import Optional

from .errors import ViewportError

# Editor-enforced limits on the canvas
MIN_CANVAS_SIZE = 200
MAX_CANVAS_SIZE = 2400

# Fraction of the canvas reserved as margin on every side
PAD_FRACTION = 0.08

# Editor-enforced limits on positive grid steps
MIN_STEP = 0.1
MAX_STEP = 1000.0

# Most gridlines or labels one step may produce along an axis
MAX_GRID_LINES = 10000


# --- 1. Viewport & Style ---
@dataclass(frozen=True)
class Viewport:
    xmin: float = -10.0
    xmax: float = 10.0
    ymin: float = -10.0
    ymax: float = 10.0

    minor_step: float = 1.0
    major_step: float = 5.0
    label_step: float = 2.0

    hide_zero_label: bool = True
    show_axes: bool = True
    show_border: bool = True

    # Square canvas edge in device units
    size: int = 760

    @property
    def x_span(self) -> float:
        return self.xmax - self.xmin

    @property
    def y_span(self) -> float:
        return self.ymax - self.ymin

    @property
    def center(self):
        return (self.xmin + self.xmax) / 2, (self.ymin + self.ymax) / 2

    def contains_x(self, x: float) -> bool:
        return self.xmin <= x <= self.xmax

    def contains_y(self, y: float) -> bool:
        return self.ymin <= y <= self.ymax


@dataclass(frozen=True)
class Style:
    stroke: str = "#000000"
    stroke_width: float = 1.5
    background: str = "#ffffff"
    font_family: str = "Arial, system-ui, sans-serif"
    font_size: int = 14


def clamp(n: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, n))


def validate_viewport(vp: Viewport) -> Viewport:
    """Raises ViewportError unless the viewport can be rendered.

    Written as negated comparisons so NaN bounds are rejected too.
    """
    if not (vp.xmax > vp.xmin) or not (vp.ymax > vp.ymin):
        raise ViewportError("Ranges must satisfy xmax > xmin and ymax > ymin.")
    if not (vp.minor_step > 0) or not (vp.major_step > 0) or not (vp.label_step > 0):
        raise ViewportError("Steps must be > 0.")
    for value in (vp.xmin, vp.xmax, vp.ymin, vp.ymax, vp.minor_step, vp.major_step, vp.label_step):
        if not math.isfinite(value):
            raise ViewportError("Viewport values must be finite numbers.")
    for step in (vp.minor_step, vp.label_step):
        if max(vp.x_span, vp.y_span) / step > MAX_GRID_LINES:
            raise ViewportError(f"Grid is too dense: at most {MAX_GRID_LINES} lines per axis.")
    return vp


def _clamp_step(step: float) -> float:
    # non-positive and non-finite steps pass through for validate_viewport to reject
    if step > 0 and math.isfinite(step):
        return clamp(step, MIN_STEP, MAX_STEP)
    return step


def sanitize_viewport(vp: Viewport) -> Viewport:
    """Clamps canvas size and positive grid steps into the ranges the editor allows."""
    size = int(round(clamp(vp.size, MIN_CANVAS_SIZE, MAX_CANVAS_SIZE)))
    return replace(vp, size=size, minor_step=_clamp_step(vp.minor_step),
                   major_step=_clamp_step(vp.major_step), label_step=_clamp_step(vp.label_step))


# --- 2. Runtime settings ---
@dataclass(frozen=True)
class Settings:
    log_level: str = "WARNING"
    expression_cache_size: Optional[int] = None


def load_settings(environ=None) -> Settings:
    """Reads GRAPHCORE_* environment variables. Malformed values fall back to defaults."""
    env = os.environ if environ is None else environ

    level = env.get("GRAPHCORE_LOG_LEVEL", "WARNING").strip().upper() or "WARNING"

    cache_size = None
    raw = env.get("GRAPHCORE_EXPRESSION_CACHE_SIZE", "").strip()
    if raw:
        try:
            parsed = int(raw)
        except ValueError:
            parsed = 0
        if parsed > 0:
            cache_size = parsed

    return Settings(log_level=level, expression_cache_size=cache_size)
