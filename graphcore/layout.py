import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from .config import Style, Viewport
from .mapper import CoordinateMapper

RANGE_EPS = 1e-9
MAJOR_EPS = 1e-9
ZERO_LABEL_EPS = 1e-12

MAJOR_WIDTH_FACTOR = 1.2
MINOR_WIDTH_FACTOR = 0.6
AXIS_WIDTH_FACTOR = 2.2
MAJOR_OPACITY = 0.9
MINOR_OPACITY = 0.35


@dataclass(frozen=True)
class GridLine:
    value: float
    vertical: bool
    major: bool
    start: Tuple[float, float]
    end: Tuple[float, float]
    width: float
    opacity: float


@dataclass(frozen=True)
class AxisLine:
    vertical: bool
    start: Tuple[float, float]
    end: Tuple[float, float]
    width: float


@dataclass(frozen=True)
class TickLabel:
    value: float
    text: str
    x: float
    y: float
    anchor: str  # 'middle' under x ticks, 'end' beside y ticks
    axis: str


@dataclass
class GridLayout:
    gridlines: List[GridLine] = field(default_factory=list)
    axes: List[AxisLine] = field(default_factory=list)
    border: Optional[Tuple[float, float, float, float]] = None
    labels: List[TickLabel] = field(default_factory=list)

    def vertical_lines(self) -> List[GridLine]:
        return [g for g in self.gridlines if g.vertical]

    def horizontal_lines(self) -> List[GridLine]:
        return [g for g in self.gridlines if not g.vertical]


def format_tick(val: float) -> str:
    """Shortest decimal form: ten fixed decimals with trailing zeros and point stripped."""
    if abs(val) < 1e-10:
        val = 0.0
    return f"{val:.10f}".rstrip("0").rstrip(".")


def step_positions(lo: float, hi: float, step: float) -> List[float]:
    """Multiples of ``step`` from the first one >= lo up to hi (inclusive within RANGE_EPS)."""
    start = math.ceil(lo / step) * step
    if start > hi + RANGE_EPS:
        return []
    count = int(math.floor((hi + RANGE_EPS - start) / step)) + 1
    return (start + np.arange(count) * step).tolist()


def is_major(val: float, major_step: float) -> bool:
    ratio = val / major_step
    return abs(ratio - round(ratio)) < MAJOR_EPS


def compute_layout(vp: Viewport, style: Style, mapper: Optional[CoordinateMapper] = None) -> GridLayout:
    m = mapper if mapper is not None else CoordinateMapper(vp)
    out = GridLayout()

    def line_style(major: bool):
        if major:
            return style.stroke_width * MAJOR_WIDTH_FACTOR, MAJOR_OPACITY
        return style.stroke_width * MINOR_WIDTH_FACTOR, MINOR_OPACITY

    # --- Gridlines ---
    for x in step_positions(vp.xmin, vp.xmax, vp.minor_step):
        major = is_major(x, vp.major_step)
        width, opacity = line_style(major)
        px = m.x_to_device(x)
        out.gridlines.append(GridLine(x, True, major, (px, m.y_to_device(vp.ymin)), (px, m.y_to_device(vp.ymax)),
                                      width, opacity))

    for y in step_positions(vp.ymin, vp.ymax, vp.minor_step):
        major = is_major(y, vp.major_step)
        width, opacity = line_style(major)
        py = m.y_to_device(y)
        out.gridlines.append(GridLine(y, False, major, (m.x_to_device(vp.xmin), py), (m.x_to_device(vp.xmax), py),
                                      width, opacity))

    # --- Axes ---
    x_axis_visible = vp.show_axes and vp.contains_y(0)
    y_axis_visible = vp.show_axes and vp.contains_x(0)
    axis_w = style.stroke_width * AXIS_WIDTH_FACTOR
    if y_axis_visible:
        px = m.x_to_device(0)
        out.axes.append(AxisLine(True, (px, m.y_to_device(vp.ymin)), (px, m.y_to_device(vp.ymax)), axis_w))
    if x_axis_visible:
        py = m.y_to_device(0)
        out.axes.append(AxisLine(False, (m.x_to_device(vp.xmin), py), (m.x_to_device(vp.xmax), py), axis_w))

    if vp.show_border:
        out.border = m.plot_rect

    # --- Tick labels ---
    fs = style.font_size
    x_label_y = m.y_to_device(0) if x_axis_visible else m.y_to_device(vp.ymin)
    y_label_x = m.x_to_device(0) if y_axis_visible else m.x_to_device(vp.xmin)

    for x in step_positions(vp.xmin, vp.xmax, vp.label_step):
        if vp.hide_zero_label and abs(x) < ZERO_LABEL_EPS:
            continue
        out.labels.append(TickLabel(x, format_tick(x), m.x_to_device(x), x_label_y + fs + 6, "middle", "x"))

    for y in step_positions(vp.ymin, vp.ymax, vp.label_step):
        if vp.hide_zero_label and abs(y) < ZERO_LABEL_EPS:
            continue
        out.labels.append(TickLabel(y, format_tick(y), y_label_x - 8, m.y_to_device(y) + fs / 2 - 2, "end", "y"))

    return out
