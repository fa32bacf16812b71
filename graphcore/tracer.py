"""
Curve tracing for function layers.

The function is sampled evenly across its effective domain and split into
runs wherever the pen has to lift: a sample that fails to evaluate, is not
finite, or falls outside the visible y-range ends the current run. A value
that jumps by more than ``JUMP_FACTOR`` visible y-spans from the last
in-range sample also lifts the pen (a visual asymptote guard). Runs and
endpoint markers are returned in device space.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from .config import Viewport
from .expression import CompiledFunction, ExpressionCompiler, default_compiler
from .layers import ENDPOINT_NONE, ENDPOINT_OPEN, FunctionLayer
from .mapper import CoordinateMapper

logger = logging.getLogger(__name__)

MIN_BASE_SAMPLES = 250
MIN_SAMPLES = 140
JUMP_FACTOR = 2.5
MARKER_STROKE_RANGE = (1.0, 8.0)


@dataclass(frozen=True)
class EndpointMarker:
    cx: float
    cy: float
    r: float
    fill: str
    stroke: str
    stroke_width: float
    side: str  # 'left' or 'right'
    style: str  # 'open' or 'closed'


@dataclass
class CurveTrace:
    color: str
    width: float
    runs: List[List[Tuple[float, float]]] = field(default_factory=list)
    markers: List[EndpointMarker] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.runs and not self.markers

    def path_data(self) -> str:
        parts = []
        for run in self.runs:
            for i, (px, py) in enumerate(run):
                parts.append(f"{'L' if i else 'M'} {px} {py}")
        return " ".join(parts)


def effective_domain(layer: FunctionLayer, vp: Viewport) -> Optional[Tuple[float, float]]:
    """Viewport x-range intersected with the layer's restriction; None when empty."""
    x_start, x_end = vp.xmin, vp.xmax
    if layer.domain is not None:
        d_min, d_max = layer.domain.normalized()
        x_start = max(vp.xmin, d_min)
        x_end = min(vp.xmax, d_max)
    if not (x_end > x_start):
        return None
    return x_start, x_end


def sample_count(layer: FunctionLayer, vp: Viewport, mapper: CoordinateMapper, x_start: float, x_end: float) -> int:
    base = max(MIN_BASE_SAMPLES, mapper.inner)
    domain_frac = (x_end - x_start) / vp.x_span
    return max(MIN_SAMPLES, int(math.floor(base * layer.samples_per_pixel * domain_frac)))


def safe_evaluate(fn: CompiledFunction, x_val: float) -> Optional[float]:
    """Returns a finite value or None. Any evaluation failure counts as None."""
    try:
        val = float(fn(x_val))
    except Exception:
        return None
    return val if math.isfinite(val) else None


def trace_runs(fn: CompiledFunction, xs, vp: Viewport) -> List[List[Tuple[float, float]]]:
    """Splits sampled values into in-range runs of graph-space points."""
    jump_threshold = vp.y_span * JUMP_FACTOR
    runs: List[List[Tuple[float, float]]] = []
    current: List[Tuple[float, float]] = []
    prev_y: Optional[float] = None

    for x in xs:
        y = safe_evaluate(fn, x)
        in_range = y is not None and vp.ymin <= y <= vp.ymax
        big_jump = prev_y is not None and in_range and abs(y - prev_y) > jump_threshold

        if not in_range or big_jump:
            if current:
                runs.append(current)
                current = []
            prev_y = y if in_range else None
            continue

        current.append((x, y))
        prev_y = y

    if current:
        runs.append(current)
    return runs


def endpoint_marker(px: float, py: float, r: float, mode: str, color: str, stroke_w: float,
                    background: str, side: str) -> Optional[EndpointMarker]:
    if mode == ENDPOINT_NONE:
        return None
    if mode == ENDPOINT_OPEN:
        return EndpointMarker(px, py, r, fill=background, stroke=color, stroke_width=stroke_w, side=side, style=mode)
    return EndpointMarker(px, py, r, fill=color, stroke=color, stroke_width=stroke_w, side=side, style=mode)


def trace_function(layer: FunctionLayer, vp: Viewport, background: str = "#ffffff",
                   compiler: Optional[ExpressionCompiler] = None,
                   mapper: Optional[CoordinateMapper] = None) -> Optional[CurveTrace]:
    """Traces one function layer. Returns None when the layer contributes nothing.

    Raises ExpressionError for an empty or unparseable expression.
    """
    if not layer.enabled:
        return None
    domain = effective_domain(layer, vp)
    if domain is None:
        return None
    x_start, x_end = domain

    mapper = mapper if mapper is not None else CoordinateMapper(vp)
    compiler = compiler if compiler is not None else default_compiler()

    samples = sample_count(layer, vp, mapper, x_start, x_end)
    fn = compiler.compile(layer.expression)
    xs = np.linspace(x_start, x_end, samples).tolist()

    graph_runs = trace_runs(fn, xs, vp)
    logger.debug("Traced %r with %d samples into %d run(s)", layer.expression, samples, len(graph_runs))

    trace = CurveTrace(color=layer.color, width=layer.width)
    trace.runs = [[mapper.to_device(x, y) for x, y in run] for run in graph_runs]

    ep = layer.endpoints
    if layer.domain is not None and ep is not None and ep.show:
        stroke_w = max(MARKER_STROKE_RANGE[0], min(MARKER_STROKE_RANGE[1], layer.width))
        for side, x_val, mode in (("left", x_start, ep.left), ("right", x_end, ep.right)):
            y = safe_evaluate(fn, x_val)
            if y is None or not vp.contains_y(y):
                continue
            px, py = mapper.to_device(x_val, y)
            marker = endpoint_marker(px, py, ep.radius, mode, layer.color, stroke_w, background, side)
            if marker is not None:
                trace.markers.append(marker)

    return trace
