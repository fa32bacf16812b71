import logging
from dataclasses import dataclass, field
from typing import List, Optional

import svgwrite

from .annotations import ANNO_ID_ATTR, AnnotationNode, place_annotations
from .config import Style, Viewport, sanitize_viewport, validate_viewport
from .expression import ExpressionCompiler, default_compiler
from .layers import PointSet, Scene, SegmentSet
from .layout import GridLayout, compute_layout
from .mapper import CoordinateMapper
from .parsers import parse_points, parse_segments
from .tracer import CurveTrace, trace_function

logger = logging.getLogger(__name__)

CLIP_ID = "plotClip"


@dataclass(frozen=True)
class RenderedGraph:
    svg: str
    size: int
    mapper: CoordinateMapper
    background: str = "#ffffff"


@dataclass
class _Overlays:
    traces: List[CurveTrace] = field(default_factory=list)
    clipped_notes: List[AnnotationNode] = field(default_factory=list)
    free_notes: List[AnnotationNode] = field(default_factory=list)


# --- The Graph Engine ---
class GraphEngine:
    """Composites grid, axes, labels and the layer overlays into one SVG document.

    Z-order, bottom to top: background, gridlines, clipped data layers
    (segments, functions, points), axes, border, tick labels, clipped
    annotations, unclipped annotations.
    """

    def __init__(self, viewport: Viewport = Viewport(), style: Style = Style(),
                 compiler: Optional[ExpressionCompiler] = None):
        self.vp = validate_viewport(sanitize_viewport(viewport))
        self.style = style
        self.compiler = compiler if compiler is not None else default_compiler()
        self.mapper = CoordinateMapper(self.vp)
        self.clip_id = CLIP_ID
        self.dwg = None

    def render(self, scene: Scene = Scene()) -> RenderedGraph:
        """Builds a fresh document. Raises RenderError before anything is drawn."""
        overlays = self._collect_overlays(scene)
        layout = compute_layout(self.vp, self.style, self.mapper)

        size = self.vp.size
        self.dwg = svgwrite.Drawing(size=(size, size), viewBox=f"0 0 {size} {size}", debug=False)
        clip = self.dwg.clipPath(id=self.clip_id)
        clip.add(self.dwg.rect(insert=(self.mapper.pad, self.mapper.pad), size=(self.mapper.inner, self.mapper.inner)))
        self.dwg.defs.add(clip)

        self.dwg.add(self.dwg.rect(insert=(0, 0), size=("100%", "100%"), fill=self.style.background))
        self.draw_grid_lines(layout)

        data_group = self._clipped_group()
        for ss in scene.segment_sets:
            self.draw_segment_set(ss, data_group)
        for trace in overlays.traces:
            self.plot_function(trace, data_group)
        for ps in scene.point_sets:
            self.draw_point_set(ps, data_group)
        self.dwg.add(data_group)

        self.draw_axes(layout)
        self.draw_border(layout)
        self.draw_axis_labels(layout)

        note_group = self._clipped_group()
        self.draw_annotations(overlays.clipped_notes, note_group)
        self.dwg.add(note_group)
        self.draw_annotations(overlays.free_notes, self.dwg)

        logger.debug("Rendered %d function trace(s), %d annotation(s)", len(overlays.traces),
                     len(overlays.clipped_notes) + len(overlays.free_notes))
        return RenderedGraph(svg=self.get_svg_string(), size=size, mapper=self.mapper,
                             background=self.style.background)

    def _collect_overlays(self, scene: Scene) -> _Overlays:
        out = _Overlays()
        for layer in scene.functions:
            trace = trace_function(layer, self.vp, background=self.style.background,
                                   compiler=self.compiler, mapper=self.mapper)
            if trace is not None:
                out.traces.append(trace)
        out.clipped_notes, out.free_notes = place_annotations(scene.annotations, self.vp, self.style, self.mapper)
        return out

    def _clipped_group(self):
        return self.dwg.g(clip_path=f"url(#{self.clip_id})")

    def draw_grid_lines(self, layout: GridLayout):
        for gl in layout.gridlines:
            self.dwg.add(self.dwg.line(start=gl.start, end=gl.end, stroke=self.style.stroke,
                                       stroke_width=gl.width, opacity=gl.opacity))

    def draw_axes(self, layout: GridLayout):
        for axis in layout.axes:
            self.dwg.add(self.dwg.line(start=axis.start, end=axis.end, stroke=self.style.stroke,
                                       stroke_width=axis.width, opacity=1))

    def draw_border(self, layout: GridLayout):
        if layout.border is None:
            return
        x, y, w, h = layout.border
        self.dwg.add(self.dwg.rect(insert=(x, y), size=(w, h), fill="none",
                                   stroke=self.style.stroke, stroke_width=self.style.stroke_width))

    def draw_axis_labels(self, layout: GridLayout):
        s = self.style
        for lbl in layout.labels:
            self.dwg.add(self.dwg.text(lbl.text, insert=(lbl.x, lbl.y), text_anchor=lbl.anchor,
                                       font_family=s.font_family, font_size=s.font_size, fill=s.stroke))

    def plot_function(self, trace: CurveTrace, container):
        d = trace.path_data()
        if d:
            container.add(self.dwg.path(d=d, fill="none", stroke=trace.color, stroke_width=trace.width,
                                        class_="function-layer"))
        for mk in trace.markers:
            container.add(self.dwg.circle(center=(mk.cx, mk.cy), r=mk.r, fill=mk.fill, stroke=mk.stroke,
                                          stroke_width=mk.stroke_width, class_=f"endpoint endpoint-{mk.style}"))

    def draw_point_set(self, ps: PointSet, container):
        if not ps.enabled:
            return
        pts = parse_points(ps.points_text)
        if not pts:
            return
        screen = [self.mapper.to_device(x, y) for x, y in pts]

        if ps.connect_in_order and len(screen) >= 2:
            d = " ".join(f"{'L' if i else 'M'} {px} {py}" for i, (px, py) in enumerate(screen))
            container.add(self.dwg.path(d=d, fill="none", stroke=ps.line_color, stroke_width=ps.line_width))

        for px, py in screen:
            container.add(self.dwg.circle(center=(px, py), r=ps.point_radius, fill=ps.point_color))

    def draw_segment_set(self, ss: SegmentSet, container):
        if not ss.enabled:
            return
        for (x1, y1), (x2, y2) in parse_segments(ss.segments_text):
            container.add(self.dwg.line(start=self.mapper.to_device(x1, y1), end=self.mapper.to_device(x2, y2),
                                        stroke=ss.color, stroke_width=ss.width))

    def draw_annotations(self, nodes: List[AnnotationNode], container):
        for node in nodes:
            text = self.dwg.text(node.text, insert=(node.x, node.y), fill=node.color, font_size=node.font_size,
                                 font_family=node.font_family, font_weight=node.font_weight,
                                 dominant_baseline="middle", text_anchor="middle")
            text[ANNO_ID_ATTR] = node.id
            container.add(text)

    def get_svg_string(self) -> str:
        return self.dwg.tostring()


def render_graph(viewport: Viewport, style: Style = Style(), scene: Scene = Scene(),
                 compiler: Optional[ExpressionCompiler] = None) -> RenderedGraph:
    """One-shot render of a configuration snapshot."""
    return GraphEngine(viewport, style, compiler=compiler).render(scene)
