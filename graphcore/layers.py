import copy
import logging
import re
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

from .config import Viewport, clamp
from .errors import LayerLimitError

logger = logging.getLogger(__name__)

MAX_FUNCS = 4
MAX_POINTSETS = 4
MAX_SEGSETS = 4
MAX_ANNOS = 8

ENDPOINT_NONE = "none"
ENDPOINT_OPEN = "open"
ENDPOINT_CLOSED = "closed"
ENDPOINT_STYLES = (ENDPOINT_NONE, ENDPOINT_OPEN, ENDPOINT_CLOSED)


# --- 1. Layer types ---
@dataclass
class DomainRestriction:
    min: float = -10.0
    max: float = 10.0

    def normalized(self) -> Tuple[float, float]:
        return min(self.min, self.max), max(self.min, self.max)


@dataclass
class EndpointDisplay:
    show: bool = True
    left: str = ENDPOINT_NONE
    right: str = ENDPOINT_NONE
    radius: float = 6.0


@dataclass
class FunctionLayer:
    expression: str = ""
    enabled: bool = True
    label: str = ""
    color: str = "#000000"
    width: float = 2.5
    samples_per_pixel: float = 1.5
    domain: Optional[DomainRestriction] = None
    endpoints: Optional[EndpointDisplay] = None


@dataclass
class PointSet:
    points_text: str = ""
    enabled: bool = True
    label: str = ""
    point_color: str = "#000000"
    point_radius: float = 4.0
    connect_in_order: bool = False
    line_color: str = "#000000"
    line_width: float = 2.0


@dataclass
class SegmentSet:
    segments_text: str = ""
    enabled: bool = True
    label: str = ""
    color: str = "#000000"
    width: float = 2.0


@dataclass
class Annotation:
    id: str
    text: str = "Label"
    x: float = 0.0
    y: float = 0.0
    color: str = "#000000"
    font_size: float = 18
    bold: bool = True
    clip_to_plot: bool = True

    @property
    def position(self) -> Tuple[float, float]:
        return self.x, self.y


# --- 2. Editor-side clamping ---
def sanitize_function(layer: FunctionLayer) -> FunctionLayer:
    domain = layer.domain
    if domain is not None:
        domain = DomainRestriction(clamp(domain.min, -1e6, 1e6), clamp(domain.max, -1e6, 1e6))
    endpoints = layer.endpoints
    if endpoints is not None:
        endpoints = replace(endpoints, radius=clamp(endpoints.radius, 2, 20))
    return replace(layer,
                   width=clamp(layer.width, 0.5, 20),
                   samples_per_pixel=clamp(layer.samples_per_pixel, 0.2, 6),
                   domain=domain,
                   endpoints=endpoints)


def sanitize_point_set(ps: PointSet) -> PointSet:
    return replace(ps, point_radius=clamp(ps.point_radius, 1, 30), line_width=clamp(ps.line_width, 0.5, 20))


def sanitize_segment_set(ss: SegmentSet) -> SegmentSet:
    return replace(ss, width=clamp(ss.width, 0.5, 20))


# --- 3. Render snapshot ---
@dataclass(frozen=True)
class Scene:
    """Immutable copy of the four layer lists handed to one render pass."""
    functions: Tuple[FunctionLayer, ...] = ()
    point_sets: Tuple[PointSet, ...] = ()
    segment_sets: Tuple[SegmentSet, ...] = ()
    annotations: Tuple[Annotation, ...] = ()


_ANNO_ID_RE = re.compile(r"^a(\d+)$")


@dataclass
class LayerStack:
    """Editable layer lists with per-kind caps. Owned by the editing layer, never by a render."""
    functions: List[FunctionLayer] = field(default_factory=list)
    point_sets: List[PointSet] = field(default_factory=list)
    segment_sets: List[SegmentSet] = field(default_factory=list)
    annotations: List[Annotation] = field(default_factory=list)

    max_functions: int = MAX_FUNCS
    max_point_sets: int = MAX_POINTSETS
    max_segment_sets: int = MAX_SEGSETS
    max_annotations: int = MAX_ANNOS

    def _append(self, items: list, item, limit: int, kind: str):
        if len(items) >= limit:
            logger.warning("Rejected new %s: limit of %d reached", kind, limit)
            raise LayerLimitError(f"At most {limit} {kind}s are allowed.")
        items.append(item)
        return item

    def add_function(self, layer: Optional[FunctionLayer] = None) -> FunctionLayer:
        if layer is None:
            layer = FunctionLayer(label=f"f{len(self.functions) + 1}")
        return self._append(self.functions, layer, self.max_functions, "function")

    def add_point_set(self, ps: Optional[PointSet] = None) -> PointSet:
        if ps is None:
            ps = PointSet(label=f"Points {chr(ord('A') + len(self.point_sets))}")
        return self._append(self.point_sets, ps, self.max_point_sets, "point set")

    def add_segment_set(self, ss: Optional[SegmentSet] = None) -> SegmentSet:
        if ss is None:
            ss = SegmentSet(label=f"Segments {chr(ord('A') + len(self.segment_sets))}")
        return self._append(self.segment_sets, ss, self.max_segment_sets, "segment set")

    def next_annotation_id(self) -> str:
        highest = 0
        for a in self.annotations:
            m = _ANNO_ID_RE.match(a.id)
            if m:
                highest = max(highest, int(m.group(1)))
        return f"a{highest + 1}"

    def add_annotation(self, viewport: Viewport, text: str = "Label", **kwargs) -> Annotation:
        """Creates an annotation with a fresh id, placed at the viewport centre."""
        cx, cy = viewport.center
        anno = Annotation(id=self.next_annotation_id(), text=text, x=cx, y=cy, **kwargs)
        return self._append(self.annotations, anno, self.max_annotations, "annotation")

    def find_annotation(self, annotation_id: str) -> Optional[Annotation]:
        for a in self.annotations:
            if a.id == annotation_id:
                return a
        return None

    def move_annotation(self, annotation_id: str, x: float, y: float) -> bool:
        anno = self.find_annotation(annotation_id)
        if anno is None:
            return False
        anno.x, anno.y = x, y
        return True

    def remove_annotation(self, annotation_id: str) -> bool:
        anno = self.find_annotation(annotation_id)
        if anno is None:
            return False
        self.annotations.remove(anno)
        return True

    def snapshot(self) -> Scene:
        return Scene(
            functions=tuple(sanitize_function(f) for f in copy.deepcopy(self.functions)),
            point_sets=tuple(sanitize_point_set(p) for p in copy.deepcopy(self.point_sets)),
            segment_sets=tuple(sanitize_segment_set(s) for s in copy.deepcopy(self.segment_sets)),
            annotations=tuple(copy.deepcopy(self.annotations)),
        )


def default_stack() -> LayerStack:
    """The starter document the editor opens with."""
    return LayerStack(
        functions=[
            FunctionLayer(expression="y = 2x + 3", label="f₁",
                          endpoints=EndpointDisplay(left=ENDPOINT_CLOSED, right=ENDPOINT_CLOSED)),
            FunctionLayer(expression="y = x^2 - 4", label="f₂",
                          endpoints=EndpointDisplay(left=ENDPOINT_OPEN, right=ENDPOINT_OPEN)),
        ],
        point_sets=[
            PointSet(points_text="(-6, 2)\n(-2, 5)\n(0, 0)\n(3, -4)\n(7, 6)", label="Points A"),
        ],
        segment_sets=[
            SegmentSet(segments_text="(-8,-8)->(8,8)\n(-8,8)->(8,-8)", enabled=False, label="Segments A"),
        ],
        annotations=[Annotation(id="a1")],
    )
