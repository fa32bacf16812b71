import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .config import Style, Viewport
from .layers import Annotation, LayerStack
from .mapper import CoordinateMapper

logger = logging.getLogger(__name__)

ANNO_ID_ATTR = "data-anno-id"


@dataclass(frozen=True)
class AnnotationNode:
    """A text node placed in device space, centred on its anchor."""
    id: str
    text: str
    x: float
    y: float
    color: str
    font_size: float
    font_family: str
    font_weight: str
    clip_to_plot: bool


def place_annotations(annotations: Iterable[Annotation], vp: Viewport, style: Style,
                      mapper: Optional[CoordinateMapper] = None) -> Tuple[List[AnnotationNode], List[AnnotationNode]]:
    """Maps annotations to device space, split into (clipped, unclipped) in input order."""
    m = mapper if mapper is not None else CoordinateMapper(vp)
    clipped, free = [], []
    for a in annotations:
        px, py = m.to_device(a.x, a.y)
        node = AnnotationNode(id=a.id, text=a.text, x=px, y=py, color=a.color, font_size=a.font_size,
                              font_family=style.font_family, font_weight="700" if a.bold else "400",
                              clip_to_plot=a.clip_to_plot)
        (clipped if a.clip_to_plot else free).append(node)
    return clipped, free


# --- Drag commands ---
class DragSession:
    """begin / move / commit for dragging one annotation node.

    Pointer positions are device-space. The node follows the pointer delta from
    the press position; commit converts the final node position back to graph
    space. The session never touches the layer list itself.
    """

    def __init__(self, mapper: CoordinateMapper):
        self.mapper = mapper
        self.annotation_id: Optional[str] = None
        self._origin: Tuple[float, float] = (0.0, 0.0)
        self._press: Tuple[float, float] = (0.0, 0.0)
        self.position: Tuple[float, float] = (0.0, 0.0)

    @property
    def active(self) -> bool:
        return self.annotation_id is not None

    def begin(self, annotation_id: str, node_pos: Tuple[float, float], pointer_pos: Tuple[float, float]) -> None:
        self.annotation_id = annotation_id
        self._origin = node_pos
        self._press = pointer_pos
        self.position = node_pos

    def move(self, pointer_pos: Tuple[float, float]) -> Tuple[float, float]:
        if not self.active:
            raise RuntimeError("move() called without begin()")
        dx = pointer_pos[0] - self._press[0]
        dy = pointer_pos[1] - self._press[1]
        self.position = (self._origin[0] + dx, self._origin[1] + dy)
        return self.position

    def commit(self) -> Tuple[str, float, float]:
        """Ends the drag and returns (annotation_id, graph_x, graph_y)."""
        if not self.active:
            raise RuntimeError("commit() called without begin()")
        gx, gy = self.mapper.to_graph(*self.position)
        anno_id = self.annotation_id
        self.annotation_id = None
        return anno_id, gx, gy


def apply_drag_event(event: dict, mapper: CoordinateMapper, stack: LayerStack) -> Optional[Tuple[str, float, float]]:
    """Replays a viewer drag release through a DragSession and moves the annotation.

    ``event`` carries ``id`` plus the node's device position at press (``start``)
    and at release (``end``). Returns the committed (id, graph_x, graph_y), or
    None when the annotation no longer exists.
    """
    start = tuple(event["start"])
    session = DragSession(mapper)
    session.begin(event["id"], start, start)
    session.move(tuple(event["end"]))
    committed = session.commit()
    if not stack.move_annotation(*committed):
        logger.warning("Ignored drag for unknown annotation %r", committed[0])
        return None
    return committed
