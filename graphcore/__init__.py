from .config import Settings, Style, Viewport, load_settings, validate_viewport
from .errors import (
    ExpressionError,
    GraphError,
    LayerLimitError,
    RasterExportError,
    RenderError,
    ViewportError,
)
from .expression import ExpressionCache, ExpressionCompiler, SympyEvaluator
from .graph_maker import GraphEngine, RenderedGraph, render_graph
from .layers import (
    Annotation,
    DomainRestriction,
    EndpointDisplay,
    FunctionLayer,
    LayerStack,
    PointSet,
    Scene,
    SegmentSet,
)
from .mapper import CoordinateMapper
