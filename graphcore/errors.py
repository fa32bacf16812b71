class GraphError(Exception):
    """Base class for every error raised by graphcore."""


class RenderError(GraphError):
    """A render-fatal problem: the whole render is aborted and no document is produced."""


class ViewportError(RenderError):
    pass


class ExpressionError(RenderError):
    def __init__(self, message: str, expression: str = ""):
        super().__init__(message)
        self.expression = expression


class LayerLimitError(GraphError):
    pass


class RasterExportError(GraphError):
    pass
