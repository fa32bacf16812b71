import math
from dataclasses import dataclass
from typing import Tuple

from .config import PAD_FRACTION, Viewport


@dataclass(frozen=True)
class CoordinateMapper:
    """Affine transform between graph space (y up) and device space (y down).

    The canvas keeps a margin of PAD_FRACTION of its size on every side; the
    remaining square is the inner plot area.
    """
    viewport: Viewport

    @property
    def pad(self) -> int:
        # Half-up rounding, not banker's rounding
        return int(math.floor(self.viewport.size * PAD_FRACTION + 0.5))

    @property
    def inner(self) -> float:
        return self.viewport.size - 2 * self.pad

    @property
    def sx(self) -> float:
        return self.inner / self.viewport.x_span

    @property
    def sy(self) -> float:
        return self.inner / self.viewport.y_span

    @property
    def plot_rect(self) -> Tuple[float, float, float, float]:
        """(x, y, width, height) of the inner plot area in device units."""
        return self.pad, self.pad, self.inner, self.inner

    def x_to_device(self, x: float) -> float:
        return self.pad + (x - self.viewport.xmin) * self.sx

    def y_to_device(self, y: float) -> float:
        return self.pad + self.inner - (y - self.viewport.ymin) * self.sy

    def x_to_graph(self, px: float) -> float:
        return self.viewport.xmin + (px - self.pad) / self.sx

    def y_to_graph(self, py: float) -> float:
        return self.viewport.ymin + (self.inner - (py - self.pad)) / self.sy

    def to_device(self, x: float, y: float) -> Tuple[float, float]:
        return self.x_to_device(x), self.y_to_device(y)

    def to_graph(self, px: float, py: float) -> Tuple[float, float]:
        return self.x_to_graph(px), self.y_to_graph(py)
