import logging
import math
import re
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

Point = Tuple[float, float]
Segment = Tuple[Point, Point]

NUMBER_RE = re.compile(r"[-+]?\d*\.?\d+(?:e[-+]?\d+)?", re.IGNORECASE)


def _leading_numbers(line: str, count: int) -> Optional[List[float]]:
    tokens = NUMBER_RE.findall(line)
    if len(tokens) < count:
        return None
    values = [float(t) for t in tokens[:count]]
    if not all(math.isfinite(v) for v in values):
        return None
    return values


def _parse_lines(text: str, count: int, kind: str) -> List[List[float]]:
    out = []
    skipped = 0
    for raw in text.splitlines():
        line = raw.strip()
        if not line:
            continue
        values = _leading_numbers(line, count)
        if values is None:
            skipped += 1
            continue
        out.append(values)
    if skipped:
        logger.debug("Skipped %d malformed %s line(s)", skipped, kind)
    return out


def parse_points(text: str) -> List[Point]:
    """One point per line, e.g. ``(-6, 2)`` or ``3 -4``. Unusable lines are dropped."""
    return [(x, y) for x, y in _parse_lines(text, 2, "point")]


def parse_segments(text: str) -> List[Segment]:
    """One segment per line, e.g. ``(x1,y1)->(x2,y2)``. Unusable lines are dropped."""
    return [((x1, y1), (x2, y2)) for x1, y1, x2, y2 in _parse_lines(text, 4, "segment")]
