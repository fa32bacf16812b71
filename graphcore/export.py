import logging
from pathlib import Path
from typing import Union

from .errors import RasterExportError

logger = logging.getLogger(__name__)

PNG_EXPORT_WIDTH = 1600


def save_svg(svg: str, path: Union[str, Path]) -> Path:
    path = Path(path)
    path.write_text(svg, encoding="utf-8")
    return path


def svg_to_png(svg: str, width: int = PNG_EXPORT_WIDTH, background: str = "#ffffff") -> bytes:
    """Rasterizes the document at ``width`` pixels, keeping its aspect ratio.

    Raises RasterExportError when the document cannot be decoded; the SVG
    itself is still usable, so callers should offer it instead.
    """
    try:
        import cairosvg
        return cairosvg.svg2png(bytestring=svg.encode("utf-8"), output_width=width, background_color=background)
    except Exception as e:
        logger.warning("PNG conversion failed: %s", e)
        raise RasterExportError("SVG to PNG conversion failed. Download SVG instead.") from e
