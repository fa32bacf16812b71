import logging
from typing import Optional

from .config import load_settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_handler: Optional[logging.Handler] = None


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """Attaches one console handler to the ``graphcore`` logger. Safe to call repeatedly."""
    global _handler
    logger = logging.getLogger("graphcore")
    level_name = (level or load_settings().log_level).upper()
    logger.setLevel(getattr(logging, level_name, logging.WARNING))

    if _handler is None:
        _handler = logging.StreamHandler()
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(_handler)
    return logger
