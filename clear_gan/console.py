"""Console helpers: logging setup, progress listeners and small text utilities."""

import logging
from typing import List, Optional, Sequence

import numpy as np

from .model import BatchEndEvent, EpochEndEvent

LOG_FORMAT = "%(asctime)s : %(message)s"
DATE_FORMAT = "%A, %d %B %Y %H:%M"

# Darkest to brightest, one character per 0.1 of the range
TEXT_SHADES = " .~':-+%#*"


def configure_logging(level: int = logging.INFO):
    """Prefixes every message with the local date and time."""
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=DATE_FORMAT)


def batch_end_logger(every: int = 25, logger: Optional[logging.Logger] = None):
    """Returns a batch listener that logs every ``every``-th batch."""
    logger = logger or logging.getLogger(__name__)

    def on_batch_end(event: BatchEndEvent):
        if event.batch % every == 0:
            logger.info(str(event))

    return on_batch_end


def epoch_end_logger(logger: Optional[logging.Logger] = None):
    """Returns an epoch listener that logs every epoch."""
    logger = logger or logging.getLogger(__name__)

    def on_epoch_end(event: EpochEndEvent):
        logger.info(str(event))

    return on_epoch_end


def parse_digit_filter(text: str, min_value: int = 0, max_value: int = 9) -> List[int]:
    """
    Parses a comma separated list of integers in [min_value, max_value].

    Items that are not integers or fall outside the range are skipped with a
    warning. An empty string yields an empty list (no filter).
    """
    digits = []
    for item in text.split(","):
        item = item.strip()
        if not item:
            continue
        try:
            value = int(item)
        except ValueError:
            logging.warning(f"Rejected '{item}'.")
            continue
        if min_value <= value <= max_value:
            digits.append(value)
        else:
            logging.warning(f"Rejected '{item}'.")
    return digits


def render_digit_as_text(inputs: Sequence[float], min_value: Optional[float] = None,
                         max_value: Optional[float] = None, width: int = 28, height: int = 28) -> str:
    """
    Draws row-major image data as ASCII shades, one text line per image row.

    The range defaults to the data's own min and max.
    """
    values = np.asarray(inputs, dtype=float).ravel()
    if values.size != width * height:
        raise ValueError(f"inputs should have exactly {width * height} elements, got {values.size}.")
    min_value = values.min() if min_value is None else min_value
    max_value = values.max() if max_value is None else max_value
    scale = (max_value - min_value) or 1.0

    lines = []
    for y in range(height):
        row = (values[y * width:(y + 1) * width] - min_value) / scale
        shade_idx = np.clip(np.floor(row * 10), 0, len(TEXT_SHADES) - 1).astype(int)
        lines.append("".join(TEXT_SHADES[i] for i in shade_idx))
    return "\n".join(lines)
