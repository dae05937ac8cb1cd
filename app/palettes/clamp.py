from __future__ import annotations

import logging
from typing import NamedTuple

logger = logging.getLogger(__name__)

PALETTE_CAPACITY = 512


class ExportRange(NamedTuple):
    start: int
    length: int

    @property
    def empty(self) -> bool:
        return self.length == 0

    @property
    def stop(self) -> int:
        return self.start + self.length


def clamp_range(start: int, length: int, capacity: int = PALETTE_CAPACITY) -> ExportRange:
    """Clamp an export window to the palette capacity.

    A start at or past the end yields an empty range rather than an error;
    a window running past the end is truncated.
    """
    if start < 0 or length < 0:
        raise ValueError(f"start and length must be non-negative, got ({start}, {length})")

    if start >= capacity:
        logger.debug("Export start %d is past capacity %d, nothing to export", start, capacity)
        return ExportRange(start, 0)

    if start + length > capacity:
        logger.debug("Truncating export of %d entries at %d to %d", length, start, capacity - start)
        length = capacity - start

    return ExportRange(start, length)
