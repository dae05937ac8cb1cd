from __future__ import annotations

import enum
import logging
import operator
from typing import NamedTuple, Optional, Sequence

import numpy as np

from app.palettes.clamp import PALETTE_CAPACITY, clamp_range
from app.palettes.color import DecodedColor, decode_color
from app.palettes.errors import (
    IndexOutOfRangeError,
    InsufficientDataError,
    InvalidRegionSizeError,
)

logger = logging.getLogger(__name__)


class Platform(str, enum.Enum):
    GBA = "gba"
    GB = "gb"


REGION_SIZES = {
    Platform.GBA: 256,
    Platform.GB: 32,
}
VALID_REGION_SIZES = frozenset(REGION_SIZES.values())


def region_size_for(platform: Platform | str) -> int:
    """Region size (entries per background/object bank) for a platform."""
    return REGION_SIZES[Platform(platform)]


def _as_index(value, what: str) -> int:
    """Coerce an integer-like value (int or numpy integer), rejecting bools and floats."""
    if isinstance(value, bool):
        raise TypeError(f"{what} must be an integer, got {value!r}")
    return operator.index(value)


class _Snapshot(NamedTuple):
    palette: np.ndarray
    region_size: int

    @property
    def active_count(self) -> int:
        return 2 * self.region_size


class PaletteStore:
    """Holds a read-only palette snapshot split into background and object regions.

    The object region immediately follows the background region, so a
    logical index is also the raw offset into the snapshot. Each ``load``
    installs a fresh snapshot (words and region size together) with one
    assignment; readers holding the previous one keep a consistent view.
    """

    def __init__(self) -> None:
        self._snapshot: Optional[_Snapshot] = None

    @property
    def snapshot(self) -> Optional[_Snapshot]:
        return self._snapshot

    @property
    def loaded(self) -> bool:
        return self._snapshot is not None

    @property
    def region_size(self) -> int | None:
        snapshot = self._snapshot
        return snapshot.region_size if snapshot is not None else None

    @property
    def active_count(self) -> int:
        snapshot = self._snapshot
        return snapshot.active_count if snapshot is not None else 0

    def load(self, raw_words: Sequence[int] | np.ndarray, region_size: int) -> None:
        """Replace the current snapshot with a copy of ``raw_words``.

        Args:
            raw_words: Raw 16-bit color words, background region first.
            region_size: Entries per region, 256 (GBA) or 32 (GB).

        Raises:
            InvalidRegionSizeError: region_size is not a supported size.
            InsufficientDataError: fewer than 2 * region_size words given.
        """
        try:
            size = _as_index(region_size, "region_size")
        except TypeError:
            size = None
        if size not in VALID_REGION_SIZES:
            raise InvalidRegionSizeError(
                f"region_size must be one of {sorted(VALID_REGION_SIZES)}, got {region_size!r}"
            )

        words = np.asarray(raw_words).reshape(-1)
        needed = 2 * size
        if len(words) < needed:
            raise InsufficientDataError(
                f"palette needs at least {needed} entries for region size {size}, "
                f"got {len(words)}"
            )

        palette = (words[:PALETTE_CAPACITY].astype(np.int64) & 0xFFFF).astype(np.uint16)
        palette.flags.writeable = False

        self._snapshot = _Snapshot(palette, size)
        logger.debug("Loaded palette snapshot: %d words, region size %d", len(palette), size)

    def load_bytes(self, data: bytes, region_size: int) -> None:
        """Load a little-endian byte dump of palette memory."""
        usable = len(data) - len(data) % 2
        words = np.frombuffer(data[:usable], dtype="<u2")
        self.load(words, region_size)

    def get(self, logical_index: int) -> int:
        snapshot = self._snapshot
        active = snapshot.active_count if snapshot is not None else 0
        try:
            index = _as_index(logical_index, "index")
        except TypeError:
            raise IndexOutOfRangeError(f"index {logical_index!r} is not an integer")
        if not 0 <= index < active:
            raise IndexOutOfRangeError(f"index {index} outside active palette [0, {active})")
        return int(snapshot.palette[index])

    def decode(self, logical_index: int) -> DecodedColor:
        return decode_color(self.get(logical_index))

    def background_index(self, index: int) -> int:
        """Logical index of entry ``index`` in the background region."""
        return self._region_index(index, 0)

    def object_index(self, index: int) -> int:
        """Logical index of entry ``index`` in the object region."""
        return self._region_index(index, 1)

    def entries(self, start: int, length: int) -> tuple[int, ...]:
        """Raw words for an export window, clamped to the active entries."""
        snapshot = self._snapshot
        if snapshot is None:
            return ()
        window = clamp_range(start, length, capacity=snapshot.active_count)
        return tuple(int(w) for w in snapshot.palette[window.start:window.stop])

    def _region_index(self, index: int, bank: int) -> int:
        size = self.region_size or 0
        try:
            index = _as_index(index, "region index")
        except TypeError:
            raise IndexOutOfRangeError(f"region index {index!r} is not an integer")
        if not 0 <= index < size:
            raise IndexOutOfRangeError(f"region index {index} outside [0, {size})")
        return bank * size + index
