from __future__ import annotations

import enum
import logging
import struct
from pathlib import PurePath
from typing import TYPE_CHECKING, NamedTuple, Optional, Sequence

import numpy as np

from app.palettes.clamp import ExportRange, clamp_range
from app.palettes.color import decode_palette
from app.palettes.errors import UnsupportedEntryCountError

if TYPE_CHECKING:
    from app.palettes.store import PaletteStore

logger = logging.getLogger(__name__)

RIFF_PAL_VERSION = 0x0300
RIFF_PAL_MAX_ENTRIES = 0xFFFF
ACT_ENTRIES = 256


class ExportFormat(str, enum.Enum):
    PAL = "pal"
    ACT = "act"

    @property
    def extension(self) -> str:
        return f".{self.value}"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @property
    def media_type(self) -> str:
        return _MEDIA_TYPES[self]


_DESCRIPTIONS = {
    ExportFormat.PAL: "Windows PAL",
    ExportFormat.ACT: "Adobe Color Table",
}
_MEDIA_TYPES = {
    ExportFormat.PAL: "application/x-riff-palette",
    ExportFormat.ACT: "application/octet-stream",
}


class Region(str, enum.Enum):
    BACKGROUND = "bg"
    OBJECT = "obj"


class ExportResult(NamedTuple):
    window: ExportRange
    data: Optional[bytes]


def _require_entries(entries: Sequence[int]) -> None:
    if len(entries) == 0:
        raise UnsupportedEntryCountError("cannot export an empty palette range")


def export_riff_pal(entries: Sequence[int]) -> bytes:
    """Encode raw color words as a RIFF ``PAL `` file.

    Layout (all integers little-endian)::

        "RIFF" u32 riff_size "PAL "
        "data" u32 chunk_size u16 version u16 count
        count x (R, G, B, flags=0)

    ``riff_size`` covers everything after itself.
    """
    _require_entries(entries)
    count = len(entries)
    if count > RIFF_PAL_MAX_ENTRIES:
        raise UnsupportedEntryCountError(
            f"RIFF palettes hold at most {RIFF_PAL_MAX_ENTRIES} entries, got {count}"
        )

    chunk_size = 4 + 4 * count
    riff_size = 4 + 8 + chunk_size

    rgbx = np.zeros((count, 4), dtype=np.uint8)
    rgbx[:, :3] = decode_palette(entries)

    header = struct.pack(
        "<4sI4s4sIHH",
        b"RIFF",
        riff_size,
        b"PAL ",
        b"data",
        chunk_size,
        RIFF_PAL_VERSION,
        count,
    )
    return header + rgbx.tobytes()


def export_act(entries: Sequence[int]) -> bytes:
    """Encode raw color words as an Adobe Color Table.

    Always 256 RGB triples (unused slots zeroed, extra entries dropped)
    followed by a big-endian u16 color count and a zeroed u16
    transparency index.
    """
    _require_entries(entries)
    if len(entries) > ACT_ENTRIES:
        logger.info("ACT holds %d colors, dropping %d", ACT_ENTRIES, len(entries) - ACT_ENTRIES)
        entries = entries[:ACT_ENTRIES]

    table = bytearray(3 * ACT_ENTRIES)
    rgb = decode_palette(entries)
    table[:rgb.size] = rgb.tobytes()

    return bytes(table) + struct.pack(">HH", len(entries), 0)


_ENCODERS = {
    ExportFormat.PAL: export_riff_pal,
    ExportFormat.ACT: export_act,
}


def encode(fmt: ExportFormat | str, entries: Sequence[int]) -> bytes:
    return _ENCODERS[ExportFormat(fmt)](entries)


def format_for_filename(filename: str) -> ExportFormat | None:
    """Pick an export format from a file name's extension. Returns None if unknown."""
    suffix = PurePath(filename).suffix.lower()
    for fmt in ExportFormat:
        if fmt.extension == suffix:
            return fmt
    return None


def export_range(
    store: PaletteStore,
    start: int,
    length: int,
    fmt: ExportFormat | str,
) -> ExportResult:
    """Clamp a window over the store's palette and encode it.

    An empty window (start past the end) is a no-op: the result carries the
    clamped range and ``data`` is None.
    """
    window = clamp_range(start, length, capacity=store.active_count)
    if window.empty:
        logger.debug("Nothing to export at start %d", start)
        return ExportResult(window, None)

    entries = store.entries(window.start, window.length)
    return ExportResult(window, encode(fmt, entries))


def export_region(store: PaletteStore, region: Region | str, fmt: ExportFormat | str) -> ExportResult:
    """Export a whole background or object region."""
    size = store.region_size or 0
    start = 0 if Region(region) is Region.BACKGROUND else size
    return export_range(store, start, size, fmt)
