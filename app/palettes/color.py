from __future__ import annotations

from typing import NamedTuple, Sequence

import numpy as np

COMPONENT_MASK = 0x1F


def expand_5_to_8(c5: int) -> int:
    """Expand a 5-bit channel to 8 bits.

    The top 3 bits of the shifted value are replicated into the bottom 3,
    so 0x1F maps to 0xFF instead of 0xF8.
    """
    shifted = (c5 & COMPONENT_MASK) << 3
    return shifted | (shifted >> 5) & 0x07


class DecodedColor(NamedTuple):
    raw: int
    r5: int
    g5: int
    b5: int
    r8: int
    g8: int
    b8: int

    @property
    def hex24(self) -> int:
        return (self.r8 << 16) | (self.g8 << 8) | self.b8

    @property
    def hex16(self) -> int:
        return self.raw

    @property
    def hex24_str(self) -> str:
        return f"#{self.hex24:06x}"

    @property
    def hex16_str(self) -> str:
        return f"0x{self.hex16:04x}"

    @property
    def rgb(self) -> tuple[int, int, int]:
        return self.r8, self.g8, self.b8


def decode_color(raw: int) -> DecodedColor:
    """Decode a packed 15-bit color word (bit 15 ignored)."""
    raw &= 0xFFFF
    r5 = raw & COMPONENT_MASK
    g5 = (raw >> 5) & COMPONENT_MASK
    b5 = (raw >> 10) & COMPONENT_MASK
    return DecodedColor(
        raw,
        r5,
        g5,
        b5,
        expand_5_to_8(r5),
        expand_5_to_8(g5),
        expand_5_to_8(b5),
    )


def decode_palette(words: Sequence[int] | np.ndarray) -> np.ndarray:
    """Decode a run of raw color words to 8-bit RGB.

    Args:
        words: Raw 16-bit color words.

    Returns:
        N x 3 uint8 array of (r, g, b) triples, in input order.
    """
    raw = np.asarray(words, dtype=np.int64).reshape(-1) & 0xFFFF
    # Columns are r, g, b at bit offsets 0, 5, 10
    c5 = np.stack([raw, raw >> 5, raw >> 10], axis=-1) & COMPONENT_MASK
    shifted = c5 << 3
    return (shifted | (shifted >> 5) & 0x07).astype(np.uint8)
