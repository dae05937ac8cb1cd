from __future__ import annotations

from dataclasses import asdict, dataclass

from app.palettes.store import PaletteStore


@dataclass(frozen=True)
class InspectorRow:
    index: str
    region: str
    region_index: int
    value: str
    hexcode: str
    r: str
    g: str
    b: str

    def to_dict(self) -> dict:
        return asdict(self)


def _channel(c8: int) -> str:
    return f"0x{c8:02x} ({c8:03d})"


def inspect_entry(store: PaletteStore, logical_index: int) -> InspectorRow:
    """Build the detail row shown for a selected palette entry."""
    color = store.decode(logical_index)
    region_size = store.region_size
    in_object = logical_index >= region_size
    return InspectorRow(
        index=f"{logical_index:03d}",
        region="obj" if in_object else "bg",
        region_index=logical_index - region_size if in_object else logical_index,
        value=color.hex16_str,
        hexcode=color.hex24_str,
        r=_channel(color.r8),
        g=_channel(color.g8),
        b=_channel(color.b8),
    )


def inspect_palette(store: PaletteStore) -> list[InspectorRow]:
    return [inspect_entry(store, i) for i in range(store.active_count)]
