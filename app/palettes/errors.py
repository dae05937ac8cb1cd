from __future__ import annotations


class PaletteError(ValueError):
    """Base class for palette validation failures."""
    pass


class InvalidRegionSizeError(PaletteError):
    """Raised when a region size is not one of the supported platform sizes."""
    pass


class InsufficientDataError(PaletteError):
    """Raised when a raw palette buffer is too short for its region size."""
    pass


class IndexOutOfRangeError(PaletteError, IndexError):
    """Raised when a logical index falls outside the active palette."""
    pass


class UnsupportedEntryCountError(PaletteError):
    """Raised when an export is asked to encode no entries (or too many)."""
    pass
