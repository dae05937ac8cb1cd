import numpy as np
import pytest

from app.palettes.errors import (
    IndexOutOfRangeError,
    InsufficientDataError,
    InvalidRegionSizeError,
    PaletteError,
)
from app.palettes.store import PaletteStore, Platform, region_size_for


def _ramp(n=512):
    """Palette where every word equals its offset."""
    return list(range(n))


@pytest.fixture
def gba_store():
    store = PaletteStore()
    store.load(_ramp(), 256)
    return store


@pytest.fixture
def gb_store():
    store = PaletteStore()
    store.load(_ramp(64), 32)
    return store


class TestPlatforms:
    def test_region_sizes(self):
        assert region_size_for(Platform.GBA) == 256
        assert region_size_for("gb") == 32

    def test_unknown_platform(self):
        with pytest.raises(ValueError):
            region_size_for("nes")


class TestLoad:
    def test_invalid_region_size(self):
        with pytest.raises(InvalidRegionSizeError):
            PaletteStore().load(_ramp(), 128)

    @pytest.mark.parametrize("size", [256.0, 32.0, True, "256", None])
    def test_non_integer_region_size(self, size):
        with pytest.raises(InvalidRegionSizeError):
            PaletteStore().load(_ramp(), size)

    def test_numpy_integer_region_size(self):
        store = PaletteStore()
        store.load(_ramp(), np.int64(256))
        assert type(store.region_size) is int
        assert store.active_count == 512

    def test_insufficient_data(self):
        with pytest.raises(InsufficientDataError):
            PaletteStore().load(_ramp(511), 256)

    def test_gb_needs_only_64_words(self, gb_store):
        assert gb_store.region_size == 32
        assert gb_store.active_count == 64

    def test_errors_share_base_class(self):
        with pytest.raises(PaletteError):
            PaletteStore().load([], 32)

    def test_failed_load_keeps_previous_snapshot(self, gba_store):
        with pytest.raises(InsufficientDataError):
            gba_store.load([1, 2, 3], 32)
        assert gba_store.region_size == 256
        assert gba_store.get(300) == 300

    def test_snapshot_is_a_copy(self):
        words = _ramp()
        store = PaletteStore()
        store.load(words, 256)
        words[0] = 0x7FFF
        assert store.get(0) == 0

    def test_snapshot_is_read_only(self, gba_store):
        with pytest.raises(ValueError):
            gba_store.snapshot.palette[0] = 1

    def test_reload_supersedes(self, gba_store):
        previous = gba_store.snapshot
        gba_store.load([0x1234] * 64, 32)
        assert gba_store.region_size == 32
        assert gba_store.get(63) == 0x1234
        with pytest.raises(IndexOutOfRangeError):
            gba_store.get(64)
        # Readers holding the old snapshot still see a consistent pair
        assert previous.region_size == 256
        assert previous.active_count == len(previous.palette) == 512
        assert int(previous.palette[300]) == 300

    def test_extra_words_beyond_capacity_ignored(self):
        store = PaletteStore()
        store.load(_ramp(600), 256)
        assert len(store.snapshot.palette) == 512

    def test_numpy_input(self):
        store = PaletteStore()
        store.load(np.full(512, 0x7FFF, dtype=np.uint16), 256)
        assert store.get(511) == 0x7FFF

    def test_load_bytes_little_endian(self):
        data = b"".join(i.to_bytes(2, "little") for i in range(64)) + b"\xff"
        store = PaletteStore()
        store.load_bytes(data, 32)
        assert store.get(1) == 1
        assert store.get(63) == 63


class TestGet:
    def test_background_start(self, gba_store):
        assert gba_store.get(0) == 0

    def test_object_start(self, gba_store):
        assert gba_store.get(256) == 256

    def test_past_active_entries(self, gba_store):
        with pytest.raises(IndexOutOfRangeError):
            gba_store.get(512)

    def test_negative_index(self, gba_store):
        with pytest.raises(IndexOutOfRangeError):
            gba_store.get(-1)

    def test_gb_never_reads_unused_entries(self):
        store = PaletteStore()
        store.load(_ramp(), 32)
        assert store.get(63) == 63
        with pytest.raises(IndexOutOfRangeError):
            store.get(64)

    def test_before_load(self):
        store = PaletteStore()
        assert not store.loaded
        assert store.region_size is None
        with pytest.raises(IndexOutOfRangeError):
            store.get(0)

    @pytest.mark.parametrize("index", [1.5, "3", None, True])
    def test_non_integer_index(self, gba_store, index):
        with pytest.raises(IndexOutOfRangeError):
            gba_store.get(index)

    def test_numpy_integer_index(self, gba_store):
        assert gba_store.get(np.int32(300)) == 300

    def test_out_of_range_is_an_index_error(self, gba_store):
        with pytest.raises(IndexError):
            gba_store.get(1000)

    def test_decode(self, gba_store):
        gba_store.load([0x001F] * 512, 256)
        assert gba_store.decode(5).rgb == (255, 0, 0)


class TestRegionIndices:
    def test_object_index(self, gba_store):
        assert gba_store.object_index(3) == 259

    def test_gb_object_index(self, gb_store):
        assert gb_store.object_index(3) == 35
        assert gb_store.get(gb_store.object_index(3)) == 35

    def test_background_index(self, gb_store):
        assert gb_store.background_index(31) == 31

    def test_region_index_out_of_range(self, gb_store):
        with pytest.raises(IndexOutOfRangeError):
            gb_store.object_index(32)

    def test_region_index_not_an_integer(self, gb_store):
        with pytest.raises(IndexOutOfRangeError):
            gb_store.object_index(2.0)


class TestEntries:
    def test_slice(self, gba_store):
        assert gba_store.entries(10, 3) == (10, 11, 12)

    def test_clamped_to_active_entries(self, gb_store):
        assert gb_store.entries(60, 100) == (60, 61, 62, 63)

    def test_past_end_empty(self, gba_store):
        assert gba_store.entries(512, 10) == ()

    def test_before_load(self):
        assert PaletteStore().entries(0, 10) == ()


class TestSnapshotInstall:
    def test_words_and_region_size_installed_together(self, gba_store):
        """A reader running while load() installs never sees new words with the old size."""
        seen = []

        class SpyStore(PaletteStore):
            def __setattr__(self, name, value):
                super().__setattr__(name, value)
                if name == "_snapshot" and value is not None:
                    seen.append((self.region_size, self.active_count, len(value.palette)))

        store = SpyStore()
        store.load(_ramp(), 256)
        store.load([7] * 64, 32)
        assert seen == [(256, 512, 512), (32, 64, 64)]
        assert store.get(63) == 7
        with pytest.raises(IndexOutOfRangeError):
            store.get(300)

    def test_old_snapshot_unaffected_by_reload(self, gba_store):
        old = gba_store.snapshot
        gba_store.load([7] * 64, 32)
        assert (old.region_size, len(old.palette)) == (256, 512)
        assert gba_store.snapshot is not old
