"""Tests for the asset variant table."""

import pytest
from PIL import Image

from watch_face.assets import (
    MODE_ORDER,
    AssetVariantTable,
    VisualElement,
    asset_filename,
    directory_loader,
)
from watch_face.errors import AssetMissingError
from watch_face.modes import Mode

from .conftest import BACKGROUND_COLORS, ELEMENT_SIZES, make_loader


class TestLoad:
    """Tests for loading variants."""

    def test_load_returns_three_variants(self):
        table = AssetVariantTable(make_loader())
        variants = table.load(VisualElement.HOUR_HAND)
        assert len(variants) == 3
        assert all(v.size == (10, 60) for v in variants)

    def test_load_all_populates_table(self, asset_table):
        assert asset_table.loaded
        for element in VisualElement:
            for mode in MODE_ORDER:
                assert asset_table.select(element, mode).size == ELEMENT_SIZES[element]

    def test_missing_variant_raises(self):
        table = AssetVariantTable(
            make_loader(missing={(VisualElement.FACE, Mode.AMBIENT_LOW_BIT)})
        )
        with pytest.raises(AssetMissingError) as exc_info:
            table.load(VisualElement.FACE)

        assert exc_info.value.element == "face"
        assert exc_info.value.missing == ["ambient_low_bit"]
        assert not table.loaded

    def test_missing_variant_reports_all_gaps(self):
        missing = {
            (VisualElement.BACKGROUND, Mode.INTERACTIVE),
            (VisualElement.BACKGROUND, Mode.AMBIENT),
        }
        table = AssetVariantTable(make_loader(missing=missing))
        with pytest.raises(AssetMissingError) as exc_info:
            table.load_all()
        assert exc_info.value.missing == ["interactive", "ambient"]


class TestSelect:
    """Tests for mode-indexed lookup."""

    @pytest.mark.parametrize("mode", list(Mode))
    def test_select_by_mode(self, asset_table, mode):
        bitmap = asset_table.select(VisualElement.BACKGROUND, mode)
        assert bitmap.getpixel((0, 0)) == BACKGROUND_COLORS[mode]


class TestRescale:
    """Tests for rescaling."""

    def test_rescale_scales_every_variant(self, asset_table):
        asset_table.rescale(2.0)
        for element in VisualElement:
            width, height = ELEMENT_SIZES[element]
            for mode in MODE_ORDER:
                assert asset_table.select(element, mode).size == (width * 2, height * 2)
        assert asset_table.scale_factor == 2.0

    def test_rescale_twice_is_idempotent(self, asset_table):
        first = asset_table.rescale(1.5)
        sizes = {
            (e, m): asset_table.select(e, m).size for e in VisualElement for m in MODE_ORDER
        }
        second = asset_table.rescale(1.5)

        assert first == 12
        assert second == 0
        for (element, mode), size in sizes.items():
            assert asset_table.select(element, mode).size == size

    def test_rescale_starts_from_native_size(self, asset_table):
        asset_table.rescale(2.0)
        asset_table.rescale(0.5)
        assert asset_table.select(VisualElement.BACKGROUND, Mode.INTERACTIVE).size == (
            100,
            100,
        )

    def test_rescale_back_to_native_restores_original(self, asset_table):
        original = asset_table.select(VisualElement.FACE, Mode.AMBIENT)
        asset_table.rescale(3.0)
        asset_table.rescale(1.0)
        assert asset_table.select(VisualElement.FACE, Mode.AMBIENT) is original

    def test_native_size_unchanged_by_rescale(self, asset_table):
        asset_table.rescale(2.0)
        assert asset_table.native_size(VisualElement.MINUTE_HAND, Mode.AMBIENT) == (8, 80)

    def test_rescale_rejects_non_positive_factor(self, asset_table):
        with pytest.raises(ValueError):
            asset_table.rescale(0)


class TestDirectoryLoader:
    """Tests for loading from disk."""

    def test_loads_png_as_rgba(self, tmp_path):
        path = tmp_path / asset_filename(VisualElement.FACE, Mode.AMBIENT)
        Image.new("RGB", (12, 14), (1, 2, 3)).save(path)

        bitmap = directory_loader(tmp_path)(VisualElement.FACE, Mode.AMBIENT)

        assert bitmap.mode == "RGBA"
        assert bitmap.size == (12, 14)

    def test_missing_file_returns_none(self, tmp_path):
        assert directory_loader(tmp_path)(VisualElement.FACE, Mode.AMBIENT) is None

    def test_corrupt_file_returns_none(self, tmp_path):
        path = tmp_path / asset_filename(VisualElement.FACE, Mode.AMBIENT)
        path.write_bytes(b"not an image")
        assert directory_loader(tmp_path)(VisualElement.FACE, Mode.AMBIENT) is None

    def test_filename_convention(self):
        assert asset_filename(VisualElement.HOUR_HAND, Mode.AMBIENT_LOW_BIT) == (
            "hour_hand_ambient_low_bit.png"
        )
