"""
Unit tests for paper size resolution and unit conversion.
"""

import pytest

from config import PipelineSettings
from core.exceptions import GeometryError
from models.print_request import Orientation, PaperSelector
from modules.paper_sizes import (
    PAPER_SIZES_MM,
    border_to_pixels,
    is_known_paper_size,
    list_paper_sizes,
    mm_to_pixels,
    paper_dimensions,
    resolve_target,
)


@pytest.fixture
def print_300():
    return PipelineSettings(dpi=300)


class TestMmToPixels:
    """Test millimeter conversion at a given DPI."""

    def test_600_dpi_scale(self):
        """10 mm at 600 DPI rounds 236.22 down to 236."""
        assert mm_to_pixels(10, 600) == 236

    def test_300_dpi(self):
        assert mm_to_pixels(25.4, 300) == 300

    def test_zero(self):
        assert mm_to_pixels(0, 300) == 0


class TestPaperDimensions:
    """Test named paper size lookup."""

    def test_a4_at_300_dpi(self, print_300):
        dims = paper_dimensions("A4", print_300)
        assert (dims.width, dims.height) == (2480, 3508)

    def test_lookup_is_case_insensitive(self, print_300):
        assert paper_dimensions(" a4 ", print_300) == paper_dimensions("A4", print_300)

    def test_unknown_size_raises(self, print_300):
        with pytest.raises(GeometryError) as exc_info:
            paper_dimensions("Letter", print_300)
        assert exc_info.value.status_code == 400
        assert "A4" in exc_info.value.details["supported"]

    def test_all_sizes_are_portrait(self, print_300):
        for name in PAPER_SIZES_MM:
            dims = paper_dimensions(name, print_300)
            assert dims.width < dims.height

    def test_is_known_paper_size(self):
        assert is_known_paper_size("b5")
        assert not is_known_paper_size("C4")


class TestResolveTarget:
    """Test orientation and custom size handling."""

    def test_portrait_keeps_dimensions(self, print_300):
        dims = resolve_target(PaperSelector.named("A4"), Orientation.PORTRAIT, print_300)
        assert dims.as_tuple() == (2480, 3508)

    def test_landscape_swaps_dimensions(self, print_300):
        dims = resolve_target(PaperSelector.named("A4"), Orientation.LANDSCAPE, print_300)
        assert dims.as_tuple() == (3508, 2480)

    def test_custom_size_skips_table(self, print_300):
        dims = resolve_target(PaperSelector.custom_size(800, 600), Orientation.PORTRAIT, print_300)
        assert dims.as_tuple() == (800, 600)

    def test_custom_size_landscape(self, print_300):
        dims = resolve_target(PaperSelector.custom_size(800, 600), Orientation.LANDSCAPE, print_300)
        assert dims.as_tuple() == (600, 800)

    def test_non_positive_custom_size_raises(self, print_300):
        with pytest.raises(GeometryError):
            resolve_target(PaperSelector.custom_size(0, 600), Orientation.PORTRAIT, print_300)


class TestBorderToPixels:
    """Test border unit handling."""

    def test_mm_unit(self):
        assert border_to_pixels(10, PipelineSettings(dpi=600, border_unit="mm")) == 236

    def test_px_unit(self):
        assert border_to_pixels(10, PipelineSettings(dpi=600, border_unit="px")) == 10

    def test_zero_border(self):
        assert border_to_pixels(0, PipelineSettings(dpi=600)) == 0


class TestListPaperSizes:

    def test_lists_every_size(self, print_300):
        sizes = list_paper_sizes(print_300)
        assert [entry["name"] for entry in sizes] == list(PAPER_SIZES_MM)

        a4 = next(entry for entry in sizes if entry["name"] == "A4")
        assert a4 == {
            "name": "A4",
            "width_mm": 210,
            "height_mm": 297,
            "width_px": 2480,
            "height_px": 3508,
        }
