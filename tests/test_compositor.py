"""
Unit tests for the Compositor.

Covers color parsing, the five fit strategies and the bordered canvas
geometry.
"""

from io import BytesIO

import pytest
from PIL import Image

from conftest import image_bytes
from core.exceptions import GeometryError, ValidationError
from models.image import CanonicalImage, PaperDimensions
from models.print_request import ResizeStrategy
from modules.compositor import (
    Compositor,
    fit_image,
    hex_to_rgba,
    inner_region,
    parse_strategy,
)

RED = (255, 0, 0, 255)


def canonical(size=(40, 20), color=(0, 0, 255), mode="RGB"):
    data = image_bytes(size=size, color=color, mode=mode)
    return CanonicalImage(data=data, media_type="image/png", width=size[0],
                          height=size[1], mode=mode, source_kind="raster")


def decode(data):
    image = Image.open(BytesIO(data))
    image.load()
    return image


def assert_close(pixel, expected, tolerance=12):
    assert all(abs(a - b) <= tolerance for a, b in zip(pixel, expected)), (pixel, expected)


class TestHexToRgba:
    """Test border color parsing."""

    def test_with_hash(self):
        assert hex_to_rgba("#FF0000") == (255, 0, 0, 255)

    def test_without_hash_lowercase(self):
        assert hex_to_rgba("00ff7f") == (0, 255, 127, 255)

    def test_alpha_always_opaque(self):
        assert hex_to_rgba("#000000")[3] == 255

    @pytest.mark.parametrize("value", ["#FFF", "#GGGGGG", "#FF00000", "", None, "red"])
    def test_malformed_rejected(self, value):
        with pytest.raises(ValidationError):
            hex_to_rgba(value)


class TestParseStrategy:

    def test_accepts_enum_and_string(self):
        assert parse_strategy(ResizeStrategy.FILL) is ResizeStrategy.FILL
        assert parse_strategy(" Cover ") is ResizeStrategy.COVER

    def test_unknown_strategy_has_no_fallback(self):
        with pytest.raises(GeometryError):
            parse_strategy("stretch")


class TestFitImage:
    """40x20 source into a 30x30 region."""

    @pytest.fixture
    def source(self):
        return Image.new("RGB", (40, 20), (0, 0, 255))

    @pytest.mark.parametrize("strategy", [
        ResizeStrategy.COVER, ResizeStrategy.CONTAIN, ResizeStrategy.FILL
    ])
    def test_exact_region_strategies(self, source, strategy):
        assert fit_image(source, (30, 30), strategy).size == (30, 30)

    def test_inside_downscales(self, source):
        assert fit_image(source, (30, 30), ResizeStrategy.INSIDE).size == (30, 15)

    def test_inside_never_upscales(self):
        small = Image.new("RGB", (10, 5))
        assert fit_image(small, (30, 30), ResizeStrategy.INSIDE).size == (10, 5)

    def test_outside_upscales_to_cover(self, source):
        assert fit_image(source, (30, 30), ResizeStrategy.OUTSIDE).size == (60, 30)

    def test_contain_pads_with_white(self, source):
        fitted = fit_image(source, (30, 30), ResizeStrategy.CONTAIN)
        assert fitted.getpixel((15, 2)) == (255, 255, 255)
        assert fitted.getpixel((15, 15)) == (0, 0, 255)


class TestInnerRegion:

    def test_shrinks_by_twice_the_border(self):
        assert inner_region(PaperDimensions(100, 200), 10) == (80, 180)

    def test_border_too_wide(self):
        with pytest.raises(GeometryError):
            inner_region(PaperDimensions(100, 200), 50)


class TestCompose:
    """Test the full compose step."""

    def test_default_logger_in_app_namespace(self):
        assert Compositor().logger.name == "print_prep.modules.compositor"

    def test_no_border_returns_resized_image(self):
        result = Compositor().compose(canonical(), PaperDimensions(60, 80), ResizeStrategy.INSIDE)
        assert result.bordered is False
        assert (result.width, result.height) == (40, 20)
        assert decode(result.data).format == "JPEG"

    def test_zero_border_with_color_is_fast_path(self):
        result = Compositor().compose(canonical(), PaperDimensions(60, 80), ResizeStrategy.FILL,
                                      border_px=0, border_color=RED)
        assert result.bordered is False
        assert (result.width, result.height) == (60, 80)

    def test_border_without_color_is_fast_path(self):
        result = Compositor().compose(canonical(), PaperDimensions(60, 80), ResizeStrategy.FILL,
                                      border_px=5, border_color=None)
        assert result.bordered is False
        assert (result.width, result.height) == (60, 80)

    @pytest.mark.parametrize("strategy", list(ResizeStrategy))
    def test_bordered_output_is_exactly_target(self, strategy):
        result = Compositor().compose(canonical(), PaperDimensions(60, 80), strategy,
                                      border_px=5, border_color=RED)
        assert result.bordered is True
        assert (result.width, result.height) == (60, 80)
        assert decode(result.data).size == (60, 80)

    def test_border_strips_are_border_color(self):
        result = Compositor().compose(canonical(), PaperDimensions(60, 80), ResizeStrategy.CONTAIN,
                                      border_px=8, border_color=RED)
        image = decode(result.data).convert("RGB")

        for x, y in [(1, 40), (58, 40), (30, 1), (30, 78), (1, 1), (58, 78)]:
            assert_close(image.getpixel((x, y)), RED[:3])
        # Source centered inside the border
        assert_close(image.getpixel((30, 40)), (0, 0, 255))

    def test_outside_strategy_keeps_border_intact(self):
        result = Compositor().compose(canonical(), PaperDimensions(60, 80), ResizeStrategy.OUTSIDE,
                                      border_px=8, border_color=RED)
        image = decode(result.data).convert("RGB")
        assert_close(image.getpixel((2, 40)), RED[:3])
        assert_close(image.getpixel((57, 40)), RED[:3])

    def test_transparency_flattened_to_white(self):
        source = canonical(size=(20, 20), color=(0, 0, 0, 0), mode="RGBA")
        result = Compositor().compose(source, PaperDimensions(20, 20), ResizeStrategy.FILL)
        assert_close(decode(result.data).getpixel((10, 10)), (255, 255, 255))

    def test_border_leaving_no_room_raises(self):
        with pytest.raises(GeometryError):
            Compositor().compose(canonical(), PaperDimensions(60, 80), ResizeStrategy.CONTAIN,
                                 border_px=30, border_color=RED)
