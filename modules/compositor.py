"""
Resize-and-compose geometry for print output.

Border convention: the border is drawn INSIDE the paper canvas. The source
is fitted into the inner region (target shrunk by 2 * border on each axis)
and pasted centered on a canvas of exactly the target size filled with the
border color. Output is always JPEG at quality 100 with 4:4:4 chroma.
"""

from __future__ import annotations

import logging
import re
from io import BytesIO
from typing import Optional, Tuple

from PIL import Image, ImageOps

from core.exceptions import GeometryError, ValidationError
from models.image import CanonicalImage, CompositeResult, PaperDimensions
from models.print_request import ResizeStrategy
from logging_config import get_logger

RGBA = Tuple[int, int, int, int]

WHITE: RGBA = (255, 255, 255, 255)
JPEG_QUALITY = 100
JPEG_SUBSAMPLING_444 = 0
RESAMPLE = Image.Resampling.LANCZOS

_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{6})$")


def hex_to_rgba(value: str) -> RGBA:
    """
    Parse ``#RRGGBB`` (``#`` optional) into an opaque RGBA tuple.

    Alpha is always 255 regardless of input.

    Raises:
        ValidationError: Wrong length or non-hex characters
    """
    match = _HEX_COLOR.match(str(value).strip()) if value is not None else None
    if not match:
        raise ValidationError(
            f"border_color must be a #RRGGBB hex color, got {value!r}",
            {"border_color": "must be a #RRGGBB hex color"},
        )
    packed = int(match.group(1), 16)
    return ((packed >> 16) & 0xFF, (packed >> 8) & 0xFF, packed & 0xFF, 255)


def parse_strategy(value) -> ResizeStrategy:
    """
    Raises:
        GeometryError: Unknown strategy name (no default fallback)
    """
    if isinstance(value, ResizeStrategy):
        return value
    try:
        return ResizeStrategy(str(value).strip().lower())
    except ValueError:
        raise GeometryError(
            f"Unknown resize option: {value}",
            {"resizeOption": value, "supported": [s.value for s in ResizeStrategy]},
        )


def inner_region(target: PaperDimensions, border_px: int) -> Tuple[int, int]:
    """Target size minus the border on every edge."""
    width = target.width - 2 * border_px
    height = target.height - 2 * border_px
    if width < 1 or height < 1:
        raise GeometryError(
            f"Border of {border_px}px leaves no room on a {target.width}x{target.height} canvas",
            {"border_px": border_px, "target": target.to_dict()},
        )
    return width, height


def _scaled(size: Tuple[int, int], scale: float) -> Tuple[int, int]:
    return max(1, round(size[0] * scale)), max(1, round(size[1] * scale))


def _flatten(image: Image.Image, background: RGBA = WHITE) -> Image.Image:
    """RGB copy of ``image``; transparent areas become ``background``."""
    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        base = Image.new("RGBA", rgba.size, background)
        base.alpha_composite(rgba)
        return base.convert("RGB")
    if image.mode != "RGB":
        return image.convert("RGB")
    return image


def fit_image(image: Image.Image, region: Tuple[int, int], strategy: ResizeStrategy) -> Image.Image:
    """
    Apply one fit strategy to ``image`` for a region of ``region`` pixels.

    cover/contain/fill always return exactly ``region``; inside/outside keep
    the aspect ratio and may return a smaller/larger image.
    """
    width, height = image.size
    region_w, region_h = region
    scale_x = region_w / width
    scale_y = region_h / height

    if strategy is ResizeStrategy.COVER:
        return ImageOps.fit(image, region, method=RESAMPLE, centering=(0.5, 0.5))

    if strategy is ResizeStrategy.CONTAIN:
        resized = image.resize(_scaled(image.size, min(scale_x, scale_y)), RESAMPLE)
        resized = _clamp(resized, region)
        canvas = Image.new("RGB", region, WHITE[:3])
        offset = ((region_w - resized.width) // 2, (region_h - resized.height) // 2)
        canvas.paste(resized, offset)
        return canvas

    if strategy is ResizeStrategy.FILL:
        return image.resize(region, RESAMPLE)

    if strategy is ResizeStrategy.INSIDE:
        scale = min(scale_x, scale_y, 1.0)
    elif strategy is ResizeStrategy.OUTSIDE:
        scale = max(scale_x, scale_y, 1.0)
    else:  # pragma: no cover - enum is exhaustive
        raise GeometryError(f"Unknown resize option: {strategy}")

    if scale == 1.0:
        return image.copy()
    return image.resize(_scaled(image.size, scale), RESAMPLE)


def _clamp(image: Image.Image, region: Tuple[int, int]) -> Image.Image:
    """Center-crop ``image`` to at most ``region`` (rounding can overshoot by a pixel)."""
    if image.width <= region[0] and image.height <= region[1]:
        return image
    crop_w = min(image.width, region[0])
    crop_h = min(image.height, region[1])
    left = (image.width - crop_w) // 2
    top = (image.height - crop_h) // 2
    return image.crop((left, top, left + crop_w, top + crop_h))


def encode_jpeg(image: Image.Image) -> bytes:
    """Quality 100, 4:4:4 chroma. Print output must not be downgraded."""
    buffer = BytesIO()
    image.save(buffer, format="JPEG", quality=JPEG_QUALITY, subsampling=JPEG_SUBSAMPLING_444)
    return buffer.getvalue()


class Compositor:
    """Fits a canonical raster onto a bordered paper canvas."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or get_logger(__name__)

    def compose(
        self,
        image: CanonicalImage,
        target: PaperDimensions,
        strategy: ResizeStrategy,
        border_px: int = 0,
        border_color: Optional[RGBA] = None,
        logger: Optional[logging.Logger] = None,
    ) -> CompositeResult:
        """
        Resize ``image`` for ``target`` and optionally frame it.

        Without a border (``border_px == 0`` or no color) the resized image is
        encoded directly. With a border the output is exactly ``target``.

        Raises:
            GeometryError: Unknown strategy or a border that leaves no inner region
        """
        log = logger or self.logger
        strategy = parse_strategy(strategy)
        bordered = border_px > 0 and border_color is not None
        effective_border = border_px if bordered else 0
        region = inner_region(target, effective_border)

        source = _flatten(image.open())
        resized = fit_image(source, region, strategy)
        log.debug(
            f"Resized {source.width}x{source.height} -> {resized.width}x{resized.height} "
            f"({strategy.value}, region {region[0]}x{region[1]})"
        )

        if not bordered:
            return CompositeResult(
                data=encode_jpeg(resized),
                width=resized.width,
                height=resized.height,
                bordered=False,
            )

        # Outside can overflow the region; keep the border strips intact
        resized = _clamp(resized, region)
        canvas = Image.new("RGB", target.as_tuple(), tuple(border_color[:3]))
        offset = (
            effective_border + (region[0] - resized.width) // 2,
            effective_border + (region[1] - resized.height) // 2,
        )
        canvas.paste(resized, offset)

        log.info(
            f"Composited {resized.width}x{resized.height} onto "
            f"{target.width}x{target.height} canvas with {effective_border}px border"
        )
        return CompositeResult(
            data=encode_jpeg(canvas),
            width=canvas.width,
            height=canvas.height,
            bordered=True,
        )
