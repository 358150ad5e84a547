"""
Raster image models produced and consumed by the pipeline modules.

CanonicalImage and CompositeResult are owned by the request that created
them and discarded once the response is sent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from io import BytesIO
from typing import Any, Dict

from PIL import Image

from .print_request import Orientation


@dataclass(frozen=True)
class PaperDimensions:
    """Resolved target size in pixels (both strictly positive)."""

    width: int
    height: int

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Paper dimensions must be positive, got {self.width}x{self.height}")

    def oriented(self, orientation: Orientation) -> "PaperDimensions":
        """Return the pair swapped for Landscape, unchanged for Portrait."""
        if orientation is Orientation.LANDSCAPE:
            return PaperDimensions(self.height, self.width)
        return self

    def as_tuple(self) -> tuple:
        return (self.width, self.height)

    def to_dict(self) -> Dict[str, int]:
        return {"width": self.width, "height": self.height}


@dataclass(frozen=True)
class CanonicalImage:
    """
    Fully decoded source raster.

    ``data`` holds the canonical encoded bytes (PNG for PDF renders, JPEG for
    HEIC conversions, the original bytes for passthrough rasters).
    """

    data: bytes = field(repr=False)
    media_type: str
    width: int
    height: int
    mode: str
    source_kind: str
    """One of "raster", "pdf", "heic"."""

    @property
    def has_alpha(self) -> bool:
        return self.mode in ("RGBA", "LA", "PA") or self.mode.endswith("A")

    def open(self) -> Image.Image:
        """Decode ``data`` into a loaded PIL image (first frame only)."""
        image = Image.open(BytesIO(self.data))
        image.load()
        return image


@dataclass(frozen=True)
class CompositeResult:
    """Final JPEG ready for publishing."""

    data: bytes = field(repr=False)
    width: int
    height: int
    bordered: bool
    media_type: str = "image/jpeg"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "bordered": self.bordered,
            "bytes": len(self.data),
        }
