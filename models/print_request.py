"""
Print request data models.

A PrintRequest is built once per /add-border call by
modules.request_validation and is never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class Orientation(Enum):
    """Paper orientation. Landscape swaps the resolved width and height."""

    PORTRAIT = "Portrait"
    LANDSCAPE = "Landscape"


class ResizeStrategy(Enum):
    """
    How the source image is reconciled with the inner print region.

    Values match the wire format of the ``resizeOption`` field.
    """

    COVER = "cover"
    """Uniform scale to cover the region, overflow cropped."""

    CONTAIN = "contain"
    """Uniform scale to fit, remainder padded with opaque white."""

    FILL = "fill"
    """Independent scale per axis, aspect ratio ignored."""

    INSIDE = "inside"
    """Downscale only, result may be smaller than the region."""

    OUTSIDE = "outside"
    """Upscale only, result may be larger than the region."""


@dataclass(frozen=True)
class PaperSelector:
    """
    Either a named paper size or an explicit custom pixel pair.

    Exactly one of ``name`` / ``custom`` is set, discriminated by
    ``is_custom``.
    """

    name: Optional[str] = None
    custom: Optional[Tuple[int, int]] = None

    @property
    def is_custom(self) -> bool:
        return self.custom is not None

    @classmethod
    def named(cls, name: str) -> "PaperSelector":
        return cls(name=name)

    @classmethod
    def custom_size(cls, width: int, height: int) -> "PaperSelector":
        return cls(custom=(width, height))

    def describe(self) -> str:
        if self.custom is not None:
            return f"custom {self.custom[0]}x{self.custom[1]}"
        return self.name or ""


@dataclass(frozen=True)
class PrintRequest:
    """
    Immutable description of one print-preparation job.

    Thread Safety:
        Frozen dataclass - safe to share with any worker that handles the
        request.
    """

    payload: str
    """Tagged base64 payload (``data:<type>;base64,...``) or bare base64."""

    paper: PaperSelector
    """Named size or custom pixel dimensions."""

    orientation: Orientation

    resize: ResizeStrategy

    border_size: float
    """Border width in the configured unit (mm or px), 0 disables bordering."""

    order_id: str
    """Opaque order identifier, used to name stored artifacts."""

    border_color: Optional[Tuple[int, int, int, int]] = None
    """Opaque RGBA border color, None disables bordering."""

    @property
    def wants_border(self) -> bool:
        return self.border_size > 0 and self.border_color is not None
