"""Paper size table and physical-unit to pixel conversion."""

from __future__ import annotations

from typing import Dict, List, Tuple

from config import PipelineSettings
from core.exceptions import GeometryError
from models.image import PaperDimensions
from models.print_request import Orientation, PaperSelector

MM_PER_INCH = 25.4

# ISO 216, portrait (width, height) in millimeters
PAPER_SIZES_MM: Dict[str, Tuple[int, int]] = {
    "A0": (841, 1189),
    "A1": (594, 841),
    "A2": (420, 594),
    "A3": (297, 420),
    "A4": (210, 297),
    "A5": (148, 210),
    "A6": (105, 148),
    "B0": (1000, 1414),
    "B1": (707, 1000),
    "B2": (500, 707),
    "B3": (353, 500),
    "B4": (250, 353),
    "B5": (176, 250),
    "B6": (125, 176),
}


def mm_to_pixels(mm: float, dpi: int) -> int:
    """round(mm * dpi / 25.4); 10 mm at 600 DPI -> 236 px."""
    return round(mm * dpi / MM_PER_INCH)


def is_known_paper_size(name: str) -> bool:
    return str(name).strip().upper() in PAPER_SIZES_MM


def paper_dimensions(name: str, settings: PipelineSettings) -> PaperDimensions:
    """
    Portrait pixel dimensions for a named paper size.

    Raises:
        GeometryError: If the name is not in the table
    """
    key = str(name).strip().upper()
    if key not in PAPER_SIZES_MM:
        raise GeometryError(
            f"Unknown paper size: {name}",
            {"paperSize": name, "supported": sorted(PAPER_SIZES_MM)},
        )
    width_mm, height_mm = PAPER_SIZES_MM[key]
    return PaperDimensions(
        max(1, mm_to_pixels(width_mm, settings.dpi)),
        max(1, mm_to_pixels(height_mm, settings.dpi)),
    )


def resolve_target(
    selector: PaperSelector,
    orientation: Orientation,
    settings: PipelineSettings,
) -> PaperDimensions:
    """
    Resolve the orientation-adjusted canvas size for a request.

    Custom selectors are already pixel pairs and skip the table lookup.
    """
    if selector.is_custom:
        width, height = selector.custom
        try:
            dims = PaperDimensions(int(width), int(height))
        except ValueError as exc:
            raise GeometryError(str(exc), {"sizes": {"width": width, "height": height}})
    else:
        dims = paper_dimensions(selector.name, settings)

    return dims.oriented(orientation)


def border_to_pixels(border_size: float, settings: PipelineSettings) -> int:
    """Convert a border width in the configured unit to whole pixels."""
    if border_size <= 0:
        return 0
    if settings.border_unit == "px":
        return round(border_size)
    return mm_to_pixels(border_size, settings.dpi)


def list_paper_sizes(settings: PipelineSettings) -> List[Dict[str, object]]:
    """Every named size with its portrait pixel dimensions at the configured DPI."""
    sizes = []
    for name, (width_mm, height_mm) in PAPER_SIZES_MM.items():
        dims = paper_dimensions(name, settings)
        sizes.append({
            "name": name,
            "width_mm": width_mm,
            "height_mm": height_mm,
            "width_px": dims.width,
            "height_px": dims.height,
        })
    return sizes
