"""
Request schema validation.

Each endpoint body is checked in a single pass. Every field is examined
and all problems are collected, so the client gets the complete list in
one 400 response instead of fixing fields one at a time.
"""

from __future__ import annotations

import math
import re
from numbers import Real
from typing import Any, Dict, Mapping, Optional

import bleach

from config import PipelineSettings
from core.exceptions import ValidationError
from models.print_request import Orientation, PaperSelector, PrintRequest, ResizeStrategy
from .compositor import hex_to_rgba
from .paper_sizes import PAPER_SIZES_MM, is_known_paper_size, paper_dimensions

MAX_ORDER_ID_LENGTH = 64
MAX_PAYLOAD_LENGTH = 40 * 1024 * 1024

_ORDER_ID = re.compile(r"^[A-Za-z0-9_-]+$")


def _sanitize_text(text: Any, max_length: Optional[int] = None) -> str:
    """
    Strip whitespace and any HTML from a user-supplied string.

    Order ids end up in stored file names and ledger rows.
    """
    if text is None:
        return ""

    text = str(text).strip()
    text = bleach.clean(text, tags=[], strip=True)

    if max_length and len(text) > max_length:
        text = text[:max_length]

    return text


def _as_number(value: Any) -> Optional[float]:
    """Float value of a JSON number; None for bools, strings and NaN/inf."""
    if isinstance(value, bool) or not isinstance(value, Real):
        return None
    number = float(value)
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def validate_order_id(value: Any, field: str = "orderID") -> str:
    """
    Raises:
        ValidationError: Missing or malformed identifier
    """
    error = _order_id_error(value)
    if error:
        raise ValidationError(f"{field} {error}.", {field: error})
    return _sanitize_text(value)


def _order_id_error(value: Any) -> Optional[str]:
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        return "is required and must be a string"
    text = _sanitize_text(value, max_length=MAX_ORDER_ID_LENGTH + 1)
    if not text:
        return "is required"
    if len(text) > MAX_ORDER_ID_LENGTH:
        return f"must be at most {MAX_ORDER_ID_LENGTH} characters"
    if not _ORDER_ID.match(text):
        return "may only contain letters, digits, '-' and '_'"
    return None


def parse_print_request(data: Any, settings: PipelineSettings) -> PrintRequest:
    """
    Validate an /add-border body into a PrintRequest.

    No decoding or resizing happens here; the payload is only checked for
    presence and type.

    Raises:
        ValidationError: With every offending field in ``fields``
    """
    if not isinstance(data, Mapping):
        raise ValidationError("Request body must be a JSON object.", {"body": "must be a JSON object"})

    errors: Dict[str, str] = {}

    # Image payload
    payload = data.get("originalbase64Image")
    if not isinstance(payload, str) or not payload.strip():
        errors["originalbase64Image"] = "Invalid or missing originalbase64Image."
    elif len(payload) > MAX_PAYLOAD_LENGTH:
        errors["originalbase64Image"] = "originalbase64Image is too large."

    # Border size
    border_size = _as_number(data.get("border_size"))
    if border_size is None or border_size < 0 or border_size > settings.max_border_size:
        errors["border_size"] = f"border_size must be between 0 and {settings.max_border_size:g}."

    # Border color (optional)
    border_color = None
    raw_color = data.get("border_color")
    if raw_color not in (None, ""):
        try:
            border_color = hex_to_rgba(raw_color)
        except ValidationError as exc:
            errors["border_color"] = exc.message

    # Orientation
    orientation = None
    try:
        orientation = Orientation(data.get("orientation"))
    except ValueError:
        errors["orientation"] = "orientation must be 'Portrait' or 'Landscape'."

    # Order id
    order_error = _order_id_error(data.get("orderID"))
    if order_error:
        errors["orderID"] = f"orderID {order_error}."

    # Resize option
    resize = None
    raw_resize = data.get("resizeOption")
    try:
        resize = ResizeStrategy(str(raw_resize).strip().lower()) if isinstance(raw_resize, str) else None
    except ValueError:
        resize = None
    if resize is None:
        supported = ", ".join(s.value for s in ResizeStrategy)
        errors["resizeOption"] = f"resizeOption must be one of: {supported}."

    # Paper selector
    paper = None
    is_custom = data.get("isCustom", False)
    if not isinstance(is_custom, bool):
        errors["isCustom"] = "isCustom must be a boolean."
    elif is_custom:
        paper, sizes_error = _parse_custom_sizes(data.get("sizes"), settings)
        if sizes_error:
            errors["sizes"] = sizes_error
    else:
        paper_size = data.get("paperSize")
        if not isinstance(paper_size, str) or not paper_size.strip():
            errors["paperSize"] = "paperSize is required."
        elif not is_known_paper_size(paper_size):
            errors["paperSize"] = (
                f"Unknown paper size: {paper_size}. Supported: {', '.join(PAPER_SIZES_MM)}."
            )
        else:
            paper = PaperSelector.named(paper_size.strip().upper())

    if errors:
        first = next(iter(errors.values()))
        raise ValidationError(first, errors)

    return PrintRequest(
        payload=payload.strip(),
        paper=paper,
        orientation=orientation,
        resize=resize,
        border_size=border_size,
        order_id=_sanitize_text(data.get("orderID")),
        border_color=border_color,
    )


def _parse_custom_sizes(sizes: Any, settings: PipelineSettings):
    """
    Return (PaperSelector, None) or (None, error message).

    Custom canvases may not exceed B0 at the configured DPI in either orientation.
    """
    if not isinstance(sizes, Mapping):
        return None, "sizes must be an object with numeric width and height when isCustom is true."

    width = _as_number(sizes.get("width"))
    height = _as_number(sizes.get("height"))
    if width is None or height is None:
        return None, "sizes.width and sizes.height must be numbers."
    width_px, height_px = round(width), round(height)
    if width_px < 1 or height_px < 1:
        return None, "sizes.width and sizes.height must be positive."
    b0 = paper_dimensions("B0", settings)
    if min(width_px, height_px) > b0.width or max(width_px, height_px) > b0.height:
        return None, (
            f"sizes may not exceed {b0.width}x{b0.height} pixels (B0 at {settings.dpi} DPI)."
        )
    return PaperSelector.custom_size(width_px, height_px), None


def parse_confirm_request(data: Any) -> str:
    """
    Validate a /confirm-order body and return the order id.

    Raises:
        ValidationError: Missing or malformed id
    """
    if not isinstance(data, Mapping):
        raise ValidationError("Request body must be a JSON object.", {"body": "must be a JSON object"})
    return validate_order_id(data.get("id"), field="id")
