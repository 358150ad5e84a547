"""
Format normalization: tagged payload -> CanonicalImage.

Every input container is reduced to a fully decoded raster before any
geometry runs:

    application/pdf            -> first page rendered with PyMuPDF -> PNG
    image/heic, image/heif,
    application/octet-stream   -> decoded with pillow-heif -> JPEG (quality 100)
    other image/*              -> passthrough, dimensions probed with Pillow

Unrecognized or missing tags are treated as image/jpeg.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from io import BytesIO
from typing import Optional, Tuple

import fitz  # PyMuPDF
from PIL import Image, UnidentifiedImageError
from pillow_heif import register_heif_opener

from config import PipelineSettings
from core.exceptions import DecodeError, HeicDecodeError, InvalidPdfError
from models.image import CanonicalImage
from logging_config import get_logger
from .pdf_analyzer import PDFAnalyzer, has_pdf_header

# Lets PIL.Image.open() read HEIC/HEIF containers
register_heif_opener()

DEFAULT_MEDIA_TYPE = "image/jpeg"
PDF_MEDIA_TYPE = "application/pdf"
HEIC_MEDIA_TYPES = frozenset({"image/heic", "image/heif", "application/octet-stream"})
RASTER_MEDIA_TYPES = frozenset({
    "image/jpeg",
    "image/jpg",
    "image/pjpeg",
    "image/png",
    "image/webp",
    "image/gif",
    "image/bmp",
    "image/tiff",
})

_DATA_URI = re.compile(r"^data:(?P<type>[^;,]*)(?P<params>(;[^;,]*)*),", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


def canonical_media_type(declared: Optional[str]) -> str:
    """Map a declared media type onto one the normalizer knows."""
    media_type = (declared or "").strip().lower()
    if media_type == "image/jpg":
        return DEFAULT_MEDIA_TYPE
    if media_type == PDF_MEDIA_TYPE or media_type in HEIC_MEDIA_TYPES or media_type in RASTER_MEDIA_TYPES:
        return media_type
    return DEFAULT_MEDIA_TYPE


def decode_payload(payload: str) -> Tuple[str, bytes]:
    """
    Split a ``data:<type>;base64,<data>`` payload into (media type, bytes).

    Bare base64 without a tag is accepted and typed as image/jpeg.

    Raises:
        DecodeError: If the base64 body is invalid or empty
    """
    declared = None
    body = payload
    match = _DATA_URI.match(payload)
    if match:
        declared = match.group("type")
        body = payload[match.end():]

    media_type = canonical_media_type(declared)
    try:
        data = base64.b64decode(_WHITESPACE.sub("", body), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(f"Payload is not valid base64: {exc}", media_type=media_type)

    if not data:
        raise DecodeError("Payload is empty", media_type=media_type)
    return media_type, data


def extension_for(media_type: str) -> str:
    """File extension used when storing the untouched original."""
    return {
        "application/pdf": "pdf",
        "image/heic": "heic",
        "image/heif": "heif",
        "application/octet-stream": "heic",
        "image/png": "png",
        "image/webp": "webp",
        "image/gif": "gif",
        "image/bmp": "bmp",
        "image/tiff": "tiff",
    }.get(media_type, "jpg")


class FormatNormalizer:
    """Turns raw payload bytes into a CanonicalImage."""

    def __init__(self, settings: PipelineSettings, logger: Optional[logging.Logger] = None):
        self.settings = settings
        self.pdf_analyzer = PDFAnalyzer()
        self.logger = logger or get_logger(__name__)

    def normalize(self, data: bytes, media_type: str,
                  logger: Optional[logging.Logger] = None) -> CanonicalImage:
        """
        Decode ``data`` according to its declared media type.

        Raises:
            InvalidPdfError: PDF tag without a PDF header
            HeicDecodeError: HEIC/HEIF (or octet-stream) decode failure
            DecodeError: Any other undecodable payload
        """
        log = logger or self.logger
        media_type = canonical_media_type(media_type)

        if media_type == PDF_MEDIA_TYPE:
            image = self._render_pdf(data, log)
        elif media_type in HEIC_MEDIA_TYPES:
            image = self._convert_heic(data, media_type)
        else:
            image = self._probe_raster(data, media_type)

        log.info(
            f"Normalized {image.source_kind} payload ({media_type}): "
            f"{image.width}x{image.height} {image.mode}"
        )
        return image

    def _render_pdf(self, data: bytes, log: logging.Logger) -> CanonicalImage:
        if not has_pdf_header(data):
            raise InvalidPdfError()

        analysis = self.pdf_analyzer.analyze(data)
        if analysis.get("pages", 0) > 1:
            log.warning(f"PDF has {analysis['pages']} pages, only the first page is used")
        log.debug(f"PDF analysis: {analysis}")

        try:
            document = fitz.open(stream=data, filetype="pdf")
        except Exception as exc:
            raise DecodeError(f"Failed to open PDF: {exc}", media_type=PDF_MEDIA_TYPE)

        try:
            if document.page_count < 1:
                raise DecodeError("PDF has no renderable pages", media_type=PDF_MEDIA_TYPE)

            scale = self.settings.pdf_render_scale
            try:
                page = document.load_page(0)
                pixmap = page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
                png_bytes = pixmap.tobytes("png")
            except Exception as exc:
                raise DecodeError(f"Failed to render PDF page: {exc}", media_type=PDF_MEDIA_TYPE)

            return CanonicalImage(
                data=png_bytes,
                media_type="image/png",
                width=pixmap.width,
                height=pixmap.height,
                mode="RGB",
                source_kind="pdf",
            )
        finally:
            document.close()

    def _convert_heic(self, data: bytes, media_type: str) -> CanonicalImage:
        try:
            with Image.open(BytesIO(data)) as source:
                source.load()
                rgb = source.convert("RGB")
            buffer = BytesIO()
            rgb.save(buffer, format="JPEG", quality=100, subsampling=0)
        except Exception as exc:
            raise HeicDecodeError(f"Failed to decode HEIC image: {exc}", media_type=media_type)

        return CanonicalImage(
            data=buffer.getvalue(),
            media_type="image/jpeg",
            width=rgb.width,
            height=rgb.height,
            mode="RGB",
            source_kind="heic",
        )

    def _probe_raster(self, data: bytes, media_type: str) -> CanonicalImage:
        try:
            with Image.open(BytesIO(data)) as source:
                source.load()
                detected = Image.MIME.get(source.format or "", media_type)
                width, height = source.size
                mode = source.mode
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError,
                SyntaxError, ValueError) as exc:
            raise DecodeError(f"Failed to decode image: {exc}", media_type=media_type)

        return CanonicalImage(
            data=data,
            media_type=detected,
            width=width,
            height=height,
            mode=mode,
            source_kind="raster",
        )
