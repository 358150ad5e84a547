"""
Unit tests for payload decoding and format normalization.
"""

import base64
from io import BytesIO

import fitz
import pytest
from PIL import Image

from conftest import data_uri, image_bytes
from core.exceptions import DecodeError, HeicDecodeError, InvalidPdfError
from modules.format_normalizer import (
    FormatNormalizer,
    canonical_media_type,
    decode_payload,
    extension_for,
)
from modules.pdf_analyzer import PDFAnalyzer, has_pdf_header


def pdf_bytes(pages=1, width=100, height=50):
    document = fitz.open()
    for _ in range(pages):
        document.new_page(width=width, height=height)
    data = document.tobytes()
    document.close()
    return data


@pytest.fixture
def normalizer(settings):
    return FormatNormalizer(settings)


class TestDecodePayload:
    """Test data-URI splitting and base64 decoding."""

    def test_tagged_png(self):
        raw = image_bytes()
        media_type, data = decode_payload(data_uri(raw, "image/png"))
        assert media_type == "image/png"
        assert data == raw

    def test_bare_base64_defaults_to_jpeg(self):
        media_type, data = decode_payload(base64.b64encode(b"abc").decode())
        assert media_type == "image/jpeg"
        assert data == b"abc"

    def test_unknown_tag_defaults_to_jpeg(self):
        media_type, _ = decode_payload("data:image/x-unknown;base64," + base64.b64encode(b"x").decode())
        assert media_type == "image/jpeg"

    def test_whitespace_in_body_is_ignored(self):
        encoded = base64.b64encode(b"hello world").decode()
        _, data = decode_payload(f"data:image/png;base64,{encoded[:4]}\n{encoded[4:]}")
        assert data == b"hello world"

    def test_invalid_base64(self):
        with pytest.raises(DecodeError):
            decode_payload("data:image/png;base64,not*base64!")

    def test_empty_body(self):
        with pytest.raises(DecodeError):
            decode_payload("data:image/png;base64,")


class TestMediaTypes:

    def test_canonical_media_type(self):
        assert canonical_media_type("IMAGE/JPG") == "image/jpeg"
        assert canonical_media_type("application/pdf") == "application/pdf"
        assert canonical_media_type("application/octet-stream") == "application/octet-stream"
        assert canonical_media_type(None) == "image/jpeg"

    def test_extension_for(self):
        assert extension_for("application/pdf") == "pdf"
        assert extension_for("image/heic") == "heic"
        assert extension_for("image/png") == "png"
        assert extension_for("image/jpeg") == "jpg"


class TestRasterPassthrough:

    def test_png_probed(self, normalizer):
        raw = image_bytes(size=(40, 20))
        image = normalizer.normalize(raw, "image/png")
        assert image.source_kind == "raster"
        assert (image.width, image.height) == (40, 20)
        assert image.media_type == "image/png"
        assert image.data == raw

    def test_detected_type_wins_over_tag(self, normalizer):
        image = normalizer.normalize(image_bytes(fmt="PNG"), "image/jpeg")
        assert image.media_type == "image/png"

    def test_rgba_keeps_alpha_flag(self, normalizer):
        image = normalizer.normalize(image_bytes(color=(0, 0, 0, 0), mode="RGBA"), "image/png")
        assert image.has_alpha

    def test_corrupt_raster(self, normalizer):
        with pytest.raises(DecodeError) as exc_info:
            normalizer.normalize(b"definitely not an image", "image/png")
        assert exc_info.value.status_code == 500

    def test_oversized_raster_is_decode_error(self, normalizer, monkeypatch):
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
        with pytest.raises(DecodeError) as exc_info:
            normalizer.normalize(image_bytes(size=(40, 20)), "image/png")
        assert "decompression bomb" in exc_info.value.message.lower()

    def test_default_logger_in_app_namespace(self, normalizer):
        assert normalizer.logger.name == "print_prep.modules.format_normalizer"


class TestPdfRendering:

    def test_first_page_rendered_at_scale(self, normalizer):
        image = normalizer.normalize(pdf_bytes(width=100, height=50), "application/pdf")
        assert image.source_kind == "pdf"
        assert image.media_type == "image/png"
        assert (image.width, image.height) == (300, 150)
        assert image.open().size == (300, 150)

    def test_multi_page_uses_first_page(self, normalizer):
        image = normalizer.normalize(pdf_bytes(pages=3), "application/pdf")
        assert (image.width, image.height) == (300, 150)

    def test_missing_header_is_client_error(self, normalizer):
        with pytest.raises(InvalidPdfError) as exc_info:
            normalizer.normalize(b"hello", "application/pdf")
        assert exc_info.value.status_code == 400

    def test_header_only_pdf_fails_decode(self, normalizer):
        with pytest.raises(DecodeError):
            normalizer.normalize(b"%PDF-1.4\nnot really a pdf", "application/pdf")


class TestHeicConversion:

    def test_undecodable_heic(self, normalizer):
        with pytest.raises(HeicDecodeError):
            normalizer.normalize(b"not heic", "image/heic")

    def test_octet_stream_goes_through_heic_path(self, normalizer):
        with pytest.raises(HeicDecodeError):
            normalizer.normalize(b"\x00\x01", "application/octet-stream")

    def test_heic_converted_to_jpeg(self, normalizer):
        buffer = BytesIO()
        try:
            Image.new("RGB", (32, 16), (0, 128, 0)).save(buffer, format="HEIF")
        except (KeyError, OSError, ValueError):
            pytest.skip("HEIF encoder not available")

        image = normalizer.normalize(buffer.getvalue(), "image/heic")
        assert image.source_kind == "heic"
        assert image.media_type == "image/jpeg"
        assert (image.width, image.height) == (32, 16)
        assert image.open().format == "JPEG"


class TestPdfAnalyzer:

    def test_header_check(self):
        assert has_pdf_header(b"%PDF-1.7 ...")
        assert not has_pdf_header(b"PDF-1.7")

    def test_analyze_counts_pages(self):
        info = PDFAnalyzer().analyze(pdf_bytes(pages=2, width=595, height=842))
        assert info["pages"] == 2
        assert info["first_page_mm"]["width"] == pytest.approx(209.9, abs=0.2)
