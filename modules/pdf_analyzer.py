"""Lightweight PDF probe used before rendering the first page."""

from __future__ import annotations

from io import BytesIO
from typing import Dict, Any

from pypdf import PdfReader

PDF_HEADER = b"%PDF-"
POINTS_PER_MM = 72 / 25.4


def has_pdf_header(data: bytes) -> bool:
    return data.startswith(PDF_HEADER)


class PDFAnalyzer:
    """Extract minimal metadata, resilient to malformed PDFs."""

    def analyze(self, data: bytes) -> Dict[str, Any]:
        info: Dict[str, Any] = {
            "pages": 0,
            "size_kb": round(len(data) / 1024, 2),
            "first_page_mm": None,
        }

        try:
            reader = PdfReader(BytesIO(data))
            info["pages"] = len(reader.pages)
            if reader.pages:
                page = reader.pages[0]
                info["first_page_mm"] = {
                    "width": round(float(page.mediabox.width) / POINTS_PER_MM, 1),
                    "height": round(float(page.mediabox.height) / POINTS_PER_MM, 1),
                }
        except Exception as exc:  # pragma: no cover - rendering reports the real failure
            info["error"] = f"PDF analysis failed: {exc}"

        return info
