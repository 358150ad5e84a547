"""Print-preparation modules for the PrintPrep application."""

__all__ = [
    "compositor",
    "format_normalizer",
    "paper_sizes",
    "pdf_analyzer",
    "request_validation",
]
