"""Validation of downloaded documents."""

from __future__ import annotations

PDF_SIGNATURE = b"%PDF"
MIN_PDF_SIZE = 100


def is_valid_pdf(data: bytes) -> bool:
    """Check that a fully downloaded buffer looks like a PDF.

    The buffer must be longer than ``MIN_PDF_SIZE`` bytes and start with
    the ``%PDF`` signature.
    """
    return len(data) > MIN_PDF_SIZE and data[:4] == PDF_SIGNATURE


def describe_payload(data: bytes, limit: int = 100) -> str:
    """Printable rendition of the first bytes of a payload, for logs."""
    return data[:limit].decode("utf-8", errors="replace")
