"""Session key extraction and download URL construction.

The document viewer embeds the PDF through the portal's ``PdfHandler.axd``
handler with a per-document, session-bound key. The same key, suffixed with
``PdfDownloadSessionKey``, addresses the downloadable copy.
"""

from __future__ import annotations

import re

from campfin.portal import DEFAULT_BASE_URL

SESSION_KEY_PATTERN = re.compile(r"PdfHandler\.axd[^?]*\?key=([a-f0-9]{32})")


def extract_session_key(reference: str | None) -> str | None:
    """Return the 32-character hex key from a PDF handler reference."""
    if not reference:
        return None
    match = SESSION_KEY_PATTERN.search(reference)
    return match.group(1) if match else None


def build_download_url(key: str, base_url: str = DEFAULT_BASE_URL) -> str:
    """Build the PDF download URL for a session key."""
    return (
        f"{base_url}/PdfHandler.axd?key={key}PdfDownloadSessionKey"
        "&download=True&fileName=Form"
    )
