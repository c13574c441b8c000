"""SQLite store for scraped filings.

Two tables hold the data: ``filings`` for metadata, unique on the natural
key, and ``filing_pdfs`` for the PDF payloads.
"""

from campfin.storage.database import init_database
from campfin.storage.export import export_pdfs, safe_file_name
from campfin.storage.models import Filing, FilingPdf
from campfin.storage.sql_manager import ExportRecord, FilingStore

__all__ = [
    "ExportRecord",
    "Filing",
    "FilingPdf",
    "FilingStore",
    "export_pdfs",
    "init_database",
    "safe_file_name",
]
