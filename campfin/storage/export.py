"""Export of stored PDFs to a directory."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from campfin.storage.sql_manager import ExportRecord, FilingStore

logger = logging.getLogger(__name__)


def safe_file_name(file_name: str) -> str:
    """Make a stored file name usable as a single path component."""
    return file_name.replace("/", "_").replace("\\", "_")


async def export_pdfs(
    db_path: Path,
    output_dir: Path,
    on_export: Callable[[ExportRecord, Path], None] | None = None,
) -> int:
    """Write every stored PDF to output_dir.

    Files are written in filing date order, then by identity, and named
    after their stored file name. A later filing with the same file name
    overwrites an earlier one.

    Args:
        db_path: Path to an existing store.
        output_dir: Destination directory, created if missing.
        on_export: Optional callback invoked after each file is written.

    Returns:
        Number of files written.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    count = 0
    async with FilingStore.open(db_path, read_only=True) as store:
        async for export in store.iter_exports():
            output_path = output_dir / safe_file_name(export.file_name)
            output_path.write_bytes(export.pdf_blob)
            count += 1
            logger.debug(f"Extracted {export.file_name} to {output_path}")
            if on_export is not None:
                on_export(export, output_path)
    return count
