"""FilingStore - database operations for scraped filings.

The store is the pipeline's only persistence dependency. It writes each
filing's metadata and PDF in one transaction, so an interrupted run loses
at most the document in flight.

Upsert semantics: saving a filing whose natural key already exists updates
its file name and replaces its PDF; it never adds a second metadata row.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import sqlalchemy as sa
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlmodel import select

from campfin.common.exceptions import CollaboratorUnavailableException
from campfin.storage.database import init_database, open_database_read_only
from campfin.storage.models import NATURAL_KEY_COLUMNS, Filing, FilingPdf

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from campfin.data_types import FilingRecord

logger = logging.getLogger(__name__)


@dataclass
class ExportRecord:
    """A stored PDF ready to be written to disk.

    Attributes:
        id: Filing identity.
        file_name: Stored file name of the filing.
        filing_date: Filing date, YYYY-MM-DD.
        pdf_blob: PDF payload.
    """

    id: int
    file_name: str
    filing_date: str
    pdf_blob: bytes


class FilingStore:
    """Keyed upsert and blob storage for filings.

    Example::

        async with FilingStore.open(Path("campfin.db")) as store:
            filing_id = await store.save_filing(record, pdf_bytes)
    """

    def __init__(
        self, engine: AsyncEngine, session_factory: async_sessionmaker
    ) -> None:
        self._engine = engine
        self._session_factory = session_factory
        self._lock = asyncio.Lock()

    @classmethod
    @asynccontextmanager
    async def open(
        cls, db_path: Path, read_only: bool = False
    ) -> AsyncIterator[FilingStore]:
        """Open the store at db_path, creating it unless read_only is set.

        Args:
            db_path: Path to the SQLite database file.
            read_only: Open an existing store for reading only. The file
                is neither created nor modified.

        Raises:
            CollaboratorUnavailableException: If the database cannot be
                opened or its schema created, or a read-only store lacks
                the filing tables.
        """
        try:
            if read_only:
                engine, session_factory = await open_database_read_only(
                    db_path
                )
            else:
                engine, session_factory = await init_database(db_path)
        except (sa.exc.SQLAlchemyError, OSError) as e:
            raise CollaboratorUnavailableException(
                f"database {db_path}", str(e)
            ) from e

        action = "opened read-only" if read_only else "initialized"
        logger.info(f"Database {action} at: {db_path}")
        try:
            yield cls(engine, session_factory)
        finally:
            await engine.dispose()

    @staticmethod
    async def _upsert_filing(session: AsyncSession, record: FilingRecord) -> int:
        insert_stmt = sqlite_insert(Filing).values(
            form_type=record.form_type,
            filing_date=record.filing_date,
            filer_name=record.filer_name,
            candidate_last_name=record.candidate_last_name,
            candidate_first_name=record.candidate_first_name,
            candidate_middle_name=record.candidate_middle_name,
            file_name=record.file_name,
        )
        upsert_stmt = insert_stmt.on_conflict_do_update(
            index_elements=list(NATURAL_KEY_COLUMNS),
            set_={"file_name": insert_stmt.excluded.file_name},
        ).returning(Filing.id)
        result = await session.execute(upsert_stmt)
        return result.scalar_one()

    @staticmethod
    async def _replace_pdf(
        session: AsyncSession, filing_id: int, data: bytes
    ) -> None:
        insert_stmt = sqlite_insert(FilingPdf).values(
            filing_id=filing_id, pdf_blob=data
        )
        await session.execute(
            insert_stmt.on_conflict_do_update(
                index_elements=["filing_id"],
                set_={"pdf_blob": insert_stmt.excluded.pdf_blob},
            )
        )

    async def upsert_filing(self, record: FilingRecord) -> int:
        """Insert or update filing metadata.

        Returns:
            The filing's identity, stable across re-scrapes.
        """
        async with self._lock, self._session_factory() as session:
            filing_id = await self._upsert_filing(session, record)
            await session.commit()
            return filing_id

    async def replace_pdf(self, filing_id: int, data: bytes) -> None:
        """Attach or replace the PDF of an existing filing."""
        async with self._lock, self._session_factory() as session:
            await self._replace_pdf(session, filing_id, data)
            await session.commit()

    async def save_filing(self, record: FilingRecord, data: bytes) -> int:
        """Upsert a filing and its PDF in a single transaction.

        Args:
            record: The parsed filing.
            data: The validated PDF payload.

        Returns:
            The filing's identity.
        """
        async with self._lock, self._session_factory() as session:
            filing_id = await self._upsert_filing(session, record)
            await self._replace_pdf(session, filing_id, data)
            await session.commit()
        logger.debug(f"Stored filing {filing_id}: {record.file_name}")
        return filing_id

    async def get_filing(self, filing_id: int) -> Filing | None:
        async with self._session_factory() as session:
            return await session.get(Filing, filing_id)

    async def get_pdf(self, filing_id: int) -> bytes | None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(FilingPdf.pdf_blob).where(
                    FilingPdf.filing_id == filing_id
                )
            )
            return result.scalar_one_or_none()

    async def count_filings(self) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                select(sa.func.count()).select_from(Filing)
            )
            return result.scalar_one()

    async def count_pdfs(self) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                select(sa.func.count()).select_from(FilingPdf)
            )
            return result.scalar_one()

    async def iter_exports(self) -> AsyncIterator[ExportRecord]:
        """Yield every stored PDF, ordered by filing date then identity."""
        query = (
            select(
                Filing.id,
                Filing.file_name,
                Filing.filing_date,
                FilingPdf.pdf_blob,
            )
            .join(FilingPdf, FilingPdf.filing_id == Filing.id)
            .order_by(Filing.filing_date, Filing.id)
        )
        async with self._session_factory() as session:
            result = await session.stream(query)
            async for row in result:
                yield ExportRecord(
                    id=row.id,
                    file_name=row.file_name,
                    filing_date=row.filing_date,
                    pdf_blob=row.pdf_blob,
                )
