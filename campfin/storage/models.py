"""SQLModel table definitions for the filing store.

Tables:
- filings: filing metadata, unique on the natural key
- filing_pdfs: one PDF blob per filing, deleted with its filing

Keeping blobs in their own table lets metadata queries run without loading
PDF payloads.
"""

from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy import Column, ForeignKey, Integer, LargeBinary
from sqlmodel import Field, SQLModel

NATURAL_KEY_COLUMNS = (
    "form_type",
    "filing_date",
    "filer_name",
    "candidate_last_name",
    "candidate_first_name",
)


class Filing(SQLModel, table=True):  # type: ignore[call-arg]
    """Filing metadata."""

    __tablename__ = "filings"
    __table_args__ = (
        sa.UniqueConstraint(*NATURAL_KEY_COLUMNS, name="uq_filings_natural_key"),
        sa.Index("idx_filings_filing_date", "filing_date"),
    )

    id: int | None = Field(default=None, primary_key=True)
    form_type: str
    filing_date: str
    filer_name: str
    candidate_last_name: str
    candidate_first_name: str
    candidate_middle_name: str
    file_name: str
    created_at: str | None = Field(
        default=None,
        sa_column_kwargs={"server_default": sa.text("CURRENT_TIMESTAMP")},
    )


class FilingPdf(SQLModel, table=True):  # type: ignore[call-arg]
    """PDF payload of a filing."""

    __tablename__ = "filing_pdfs"

    filing_id: int | None = Field(
        default=None,
        sa_column=Column(
            Integer,
            ForeignKey("filings.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )
    pdf_blob: bytes = Field(sa_column=Column(LargeBinary, nullable=False))
