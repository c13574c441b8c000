"""Core data types for the filing scraper.

``FilingRecord`` is the validated form of one result grid row. The other
types are transient bookkeeping for pagination and run progress; none of
them is persisted except through ``FilingRecord`` fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from campfin.common.exceptions import NavigationAnomalyException


class FilingRecord(BaseModel):
    """One filing as listed in the portal's result grid.

    Records are immutable once parsed. Two records with the same
    ``natural_key`` describe the same logical filing, even across runs.
    """

    model_config = ConfigDict(frozen=True)

    form_type: str = Field(..., description="Form type column text, e.g. 410")
    filing_date: str = Field(..., description="Filing date as YYYY-MM-DD")
    filer_name: str = Field("", description="Filer name column text")
    candidate_last_name: str = Field("", description="Candidate last name")
    candidate_first_name: str = Field("", description="Candidate first name")
    candidate_middle_name: str = Field(
        "", description="Candidate middle name"
    )

    @property
    def natural_key(self) -> tuple[str, str, str, str, str]:
        """Fields that identify a filing across runs."""
        return (
            self.form_type,
            self.filing_date,
            self.filer_name,
            self.candidate_last_name,
            self.candidate_first_name,
        )

    @property
    def file_name(self) -> str:
        """Deterministic PDF file name for this filing."""
        return f"{self.filing_date}.{self.filer_name}.{self.form_type}.pdf"


@dataclass(frozen=True)
class PaginationState:
    """Pager position parsed from the grid summary text.

    Attributes:
        current_page: 1-based page currently displayed.
        total_pages: Number of pages in the result set.
        total_items: Number of rows in the result set.
    """

    current_page: int
    total_pages: int
    total_items: int

    @property
    def is_last_page(self) -> bool:
        return self.current_page >= self.total_pages


class DocumentStatus(Enum):
    """Terminal state of the document fetch pipeline for one row."""

    SUCCESS = "success"
    SKIPPED = "skipped"


@dataclass
class PageResult:
    """Counters for one processed grid page.

    Attributes:
        page_number: 1-based page number.
        rows: Number of grid rows found on the page.
        stored: Documents downloaded and stored (or accepted in dry run).
        failed: Documents skipped by the fetch pipeline or row errors.
        unparsable: Rows missing the form type or filing date.
    """

    page_number: int
    rows: int = 0
    stored: int = 0
    failed: int = 0
    unparsable: int = 0


@dataclass
class RunSummary:
    """Totals for a complete sweep of the result grid."""

    pages: list[PageResult] = field(default_factory=list)
    anomaly: NavigationAnomalyException | None = None

    @property
    def stored(self) -> int:
        return sum(p.stored for p in self.pages)

    @property
    def failed(self) -> int:
        return sum(p.failed for p in self.pages)

    @property
    def unparsable(self) -> int:
        return sum(p.unparsable for p in self.pages)

    @property
    def rows(self) -> int:
        return sum(p.rows for p in self.pages)
