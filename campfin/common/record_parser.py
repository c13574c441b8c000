"""Parsing of raw grid row text into ``FilingRecord`` objects.

Cells are read from the live page as ``str | None``; nothing here raises
on bad input. A row that cannot be parsed yields ``None`` and the caller
skips it.
"""

from __future__ import annotations

import re
from enum import Enum

from campfin.data_types import FilingRecord

FORM_CODE_PATTERN = re.compile(r"^(\d+(-[A-Z])?)")
UNKNOWN_FORM_TYPE = "unknown"


class FormTypePolicy(Enum):
    """How the form type column is turned into ``FilingRecord.form_type``.

    FULL keeps the trimmed column text verbatim. CODE keeps only the
    leading form code ("410", "410-A"), the older behaviour. A run must
    stick to one policy, since form type is part of the natural key.
    """

    FULL = "full"
    CODE = "code"


def normalize_date(text: str | None) -> str | None:
    """Convert a portal date ``M/D/YYYY`` to ``YYYY-MM-DD``.

    Month and day are zero-padded. No calendar validation is done.

    Returns:
        The ISO date string, or None if the text is empty or does not
        split into three numeric fields.
    """
    if not text:
        return None
    parts = text.strip().split("/")
    if len(parts) != 3:
        return None
    month, day, year = (p.strip() for p in parts)
    if not (month.isdigit() and day.isdigit() and year.isdigit()):
        return None
    return f"{year}-{month.zfill(2)}-{day.zfill(2)}"


def convert_date_format(iso_date: str) -> str:
    """Convert ``YYYY-MM-DD`` to the ``MM/DD/YYYY`` the search form expects."""
    year, month, day = iso_date.split("-")
    return f"{month}/{day}/{year}"


def extract_form_code(form_type_text: str) -> str:
    """Extract the leading form code from a descriptive form type.

    "410 Statement of Organization, Form 410" becomes "410" and
    "410-A Statement of Organization" becomes "410-A".
    """
    match = FORM_CODE_PATTERN.match(form_type_text.strip())
    return match.group(1) if match else UNKNOWN_FORM_TYPE


def _clean(text: str | None) -> str:
    return text.strip() if text else ""


def extract_filing_record(
    form_type_text: str | None,
    filing_date_text: str | None,
    filer_name_text: str | None,
    candidate_last_name_text: str | None = None,
    candidate_first_name_text: str | None = None,
    candidate_middle_name_text: str | None = None,
    policy: FormTypePolicy = FormTypePolicy.FULL,
) -> FilingRecord | None:
    """Build a ``FilingRecord`` from the text of one grid row.

    Args:
        form_type_text: Form Type column.
        filing_date_text: Filing Date column, ``M/D/YYYY``.
        filer_name_text: Filer Name column.
        candidate_last_name_text: Candidate Last Name column.
        candidate_first_name_text: Candidate First Name column.
        candidate_middle_name_text: Candidate Middle Name column.
        policy: Form type policy for this run.

    Returns:
        The record, or None when the form type or filing date is missing
        or the date is malformed.
    """
    if not form_type_text or not form_type_text.strip():
        return None

    filing_date = normalize_date(filing_date_text)
    if filing_date is None:
        return None

    if policy is FormTypePolicy.CODE:
        form_type = extract_form_code(form_type_text)
    else:
        form_type = form_type_text.strip()

    return FilingRecord(
        form_type=form_type,
        filing_date=filing_date,
        filer_name=_clean(filer_name_text),
        candidate_last_name=_clean(candidate_last_name_text),
        candidate_first_name=_clean(candidate_first_name_text),
        candidate_middle_name=_clean(candidate_middle_name_text),
    )
