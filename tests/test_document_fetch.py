"""Tests for the per-document fetch pipeline."""

import logging

from campfin.data_types import DocumentStatus, FilingRecord
from campfin.pipeline import DocumentFetcher, resolve_session_key
from campfin.storage import FilingStore
from tests.utils import (
    HTML_ERROR_PAGE,
    PORTAL,
    FakeSession,
    RecordingStore,
    filing_row,
    make_key,
)

RECORD = FilingRecord(
    form_type="460 Recipient Committee Campaign Statement",
    filing_date="2025-06-30",
    filer_name="Committee 1",
    candidate_last_name="Last1",
    candidate_first_name="First1",
)


def expected_url(key: str) -> str:
    return (
        f"{PORTAL.base_url}/PdfHandler.axd?key={key}"
        "PdfDownloadSessionKey&download=True&fileName=Form"
    )


class TestResolveSessionKey:
    """Tests for polling the viewer frame."""

    async def test_key_found_on_first_poll(self):
        row = filing_row(1)
        session = FakeSession([[row]])
        session.open_viewer(row)

        key = await resolve_session_key(session, PORTAL.document_object)

        assert key == make_key(1)
        assert session.waits == []

    async def test_key_found_after_delay(self):
        row = filing_row(1)
        session = FakeSession([[row]], viewer_delay=2)
        session.open_viewer(row)

        key = await resolve_session_key(
            session, PORTAL.document_object, attempts=5, interval=1000
        )

        assert key == make_key(1)
        assert session.waits == [1000, 1000]

    async def test_gives_up_after_attempts(self):
        session = FakeSession([[filing_row(1)]])

        key = await resolve_session_key(
            session, PORTAL.document_object, attempts=3, interval=250
        )

        assert key is None
        assert session.waits == [250, 250]

    async def test_viewer_without_key_is_a_miss(self):
        row = filing_row(1, key=None)
        session = FakeSession([[row]])
        session.open_viewer(row)

        assert await resolve_session_key(session, PORTAL.document_object) is None


class TestDocumentFetcher:
    """Tests for DocumentFetcher.process outcomes."""

    async def test_success_stores_record_and_pdf(self):
        row = filing_row(1)
        session = FakeSession([[row]])
        store = RecordingStore()
        fetcher = DocumentFetcher(session, store)

        status = await fetcher.process(row, RECORD)

        assert status is DocumentStatus.SUCCESS
        assert store.saved == [(RECORD, row.payload)]
        assert session.fetched_urls == [expected_url(make_key(1))]
        assert session.pressed == ["Escape"]
        assert session.open_row is None

    async def test_waits_for_viewer_after_click(self):
        row = filing_row(1)
        session = FakeSession([[row]])

        await DocumentFetcher(session, RecordingStore()).process(row, RECORD)

        assert row.clicks == 1
        assert session.waits == [1500, 500]

    async def test_dry_run_is_success_without_storing(self):
        row = filing_row(1)
        session = FakeSession([[row]])
        fetcher = DocumentFetcher(session, store=None)

        status = await fetcher.process(row, RECORD)

        assert status is DocumentStatus.SUCCESS
        assert session.fetched_urls == [expected_url(make_key(1))]

    async def test_missing_key_is_skipped(self, caplog):
        row = filing_row(1, key=None)
        session = FakeSession([[row]])
        store = RecordingStore()

        with caplog.at_level(logging.WARNING):
            status = await DocumentFetcher(session, store).process(row, RECORD)

        assert status is DocumentStatus.SKIPPED
        assert store.saved == []
        assert session.fetched_urls == []
        assert session.waits.count(1000) == 4
        assert session.pressed == ["Escape"]
        assert "after 5 attempts" in caplog.text

    async def test_slow_viewer_still_succeeds(self):
        row = filing_row(1)
        session = FakeSession([[row]], viewer_delay=2)
        store = RecordingStore()

        status = await DocumentFetcher(session, store).process(row, RECORD)

        assert status is DocumentStatus.SUCCESS
        assert len(store.saved) == 1

    async def test_html_payload_is_skipped(self, caplog):
        row = filing_row(1, payload=HTML_ERROR_PAGE * 2)
        session = FakeSession([[row]])
        store = RecordingStore()

        with caplog.at_level(logging.WARNING):
            status = await DocumentFetcher(session, store).process(row, RECORD)

        assert status is DocumentStatus.SKIPPED
        assert store.saved == []
        assert "not a valid PDF" in caplog.text
        assert "<!DOCTYPE html>" in caplog.text
        assert session.pressed == ["Escape"]

    async def test_short_pdf_is_skipped(self):
        row = filing_row(1, payload=b"%PDF-1.4\n%%EOF")
        session = FakeSession([[row]])
        store = RecordingStore()

        status = await DocumentFetcher(session, store).process(row, RECORD)

        assert status is DocumentStatus.SKIPPED
        assert store.saved == []

    async def test_fetch_error_is_skipped(self):
        row = filing_row(1, fetch_error=RuntimeError("Failed to fetch"))
        session = FakeSession([[row]])
        store = RecordingStore()

        status = await DocumentFetcher(session, store).process(row, RECORD)

        assert status is DocumentStatus.SKIPPED
        assert store.saved == []
        assert session.pressed == ["Escape"]

    async def test_store_error_is_skipped(self):
        row = filing_row(1)
        session = FakeSession([[row]])
        store = RecordingStore(error=RuntimeError("database is locked"))

        status = await DocumentFetcher(session, store).process(row, RECORD)

        assert status is DocumentStatus.SKIPPED
        assert session.pressed == ["Escape"]

    async def test_dismiss_failure_does_not_raise(self):
        row = filing_row(1)
        session = FakeSession([[row]])

        async def broken_press(key):
            raise RuntimeError("Target closed")

        session.press = broken_press

        status = await DocumentFetcher(session, RecordingStore()).process(
            row, RECORD
        )

        assert status is DocumentStatus.SUCCESS

    async def test_debug_pauses_after_success(self):
        row = filing_row(1)
        session = FakeSession([[row]])

        await DocumentFetcher(session, RecordingStore(), debug=True).process(
            row, RECORD
        )

        assert session.waits[-1] == 300000

    async def test_debug_pause_on_closed_browser_keeps_success(self):
        row = filing_row(1)
        session = FakeSession([[row]])
        store = RecordingStore()
        waits = []

        async def wait(milliseconds: int) -> None:
            if milliseconds == 300000:
                raise RuntimeError(
                    "Target page, context or browser has been closed"
                )
            waits.append(milliseconds)

        session.wait = wait

        status = await DocumentFetcher(session, store, debug=True).process(
            row, RECORD
        )

        assert status is DocumentStatus.SUCCESS
        assert len(store.saved) == 1
        assert 300000 not in waits

    async def test_debug_does_not_pause_after_skip(self):
        row = filing_row(1, payload=HTML_ERROR_PAGE)
        session = FakeSession([[row]])

        await DocumentFetcher(session, RecordingStore(), debug=True).process(
            row, RECORD
        )

        assert 300000 not in session.waits

    async def test_persists_to_real_store(self, store: FilingStore):
        row = filing_row(1)
        session = FakeSession([[row]])

        status = await DocumentFetcher(session, store).process(row, RECORD)

        assert status is DocumentStatus.SUCCESS
        assert await store.count_filings() == 1
        exported = [e async for e in store.iter_exports()]
        assert exported[0].file_name == RECORD.file_name
        assert exported[0].pdf_blob == row.payload
