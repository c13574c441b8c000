"""Document fetch pipeline: one grid row to one stored PDF.

For each row the pipeline opens the document viewer, resolves the
session key from the nested viewer frame, downloads the PDF from inside
the browser session, validates it and stores it. The viewer is dismissed
on every path, and no per-document failure ever escapes ``process``:
one bad document must not stop the sweep.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from campfin.common.artifacts import describe_payload, is_valid_pdf
from campfin.common.credentials import build_download_url, extract_session_key
from campfin.common.exceptions import (
    CredentialNotFoundException,
    InvalidArtifactException,
    PortalAssumptionException,
)
from campfin.data_types import DocumentStatus
from campfin.portal import PortalConfig, Timings

if TYPE_CHECKING:
    from campfin.data_types import FilingRecord
    from campfin.driver.browser import BrowserSession, GridRow
    from campfin.storage.sql_manager import FilingStore

logger = logging.getLogger(__name__)


async def resolve_session_key(
    session: BrowserSession,
    selector: str,
    attribute: str = "data",
    attempts: int = 5,
    interval: int = 1000,
) -> str | None:
    """Poll the page's frames for the embedded PDF and return its key.

    The viewer frame is attached some time after the click, so a miss is
    retried up to ``attempts`` times, ``interval`` milliseconds apart.

    Args:
        session: The browser session showing the document viewer.
        selector: Selector of the embedded PDF element.
        attribute: Attribute holding the PDF handler reference.
        attempts: Number of polls before giving up.
        interval: Delay between polls, in milliseconds.

    Returns:
        The 32-character session key, or None if none was found.
    """
    for attempt in range(1, attempts + 1):
        frames = session.frames()
        logger.debug(f"Found {len(frames)} frames (attempt {attempt})")
        for frame in frames:
            if await frame.count(selector) == 0:
                continue
            reference = await frame.get_attribute(selector, attribute)
            key = extract_session_key(reference)
            if key:
                logger.debug(f"Extracted PDF reference: {reference}")
                return key
            if reference:
                logger.debug(f"No session key in reference: {reference}")

        if attempt < attempts:
            await session.wait(interval)

    return None


class DocumentFetcher:
    """Download and store the PDF behind one grid row.

    Args:
        session: The browser session the grid is loaded in.
        store: Filing store, or None for a dry run (nothing persisted).
        portal: Portal selectors and base URL.
        timings: Wait durations.
        debug: Pause after every stored document for manual inspection.
    """

    def __init__(
        self,
        session: BrowserSession,
        store: FilingStore | None = None,
        portal: PortalConfig | None = None,
        timings: Timings | None = None,
        debug: bool = False,
    ) -> None:
        self.session = session
        self.store = store
        self.portal = portal or PortalConfig()
        self.timings = timings or Timings()
        self.debug = debug

    async def process(
        self, row: GridRow, record: FilingRecord
    ) -> DocumentStatus:
        """Run the pipeline for one row.

        Returns:
            SUCCESS if the PDF was stored (or accepted in a dry run),
            SKIPPED otherwise.
        """
        logger.info(f"Processing: {record.file_name}")
        try:
            await self._fetch_and_store(row, record)
        except PortalAssumptionException as e:
            logger.warning(f"Skipping {record.file_name}: {e}")
            return DocumentStatus.SKIPPED
        except Exception as e:
            logger.error(
                f"Error downloading PDF for {record.filer_name}: {e}",
                exc_info=True,
            )
            return DocumentStatus.SKIPPED
        finally:
            await self._dismiss_viewer()

        if self.debug:
            await self._debug_pause()

        return DocumentStatus.SUCCESS

    async def _debug_pause(self) -> None:
        logger.info(
            "Debug mode: waiting "
            f"{self.timings.debug_pause // 1000}s for manual inspection..."
        )
        try:
            await self.session.wait(self.timings.debug_pause)
        except Exception as e:
            logger.warning(f"Debug pause interrupted: {e}")

    async def _fetch_and_store(
        self, row: GridRow, record: FilingRecord
    ) -> None:
        await row.click(self.portal.document_link)
        await self.session.wait(self.timings.viewer_settle)

        key = await resolve_session_key(
            self.session,
            self.portal.document_object,
            self.portal.document_reference_attribute,
            attempts=self.timings.credential_attempts,
            interval=self.timings.credential_interval,
        )
        if key is None:
            raise CredentialNotFoundException(
                record.file_name, self.timings.credential_attempts
            )
        logger.debug(f"Extracted key: {key}")

        download_url = build_download_url(key, self.portal.base_url)
        data = await self.session.fetch_bytes(download_url)
        logger.debug(f"Response size: {len(data)} bytes")

        if not is_valid_pdf(data):
            raise InvalidArtifactException(
                len(data), describe_payload(data), download_url
            )

        if self.store is None:
            logger.info(f"Dry run, not saving {record.file_name}")
            return

        filing_id = await self.store.save_filing(record, data)
        logger.info(f"Saved to database: {record.file_name} (id {filing_id})")

    async def _dismiss_viewer(self) -> None:
        try:
            await self.session.press(self.portal.dismiss_key)
            await self.session.wait(self.timings.dismiss_settle)
        except Exception as e:
            logger.warning(f"Could not dismiss document viewer: {e}")
