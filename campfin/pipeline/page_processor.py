"""Processing of every row on the currently loaded grid page."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from campfin.common.record_parser import FormTypePolicy, extract_filing_record
from campfin.data_types import DocumentStatus, PageResult
from campfin.portal import PortalConfig

if TYPE_CHECKING:
    from campfin.driver.browser import BrowserSession
    from campfin.pipeline.document_fetch import DocumentFetcher

logger = logging.getLogger(__name__)

# Form Type, Filing Date, Filer Name, Candidate Last, First, Middle Name
GRID_COLUMNS = 6


class PageProcessor:
    """Parse each grid row and fetch its document.

    Args:
        session: The browser session the grid is loaded in.
        fetcher: Document fetch pipeline invoked per parsed row.
        portal: Portal selectors.
        policy: Form type policy for the run.
    """

    def __init__(
        self,
        session: BrowserSession,
        fetcher: DocumentFetcher,
        portal: PortalConfig | None = None,
        policy: FormTypePolicy = FormTypePolicy.FULL,
    ) -> None:
        self.session = session
        self.fetcher = fetcher
        self.portal = portal or PortalConfig()
        self.policy = policy

    async def process_current_page(self, page_number: int) -> PageResult:
        """Process all rows of the loaded page.

        Unparsable rows and rows without a document link are skipped; a
        row that cannot even be read counts as a failure. Nothing raised
        while handling a row stops the page.
        """
        rows = await self.session.rows(self.portal.row_selector)
        result = PageResult(page_number=page_number, rows=len(rows))
        logger.info(f"Found {len(rows)} rows on page {page_number}")

        for index, row in enumerate(rows):
            try:
                texts = [await row.cell_text(i) for i in range(GRID_COLUMNS)]
                record = extract_filing_record(*texts, policy=self.policy)
                if record is None:
                    logger.debug(f"Row {index} is unparsable: {texts!r}")
                    result.unparsable += 1
                    continue
                if not await row.has(self.portal.document_link):
                    logger.debug(f"Row {index} has no document link")
                    continue
            except Exception as e:
                logger.error(
                    f"Could not read row {index} on page {page_number}: {e}",
                    exc_info=True,
                )
                result.failed += 1
                continue

            status = await self.fetcher.process(row, record)
            if status is DocumentStatus.SUCCESS:
                result.stored += 1
            else:
                result.failed += 1

        logger.info(
            f"Page {page_number} complete: {result.stored} stored, "
            f"{result.failed} failed, {result.unparsable} unparsable"
        )
        return result
