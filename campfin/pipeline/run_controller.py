"""End-to-end sweep of the result grid for a date range."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from campfin.common.exceptions import NavigationAnomalyException
from campfin.common.record_parser import FormTypePolicy, convert_date_format
from campfin.data_types import PageResult, RunSummary
from campfin.pipeline.document_fetch import DocumentFetcher
from campfin.pipeline.page_processor import PageProcessor
from campfin.pipeline.pagination import PaginationWalker, wait_for_grid
from campfin.portal import PortalConfig, Timings

if TYPE_CHECKING:
    from campfin.driver.browser import BrowserSession
    from campfin.storage.sql_manager import FilingStore

logger = logging.getLogger(__name__)


class RunController:
    """Search the portal and process every page of results.

    The controller owns the session and the store for the duration of the
    run. Pages are processed strictly one after another.

    Args:
        session: The browser session to drive.
        store: Filing store, or None for a dry run.
        portal: Portal selectors and URLs.
        timings: Wait durations.
        debug: Pause after every stored document.
        policy: Form type policy for the run.
        on_page: Optional callback invoked with each finished page.

    Example:
        async with PlaywrightSession.open() as session:
            controller = RunController(session, store)
            summary = await controller.run("2025-01-01", "2025-12-31")
    """

    def __init__(
        self,
        session: BrowserSession,
        store: FilingStore | None = None,
        portal: PortalConfig | None = None,
        timings: Timings | None = None,
        debug: bool = False,
        policy: FormTypePolicy = FormTypePolicy.FULL,
        on_page: Callable[[PageResult], None] | None = None,
    ) -> None:
        self.session = session
        self.portal = portal or PortalConfig()
        self.timings = timings or Timings()
        self.on_page = on_page
        self.walker = PaginationWalker(session, self.portal, self.timings)
        fetcher = DocumentFetcher(
            session, store, self.portal, self.timings, debug=debug
        )
        self.processor = PageProcessor(session, fetcher, self.portal, policy)

    async def perform_search(self, start: str, end: str) -> None:
        """Submit the search form for an ISO date range.

        Results are then sorted by filing date so page contents are stable
        from one run to the next.
        """
        logger.info("Navigating to the search page...")
        await self.session.goto(self.portal.search_url)
        await wait_for_grid(self.session, self.timings)

        from_date = convert_date_format(start)
        to_date = convert_date_format(end)
        logger.info(f"Setting date range: {from_date} to {to_date}")
        await self.session.fill(self.portal.from_date_input, from_date)
        await self.session.fill(self.portal.to_date_input, to_date)

        logger.info("Clicking search button...")
        await self.session.click(self.portal.search_button)
        await wait_for_grid(self.session, self.timings)

        logger.info("Sorting by Filing Date...")
        await self.session.click(self.portal.sort_header)
        await wait_for_grid(self.session, self.timings)

    async def run(self, start: str, end: str) -> RunSummary:
        """Search and walk every result page.

        The loop stops on the last page, when the next button is missing
        (authoritative even if the page count is wrong), or when the pager
        fails to move forward by exactly one page or cannot be operated at
        all. The latter two are recorded as ``RunSummary.anomaly``.

        Args:
            start: First filing date, YYYY-MM-DD.
            end: Last filing date, YYYY-MM-DD.

        Returns:
            Per-page counters and any navigation anomaly.
        """
        await self.perform_search(start, end)

        state = await self.walker.read_state()
        if state:
            logger.info(
                f"Pagination detected: Page {state.current_page} of "
                f"{state.total_pages} ({state.total_items} total items)"
            )
        else:
            logger.info("No pagination detected - processing single page")

        summary = RunSummary()
        page_number = state.current_page if state else 1

        while True:
            total = state.total_pages if state else 1
            logger.info(f"--- Processing page {page_number}/{total} ---")
            page_result = await self.processor.process_current_page(
                page_number
            )
            summary.pages.append(page_result)
            if self.on_page is not None:
                self.on_page(page_result)

            if state is None or state.is_last_page:
                logger.info("No more pages to process")
                break

            logger.info(f"Navigating to page {page_number + 1}...")
            try:
                if not await self.walker.advance():
                    logger.info("Could not find next page button - stopping")
                    break
                new_state = await self.walker.read_state()
            except Exception as e:
                logger.error(
                    f"Could not navigate to page {page_number + 1}: {e}",
                    exc_info=True,
                )
                summary.anomaly = NavigationAnomalyException(
                    expected_page=page_number + 1,
                    actual_page=None,
                    expected_total=state.total_pages,
                    actual_total=None,
                    reason=str(e),
                )
                break

            try:
                self.walker.verify_advance(state, new_state)
            except NavigationAnomalyException as e:
                logger.error(f"Stopping run: {e}")
                summary.anomaly = e
                break

            state = new_state
            page_number = state.current_page

        logger.info(
            f"Run complete: {summary.stored} PDFs stored, "
            f"{summary.failed} failed, {summary.unparsable} unparsable rows "
            f"across {len(summary.pages)} pages"
        )
        return summary
