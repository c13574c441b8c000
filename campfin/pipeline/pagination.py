"""Pagination of the result grid.

The grid's pager shows a summary such as ``Page 2 of 5 (46 items)`` and a
"next" button that is only rendered as a link while a next page exists.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from campfin.common.exceptions import NavigationAnomalyException
from campfin.data_types import PaginationState
from campfin.portal import PortalConfig, Timings

if TYPE_CHECKING:
    from campfin.driver.browser import BrowserSession

logger = logging.getLogger(__name__)

PAGER_SUMMARY_PATTERN = re.compile(r"Page (\d+) of (\d+) \((\d+) items\)")


def parse_pager_summary(text: str | None) -> PaginationState | None:
    """Parse the pager summary text into a ``PaginationState``.

    Returns:
        The state, or None if the text is missing, does not match, or
        describes an impossible position.
    """
    if not text:
        return None
    match = PAGER_SUMMARY_PATTERN.search(text)
    if not match:
        return None
    current_page, total_pages, total_items = (int(g) for g in match.groups())
    if not 1 <= current_page <= total_pages:
        return None
    return PaginationState(
        current_page=current_page,
        total_pages=total_pages,
        total_items=total_items,
    )


async def wait_for_grid(session: BrowserSession, timings: Timings) -> None:
    """Wait for the grid to settle after a postback.

    Waits for network idle, tolerating a timeout since the portal keeps
    spurious requests pending, then waits a fixed delay.
    """
    if not await session.wait_for_network_idle(timings.network_idle_timeout):
        logger.debug("Network idle timeout, continuing anyway...")
    await session.wait(timings.grid_settle)


class PaginationWalker:
    """Read and advance the grid pager.

    Args:
        session: The browser session the grid is loaded in.
        portal: Portal selectors.
        timings: Wait durations.
    """

    def __init__(
        self,
        session: BrowserSession,
        portal: PortalConfig | None = None,
        timings: Timings | None = None,
    ) -> None:
        self.session = session
        self.portal = portal or PortalConfig()
        self.timings = timings or Timings()

    async def read_state(self) -> PaginationState | None:
        """Parse the pager summary of the loaded page.

        Returns:
            The current state, or None if the grid has no pager.
        """
        text = await self.session.text_content(
            self.portal.pager_summary, self.timings.summary_timeout
        )
        return parse_pager_summary(text)

    async def advance(self) -> bool:
        """Go to the next page.

        Returns:
            False if there is no enabled next button (last page), True
            once the next page has been requested and the grid settled.
        """
        if await self.session.count(self.portal.next_button) == 0:
            return False

        await self.session.click(self.portal.next_button)
        await wait_for_grid(self.session, self.timings)
        return True

    @staticmethod
    def verify_advance(
        before: PaginationState, after: PaginationState | None
    ) -> None:
        """Check that an advance moved forward by exactly one page.

        Raises:
            NavigationAnomalyException: If the page number did not increase
                by one, the page count changed, or the pager vanished.
        """
        expected_page = before.current_page + 1
        if (
            after is None
            or after.current_page != expected_page
            or after.total_pages != before.total_pages
        ):
            raise NavigationAnomalyException(
                expected_page=expected_page,
                actual_page=after.current_page if after else None,
                expected_total=before.total_pages,
                actual_total=after.total_pages if after else None,
            )
