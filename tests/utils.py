"""Test utilities: in-memory stand-ins for the browser collaborator.

``FakeSession`` simulates the portal's result grid: a list of pages, each a
list of ``FakeRow``. Clicking a row's document link opens a viewer frame
whose embedded reference carries the row's session key, and fetching the
matching download URL returns the row's payload.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from campfin.portal import PortalConfig

PORTAL = PortalConfig()

PDF_BYTES = b"%PDF-1.4\n" + b"%" + b"x" * 200 + b"\n%%EOF\n"
HTML_ERROR_PAGE = (
    b"<!DOCTYPE html><html><head><title>Runtime Error</title></head>"
    b"<body><h1>Server Error in '/' Application.</h1></body></html>"
)


def make_key(n: int) -> str:
    """A deterministic 32-character lowercase hex session key."""
    return f"{n:032x}"


def viewer_reference(key: str) -> str:
    return (
        "/WhittierCity/CampaignDocsWebRetrieval/PdfHandler.axd"
        f"?key={key}&embedded=true#toolbar=0"
    )


class FakeFrame:
    """A content frame holding at most one embedded PDF reference."""

    def __init__(self, reference: str | None = None) -> None:
        self.reference = reference

    async def count(self, selector: str) -> int:
        if selector == PORTAL.document_object and self.reference is not None:
            return 1
        return 0

    async def get_attribute(self, selector: str, name: str) -> str | None:
        if selector == PORTAL.document_object and name == "data":
            return self.reference
        return None


@dataclass
class FakeRow:
    """A grid row.

    Attributes:
        cells: Column texts, missing trailing columns read as None.
        key: Session key embedded once the row's viewer opens. None means
            the viewer never shows a PDF.
        payload: Bytes served for the row's download URL.
        has_link: Whether the row has a document link.
        fetch_error: Raise this from ``fetch_bytes`` instead of returning.
        read_error: Raise this from ``cell_text``.
    """

    cells: list[str | None]
    key: str | None = None
    payload: bytes = PDF_BYTES
    has_link: bool = True
    fetch_error: Exception | None = None
    read_error: Exception | None = None
    session: FakeSession | None = field(default=None, repr=False)
    clicks: int = 0

    async def cell_text(self, index: int) -> str | None:
        if self.read_error is not None:
            raise self.read_error
        return self.cells[index] if index < len(self.cells) else None

    async def has(self, selector: str) -> bool:
        return selector == PORTAL.document_link and self.has_link

    async def click(self, selector: str) -> None:
        self.clicks += 1
        assert self.session is not None
        self.session.open_viewer(self)


def filing_row(
    n: int,
    form_type: str = "460 Recipient Committee Campaign Statement",
    filing_date: str = "6/30/2025",
    filer_name: str | None = None,
    **kwargs,
) -> FakeRow:
    """A parsable row with a unique key and filer."""
    return FakeRow(
        cells=[
            form_type,
            filing_date,
            filer_name if filer_name is not None else f"Committee {n}",
            f"Last{n}",
            f"First{n}",
            "",
        ],
        key=kwargs.pop("key", make_key(n)),
        **kwargs,
    )


class FakeSession:
    """A ``BrowserSession`` over simulated grid pages.

    Args:
        pages: Rows of each page, in order.
        show_pager: Render the pager summary (default: when more than one
            page).
        stuck_pager: Clicking next succeeds but the page never changes.
        viewer_delay: Number of ``frames()`` polls after a click before the
            viewer frame appears.
        reported_pages: Page count shown in the summary, if it should lie.
    """

    def __init__(
        self,
        pages: list[list[FakeRow]],
        show_pager: bool | None = None,
        stuck_pager: bool = False,
        viewer_delay: int = 0,
        reported_pages: int | None = None,
    ) -> None:
        self.pages = pages
        for rows in pages:
            for row in rows:
                row.session = self
        self.page_index = 0
        self.show_pager = len(pages) > 1 if show_pager is None else show_pager
        self.stuck_pager = stuck_pager
        self.viewer_delay = viewer_delay
        self.reported_pages = reported_pages

        self.open_row: FakeRow | None = None
        self._polls_since_open = 0
        self.events: list[tuple] = []
        self.fetched_urls: list[str] = []
        self.next_clicks = 0
        self.pressed: list[str] = []
        self.waits: list[int] = []

    # Viewer simulation

    def open_viewer(self, row: FakeRow) -> None:
        self.open_row = row
        self._polls_since_open = 0
        self.events.append(("open_viewer", row.key))

    # BrowserSession

    async def goto(self, url: str) -> None:
        self.events.append(("goto", url))

    async def fill(self, selector: str, text: str) -> None:
        self.events.append(("fill", selector, text))

    async def click(self, selector: str) -> None:
        self.events.append(("click", selector))
        if selector == PORTAL.next_button:
            self.next_clicks += 1
            if not self.stuck_pager:
                self.page_index += 1

    async def press(self, key: str) -> None:
        self.events.append(("press", key))
        self.pressed.append(key)
        if key == PORTAL.dismiss_key:
            self.open_row = None

    async def wait(self, milliseconds: int) -> None:
        self.waits.append(milliseconds)

    async def wait_for_network_idle(self, timeout: int) -> bool:
        return True

    async def text_content(self, selector: str, timeout: int) -> str | None:
        if selector != PORTAL.pager_summary or not self.show_pager:
            return None
        total_pages = self.reported_pages or len(self.pages)
        total_items = sum(len(rows) for rows in self.pages)
        return (
            f"Page {self.page_index + 1} of {total_pages} "
            f"({total_items} items)"
        )

    async def count(self, selector: str) -> int:
        if selector == PORTAL.next_button:
            return 1 if self.page_index < len(self.pages) - 1 else 0
        return 0

    async def rows(self, selector: str) -> list[FakeRow]:
        assert selector == PORTAL.row_selector
        return list(self.pages[self.page_index])

    def frames(self) -> list[FakeFrame]:
        frames = [FakeFrame()]
        row = self.open_row
        if row is not None:
            self._polls_since_open += 1
            if self._polls_since_open > self.viewer_delay and row.key:
                frames.append(FakeFrame(viewer_reference(row.key)))
        return frames

    async def fetch_bytes(self, url: str) -> bytes:
        self.fetched_urls.append(url)
        for rows in self.pages:
            for row in rows:
                if row.key and f"key={row.key}" in url:
                    if row.fetch_error is not None:
                        raise row.fetch_error
                    return row.payload
        raise AssertionError(f"Unexpected download URL: {url}")


class RecordingStore:
    """Minimal store capturing ``save_filing`` calls."""

    def __init__(self, error: Exception | None = None) -> None:
        self.saved: list[tuple] = []
        self.error = error

    async def save_filing(self, record, data: bytes) -> int:
        if self.error is not None:
            raise self.error
        self.saved.append((record, data))
        return len(self.saved)
