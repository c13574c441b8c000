"""Browser collaborator interface.

The pipeline never touches Playwright objects directly. It drives the page
through the small set of primitives below, which ``PlaywrightSession``
implements on top of ``playwright.async_api`` and which tests implement
with in-memory fakes.
"""

from __future__ import annotations

from typing import Protocol


class ContentFrame(Protocol):
    """A content frame of the page (the main frame included)."""

    async def count(self, selector: str) -> int: ...

    async def get_attribute(self, selector: str, name: str) -> str | None:
        """Attribute of the first element matching selector.

        Returns None when the element or attribute is missing, or the
        frame is no longer accessible.
        """
        ...


class GridRow(Protocol):
    """One data row of the result grid."""

    async def cell_text(self, index: int) -> str | None: ...

    async def has(self, selector: str) -> bool: ...

    async def click(self, selector: str) -> None:
        """Click the first element matching selector inside the row."""
        ...


class BrowserSession(Protocol):
    """The single page a run is driven through."""

    async def goto(self, url: str) -> None: ...

    async def fill(self, selector: str, text: str) -> None: ...

    async def click(self, selector: str) -> None: ...

    async def press(self, key: str) -> None: ...

    async def wait(self, milliseconds: int) -> None: ...

    async def wait_for_network_idle(self, timeout: int) -> bool:
        """Wait for network idle; False if the timeout expired first."""
        ...

    async def text_content(self, selector: str, timeout: int) -> str | None:
        """Text of the first match, or None if it did not appear in time."""
        ...

    async def count(self, selector: str) -> int: ...

    async def rows(self, selector: str) -> list[GridRow]: ...

    def frames(self) -> list[ContentFrame]: ...

    async def fetch_bytes(self, url: str) -> bytes:
        """Fetch url from inside the page, using its cookies and session."""
        ...
