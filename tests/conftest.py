"""Shared fixtures for campfin tests."""

import asyncio
import socket
import threading
import time
from collections.abc import AsyncIterator, Generator
from contextlib import closing
from pathlib import Path

import pytest
from aiohttp import web

from campfin.storage import FilingStore
from tests.mock_portal import create_app


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """A path for a fresh SQLite database."""
    return tmp_path / "campfin.db"


@pytest.fixture
async def store(db_path: Path) -> AsyncIterator[FilingStore]:
    """An open store on a fresh database."""
    async with FilingStore.open(db_path) as filing_store:
        yield filing_store


# =============================================================================
# aiohttp mock portal fixtures
# =============================================================================


def find_free_port() -> int:
    """Find a free port on localhost.

    Returns:
        An available port number.
    """
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(("", 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


class AioHttpTestServer:
    """Wrapper to run aiohttp server in a background thread."""

    def __init__(self, app: web.Application, port: int) -> None:
        self.app = app
        self.port = port
        self.host = "127.0.0.1"
        self._loop: asyncio.AbstractEventLoop | None = None
        self._runner: web.AppRunner | None = None
        self._thread: threading.Thread | None = None

    @property
    def url(self) -> str:
        """Get the base URL of the server."""
        return f"http://{self.host}:{self.port}"

    def start(self) -> None:
        """Start the server in a background thread."""
        self._thread = threading.Thread(target=self._run_server, daemon=True)
        self._thread.start()
        # Give the server time to start
        time.sleep(0.1)

    def _run_server(self) -> None:
        """Run the server in an asyncio event loop."""
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)

        async def start() -> None:
            self._runner = web.AppRunner(self.app)
            await self._runner.setup()
            site = web.TCPSite(self._runner, self.host, self.port)
            await site.start()

        self._loop.run_until_complete(start())
        self._loop.run_forever()

    def stop(self) -> None:
        """Stop the server and clean up resources."""
        if self._loop and self._runner:
            runner = self._runner
            future = asyncio.run_coroutine_threadsafe(
                runner.cleanup(), self._loop
            )
            try:
                future.result(timeout=2.0)
            except Exception:
                pass  # Best effort cleanup

        if self._loop:
            self._loop.call_soon_threadsafe(self._loop.stop)

        if self._thread:
            self._thread.join(timeout=2.0)


@pytest.fixture
def portal_server() -> Generator[AioHttpTestServer, None, None]:
    """Start the mock campaign document portal on a random port.

    Yields:
        AioHttpTestServer instance with the mock portal running.
    """
    app = create_app()
    server = AioHttpTestServer(app, find_free_port())
    server.start()
    yield server
    server.stop()
