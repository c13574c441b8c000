"""Sequential scraping pipeline.

``RunController`` searches the portal and walks the result pages with
``PaginationWalker``; ``PageProcessor`` parses each row and hands it to
``DocumentFetcher``, which downloads, validates and stores the PDF.
"""

from campfin.pipeline.document_fetch import DocumentFetcher, resolve_session_key
from campfin.pipeline.page_processor import PageProcessor
from campfin.pipeline.pagination import (
    PaginationWalker,
    parse_pager_summary,
    wait_for_grid,
)
from campfin.pipeline.run_controller import RunController

__all__ = [
    "DocumentFetcher",
    "PageProcessor",
    "PaginationWalker",
    "RunController",
    "parse_pager_summary",
    "resolve_session_key",
    "wait_for_grid",
]
