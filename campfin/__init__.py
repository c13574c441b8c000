"""Campaign finance filing scraper.

This package walks the Whittier City campaign document portal's paginated
result grid, parses each filing row, downloads the filing PDF through the
browser's own session, and stores it in a local SQLite database.

The pipeline is split between pure parsing helpers (``campfin.common``),
the browser collaborator (``campfin.driver``), the sequential scraping
pipeline (``campfin.pipeline``) and the store (``campfin.storage``).
"""

__version__ = "0.1.0"
