"""Browser collaborator for the filing scraper.

``BrowserSession`` is the interface the pipeline drives; ``PlaywrightSession``
implements it with a real browser.
"""

from campfin.driver.browser import BrowserSession, ContentFrame, GridRow

__all__ = ["BrowserSession", "ContentFrame", "GridRow"]
