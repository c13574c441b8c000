"""Portal configuration: URLs, selectors and wait timings.

The portal is a DevExpress ASP.NET application, so most selectors target
DevExpress generated ids and classes. Everything that depends on the
portal's markup lives here so the pipeline modules stay markup-agnostic.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_BASE_URL = (
    "https://www.southtechhosting.com/WhittierCity/CampaignDocsWebRetrieval"
)


@dataclass(frozen=True)
class PortalConfig:
    """Locations and selectors of the campaign document portal.

    Attributes:
        base_url: Root of the retrieval application, without trailing slash.
        search_path: Path of the "search by filed form" page.
        from_date_input: Selector of the start-date input.
        to_date_input: Selector of the end-date input.
        search_button: Selector of the search button.
        sort_header: Column header clicked to sort by filing date.
        row_selector: Selector matching each data row of the grid.
        document_link: Selector, relative to a row, of the PDF link.
        document_object: Selector of the embedded PDF element in the viewer.
        document_reference_attribute: Attribute holding the PDF handler URL.
        pager_summary: Selector of the "Page X of Y (Z items)" text.
        next_button: Selector of the enabled "next page" control.
        dismiss_key: Key pressed to close the document viewer.
    """

    base_url: str = DEFAULT_BASE_URL
    search_path: str = "/Search/SearchByFiledForm.aspx"
    from_date_input: str = 'input[name*="From"], input[id*="From"]'
    to_date_input: str = 'input[name*="To"], input[id*="To"]'
    search_button: str = 'span.dx-vam:has-text("Search")'
    sort_header: str = "#ctl00_GridContent_gridFilers_col1"
    row_selector: str = 'tr[id*="gridFilers_DXDataRow"]'
    document_link: str = 'a[id*="DXCBtn"]'
    document_object: str = 'object[type="application/pdf"]'
    document_reference_attribute: str = "data"
    pager_summary: str = "b.dxp-lead.dxp-summary"
    next_button: str = 'a.dxp-button.dxp-bi:has(img[alt="Next"])'
    dismiss_key: str = "Escape"

    @property
    def search_url(self) -> str:
        return f"{self.base_url}{self.search_path}"


@dataclass(frozen=True)
class Timings:
    """Bounded waits used in place of completion events the portal lacks.

    All values are milliseconds except ``credential_attempts``.
    """

    viewer_settle: int = 1500
    dismiss_settle: int = 500
    grid_settle: int = 2000
    network_idle_timeout: int = 10000
    summary_timeout: int = 5000
    credential_attempts: int = 5
    credential_interval: int = 1000
    debug_pause: int = 5 * 60 * 1000
