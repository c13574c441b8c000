"""campfin CLI: scrape filings and export stored PDFs.

Usage:
    campfin scrape --start 2025-01-01 --end 2025-12-31 -o campfin.db
    campfin scrape --start 2025-01-01 --end 2025-12-31 -o campfin.db --debug
    campfin scrape --start 2025-01-01 --end 2025-01-31          # dry run
    campfin export campfin.db -o ./pdfs
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from contextlib import AsyncExitStack
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

import click

from campfin.common.exceptions import CollaboratorUnavailableException
from campfin.common.record_parser import FormTypePolicy
from campfin.portal import DEFAULT_BASE_URL, PortalConfig

if TYPE_CHECKING:
    from campfin.data_types import PageResult, RunSummary
    from campfin.storage.sql_manager import ExportRecord

DATE_FORMAT = "%Y-%m-%d"


def _configure_logging(verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@click.group()
@click.version_option(package_name="campfin")
def cli() -> None:
    """campfin: campaign finance filing scraper."""


@cli.command()
@click.option(
    "--start",
    type=click.DateTime(formats=[DATE_FORMAT]),
    required=True,
    help="First filing date (YYYY-MM-DD).",
)
@click.option(
    "--end",
    type=click.DateTime(formats=[DATE_FORMAT]),
    required=True,
    help="Last filing date (YYYY-MM-DD).",
)
@click.option(
    "-o",
    "--output",
    "db_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="SQLite database to store filings in. Omit for a dry run.",
)
@click.option(
    "--debug",
    is_flag=True,
    help="Show the browser and pause 5 minutes after each stored PDF.",
)
@click.option(
    "--form-type",
    "form_type",
    type=click.Choice([p.value for p in FormTypePolicy]),
    default=FormTypePolicy.FULL.value,
    show_default=True,
    help="Store the full form type text or only the leading form code.",
)
@click.option(
    "--base-url",
    default=DEFAULT_BASE_URL,
    show_default=True,
    help="Root URL of the document retrieval portal.",
)
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging.")
def scrape(
    start: datetime,
    end: datetime,
    db_path: str | None,
    debug: bool,
    form_type: str,
    base_url: str,
    verbose: bool,
) -> None:
    """Download filings in a date range into a database.

    \b
    Examples:
        campfin scrape --start 2025-01-01 --end 2025-12-31 -o campfin.db
        campfin scrape --start 2025-01-01 --end 2025-12-31 -o campfin.db --debug
    """
    _configure_logging(verbose)

    if start > end:
        raise click.BadParameter(
            "--start must not be after --end", param_hint="--start"
        )

    start_date = start.strftime(DATE_FORMAT)
    end_date = end.strftime(DATE_FORMAT)
    click.echo(f"Date range: {start_date} to {end_date}")
    if db_path:
        click.echo(f"Output database: {db_path}")
    else:
        click.echo("No database specified - running in dry-run mode")
    if debug:
        click.echo(
            "Debug mode: enabled (browser visible + 5 min pause after each PDF)"
        )

    def on_page(result: PageResult) -> None:
        click.echo(
            f"Page {result.page_number} complete: {result.stored} PDFs "
            f"downloaded, {result.failed} failed, "
            f"{result.unparsable} unparsable rows"
        )

    try:
        summary = asyncio.run(
            _scrape(
                start_date,
                end_date,
                db_path=Path(db_path) if db_path else None,
                debug=debug,
                policy=FormTypePolicy(form_type),
                portal=PortalConfig(base_url=base_url.rstrip("/")),
                on_page=on_page,
            )
        )
    except CollaboratorUnavailableException as e:
        raise click.ClickException(e.message) from e

    click.echo("\n=== Download complete! ===")
    click.echo(f"Total PDFs downloaded: {summary.stored}")
    if summary.failed or summary.unparsable:
        click.echo(
            f"Skipped: {summary.failed} failed, "
            f"{summary.unparsable} unparsable rows"
        )
    if db_path:
        click.echo(f"Database saved to: {db_path}")

    if summary.anomaly is not None:
        raise click.ClickException(
            f"Run stopped early: {summary.anomaly.message}"
        )


async def _scrape(
    start: str,
    end: str,
    db_path: Path | None,
    debug: bool,
    policy: FormTypePolicy,
    portal: PortalConfig,
    on_page: Callable[[PageResult], None] | None = None,
) -> RunSummary:
    from campfin.driver.playwright_driver import PlaywrightSession
    from campfin.pipeline import RunController
    from campfin.storage import FilingStore

    async with AsyncExitStack() as stack:
        store = None
        if db_path is not None:
            store = await stack.enter_async_context(FilingStore.open(db_path))

        session = await stack.enter_async_context(
            PlaywrightSession.open(headless=not debug)
        )
        controller = RunController(
            session,
            store,
            portal,
            debug=debug,
            policy=policy,
            on_page=on_page,
        )
        return await controller.run(start, end)


@cli.command("export")
@click.argument("db_path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "-o",
    "--output",
    "output_dir",
    type=click.Path(file_okay=False),
    required=True,
    help="Directory to write PDFs to.",
)
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging.")
def export(db_path: str, output_dir: str, verbose: bool) -> None:
    """Write every stored PDF to a directory.

    \b
    Examples:
        campfin export campfin.db -o ./pdfs
    """
    from campfin.storage import export_pdfs

    _configure_logging(verbose)
    click.echo(f"Extracting PDFs from {db_path} to {output_dir}")

    def on_export(record: ExportRecord, path: Path) -> None:
        click.echo(f"Extracted: {path.name}")

    try:
        count = asyncio.run(
            export_pdfs(Path(db_path), Path(output_dir), on_export=on_export)
        )
    except CollaboratorUnavailableException as e:
        raise click.ClickException(e.message) from e

    click.echo(f"\nDone! Extracted {count} PDFs to {output_dir}")


def main() -> None:
    """Entry point for the ``campfin`` console script."""
    cli()
