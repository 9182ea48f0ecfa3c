# ABOUTME: The `homelib ls` command for listing cataloged books.
# ABOUTME: Displays a Rich table, optionally filtered by category, read, or lending status.

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from homelib.cli.options import library_options, open_catalog, resolve_config
from homelib.metadata.types import CatalogRecord


def _rating_display(rating: int | None) -> str:
    return "*" * rating if rating else ""


def render_book_table(records: list[CatalogRecord]) -> Table:
    """Build the book table shared by ls and search."""
    table = Table()
    table.add_column("ID", style="dim", width=4)
    table.add_column("Title", style="bold")
    table.add_column("Author")
    table.add_column("Category")
    table.add_column("Year", width=5)
    table.add_column("Read", width=4)
    table.add_column("Rating", width=6)

    for record in records:
        title = escape(record.title)
        if record.is_borrowed:
            borrower = escape(record.borrowed_to or "someone")
            title += f" [yellow](lent to {borrower})[/yellow]"
        table.add_row(
            str(record.id),
            title,
            escape(record.author) if record.author else "[dim]unknown[/dim]",
            escape(record.category or ""),
            str(record.year_published) if record.year_published else "",
            "yes" if record.is_read else "",
            _rating_display(record.rating),
        )
    return table


@click.command("ls")
@click.option("-c", "--category", "category_filter", default=None, help="Filter by category.")
@click.option(
    "--read/--unread",
    "read_filter",
    default=None,
    help="Only read or only unread books.",
)
@click.option("--borrowed", is_flag=True, default=False, help="Only books currently lent out.")
@library_options
def ls(
    category_filter: str | None,
    read_filter: bool | None,
    borrowed: bool,
    db_path: Path | None,
    covers_dir: Path | None,
    config_path: Path | None,
) -> None:
    """List all books in the library."""
    console = Console()
    config = resolve_config(config_path, db_path, covers_dir)

    with open_catalog(config) as catalog:
        if category_filter:
            records = catalog.list_by_category(category_filter)
        elif borrowed:
            records = catalog.list_by_borrowed_status(True)
        else:
            records = catalog.list_all()

    if read_filter is not None:
        records = [r for r in records if r.is_read == read_filter]
    if borrowed:
        records = [r for r in records if r.is_borrowed]

    if not records:
        console.print("[yellow]No books in the library.[/yellow]")
        return

    console.print(render_book_table(records))
    console.print(f"\n[dim]{len(records)} book(s)[/dim]")
