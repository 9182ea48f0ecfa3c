# ABOUTME: The `homelib stats` command for a summary of the library.
# ABOUTME: Shows book, read, lent, author, and category counts plus books per category.

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from homelib.cli.options import library_options, open_catalog, resolve_config


@click.command("stats")
@library_options
def stats(db_path: Path | None, covers_dir: Path | None, config_path: Path | None) -> None:
    """Show library statistics."""
    console = Console()
    config = resolve_config(config_path, db_path, covers_dir)

    with open_catalog(config) as catalog:
        summary = catalog.stats()
        categories = catalog.list_categories()

    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Field", style="bold", width=12)
    table.add_column("Value", justify="right")
    table.add_row("Books", str(summary.total_books))
    table.add_row("Read", str(summary.read_books))
    table.add_row("Unread", str(summary.unread_books))
    table.add_row("Lent out", str(summary.borrowed_books))
    table.add_row("Authors", str(summary.total_authors))
    table.add_row("Categories", str(summary.total_categories))
    console.print(table)

    if categories:
        by_category = Table(title="Books per category")
        by_category.add_column("Category", style="cyan")
        by_category.add_column("Books", style="dim", justify="right")
        for name, count in categories:
            by_category.add_row(escape(name), str(count))
        console.print()
        console.print(by_category)
