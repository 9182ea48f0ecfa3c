# ABOUTME: The `homelib lend` and `homelib return` commands for borrow tracking.
# ABOUTME: Records who has a book and since when, and clears it when it comes back.

from datetime import datetime
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from homelib.cli.options import library_options, open_catalog, resolve_config
from homelib.db.mapping import format_timestamp


@click.command("lend")
@click.argument("book_id", type=int)
@click.argument("borrower")
@library_options
def lend(
    book_id: int,
    borrower: str,
    db_path: Path | None,
    covers_dir: Path | None,
    config_path: Path | None,
) -> None:
    """Record that a book has been lent to BORROWER."""
    console = Console()
    config = resolve_config(config_path, db_path, covers_dir)

    with open_catalog(config) as catalog:
        record = catalog.get_by_id(book_id)
        if record is None:
            console.print(f"[red]Book {book_id} not found.[/red]")
            raise SystemExit(1)
        if record.is_borrowed:
            console.print(
                f"[yellow]'{escape(record.title)}' is already lent to "
                f"{escape(record.borrowed_to or 'someone')}.[/yellow]"
            )
            raise SystemExit(1)
        catalog.set_borrowed(book_id, borrower, format_timestamp(datetime.now()))

    console.print(f"Lent [bold]{escape(record.title)}[/bold] to [cyan]{escape(borrower)}[/cyan].")


@click.command("return")
@click.argument("book_id", type=int)
@library_options
def return_book(
    book_id: int, db_path: Path | None, covers_dir: Path | None, config_path: Path | None,
) -> None:
    """Mark a lent book as returned."""
    console = Console()
    config = resolve_config(config_path, db_path, covers_dir)

    with open_catalog(config) as catalog:
        record = catalog.get_by_id(book_id)
        if record is None:
            console.print(f"[red]Book {book_id} not found.[/red]")
            raise SystemExit(1)
        if not record.is_borrowed:
            console.print(f"[yellow]'{escape(record.title)}' is not lent out.[/yellow]")
            return
        catalog.set_borrowed(book_id, None, None)

    console.print(f"[bold]{escape(record.title)}[/bold] is back on the shelf.")
