# ABOUTME: The `homelib info` command for displaying every field of one book.
# ABOUTME: Shows metadata, lending status, and the cover image path by ID.

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from homelib.cli.options import library_options, open_catalog, resolve_config


@click.command("info")
@click.argument("book_id", type=int)
@library_options
def info(
    book_id: int, db_path: Path | None, covers_dir: Path | None, config_path: Path | None,
) -> None:
    """Show detailed metadata for a book by ID."""
    console = Console()
    config = resolve_config(config_path, db_path, covers_dir)

    with open_catalog(config) as catalog:
        record = catalog.get_by_id(book_id)

    if record is None:
        console.print(f"[red]Book {book_id} not found.[/red]")
        raise SystemExit(1)

    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Field", style="bold", width=14)
    table.add_column("Value")

    table.add_row("ID", str(record.id))
    table.add_row("Title", escape(record.title))
    if record.subtitle:
        table.add_row("Subtitle", escape(record.subtitle))
    table.add_row("Author", escape(record.author or "unknown"))
    optional = [
        ("Category", record.category),
        ("ISBN-10", record.isbn10),
        ("ISBN-13", record.isbn13),
        ("Publisher", record.publisher),
        ("Year", str(record.year_published) if record.year_published else None),
        ("Language", record.language),
        ("Format", record.format),
        ("Shelf", record.shelf_location),
        ("Location", record.physical_location),
        ("Tags", record.tags),
        ("Notes", record.notes),
        ("Rating", f"{record.rating}/5" if record.rating is not None else None),
        ("Cover", record.cover_image_path),
    ]
    for label, value in optional:
        if value:
            table.add_row(label, escape(value))
    table.add_row("Read", "yes" if record.is_read else "no")
    if record.is_borrowed:
        lent = record.borrowed_to or "someone"
        if record.borrowed_date:
            lent += f" on {record.borrowed_date:%Y-%m-%d}"
        table.add_row("Lent to", escape(lent))
    if record.date_added:
        table.add_row("Added", record.date_added.isoformat(sep=" "))

    console.print(table)
