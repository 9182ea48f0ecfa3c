# ABOUTME: The `homelib rm` command for removing a book from the catalog.
# ABOUTME: Also deletes the book's cover image when it lives in the covers directory.

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from homelib.cli.options import library_options, open_catalog, resolve_config
from homelib.core.assets import AssetRelocator


@click.command("rm")
@click.argument("book_id", type=int)
@click.option("-y", "--yes", is_flag=True, default=False, help="Don't ask for confirmation.")
@library_options
def rm(
    book_id: int,
    yes: bool,
    db_path: Path | None,
    covers_dir: Path | None,
    config_path: Path | None,
) -> None:
    """Remove a book from the library."""
    console = Console()
    config = resolve_config(config_path, db_path, covers_dir)

    with open_catalog(config) as catalog:
        record = catalog.get_by_id(book_id)
        if record is None:
            console.print(f"[red]Book {book_id} not found.[/red]")
            raise SystemExit(1)

        if not yes and not click.confirm(f"Remove '{record.title}'?", default=False):
            console.print("[dim]Cancelled.[/dim]")
            return

        catalog.delete_book(book_id)
        in_use = [r.cover_image_path for r in catalog.list_all()]

    AssetRelocator(config.covers_dir).discard_cover(record.cover_image_path, in_use=in_use)
    console.print(f"Removed [bold]{escape(record.title)}[/bold].")
