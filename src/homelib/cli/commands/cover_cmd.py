# ABOUTME: The `homelib cover` command for attaching a cover image to a book.
# ABOUTME: Copies the image into the covers directory and records its path.

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from homelib.cli.options import library_options, open_catalog, resolve_config
from homelib.core.assets import AssetError, AssetRelocator


@click.command("cover")
@click.argument("book_id", type=int)
@click.argument("image", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@library_options
def cover(
    book_id: int,
    image: Path,
    db_path: Path | None,
    covers_dir: Path | None,
    config_path: Path | None,
) -> None:
    """Attach a cover image to a book."""
    console = Console()
    config = resolve_config(config_path, db_path, covers_dir)
    relocator = AssetRelocator(config.covers_dir)

    with open_catalog(config) as catalog:
        record = catalog.get_by_id(book_id)
        if record is None:
            console.print(f"[red]Book {book_id} not found.[/red]")
            raise SystemExit(1)

        try:
            stored = relocator.store_cover(image, book_id)
        except (AssetError, OSError) as exc:
            console.print(f"[red]Could not store cover:[/red] {escape(str(exc))}")
            raise SystemExit(1) from exc

        others = [r.cover_image_path for r in catalog.list_all() if r.id != book_id]
        relocator.discard_cover(record.cover_image_path, keep=stored, in_use=others)
        catalog.set_cover(book_id, str(stored))

    console.print(f"Cover for [bold]{escape(record.title)}[/bold] set to {escape(str(stored))}.")
