# ABOUTME: The `homelib add` command for cataloging a book by hand or by ISBN lookup.
# ABOUTME: Builds a CatalogRecord from options, optionally prefilled from Open Library.

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from homelib.cli.options import library_options, open_catalog, resolve_config
from homelib.core.assets import AssetError, AssetRelocator
from homelib.db.catalog import StoreError
from homelib.metadata.types import CatalogRecord


def _lookup(isbn: str) -> CatalogRecord | None:
    """Run the Open Library lookup. Imported lazily so plain adds never touch httpx."""
    from homelib.metadata.http import HomelibHttpClient
    from homelib.metadata.openlibrary import OpenLibraryLookup

    with HomelibHttpClient() as client:
        return OpenLibraryLookup(http_client=client).lookup_isbn(isbn)


@click.command("add")
@click.argument("title", required=False)
@click.option("-a", "--author", "authors", multiple=True, help="Author name (repeatable).")
@click.option("--subtitle", default=None)
@click.option("--isbn10", default=None)
@click.option("--isbn13", default=None)
@click.option("--publisher", default=None)
@click.option("--year", "year_published", type=int, default=None)
@click.option("-c", "--category", default=None)
@click.option("--shelf", "shelf_location", default=None, help="Shelf location.")
@click.option("--tags", default=None, help="Free-text tags.")
@click.option("--format", "book_format", default=None, help="Hardcover, paperback, ...")
@click.option("--language", default=None)
@click.option("--notes", default=None)
@click.option("--location", "physical_location", default=None, help="Room or building.")
@click.option("--rating", type=click.IntRange(0, 5), default=None)
@click.option("--read/--unread", "is_read", default=False)
@click.option(
    "--cover",
    "cover_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Cover image to attach.",
)
@click.option("--lookup", "lookup_isbn", default=None, help="Prefill fields from an ISBN lookup.")
@click.option(
    "--allow-duplicate",
    is_flag=True,
    default=False,
    help="Add even if a book with the same ISBN is already cataloged.",
)
@library_options
def add(
    title: str | None,
    authors: tuple[str, ...],
    subtitle: str | None,
    isbn10: str | None,
    isbn13: str | None,
    publisher: str | None,
    year_published: int | None,
    category: str | None,
    shelf_location: str | None,
    tags: str | None,
    book_format: str | None,
    language: str | None,
    notes: str | None,
    physical_location: str | None,
    rating: int | None,
    is_read: bool,
    cover_file: Path | None,
    lookup_isbn: str | None,
    allow_duplicate: bool,
    db_path: Path | None,
    covers_dir: Path | None,
    config_path: Path | None,
) -> None:
    """Add a book to the library."""
    console = Console()

    base: CatalogRecord | None = None
    if lookup_isbn:
        base = _lookup(lookup_isbn)
        if base is None:
            console.print(f"[yellow]No lookup result for ISBN {escape(lookup_isbn)}.[/yellow]")

    title = title or (base.title if base else None)
    if not title:
        console.print("[red]A title is required (or a --lookup that finds one).[/red]")
        raise SystemExit(1)

    record = CatalogRecord(
        title=title,
        subtitle=subtitle or (base.subtitle if base else None),
        isbn10=isbn10 or (base.isbn10 if base else None),
        isbn13=isbn13 or (base.isbn13 if base else None),
        publisher=publisher or (base.publisher if base else None),
        year_published=year_published or (base.year_published if base else None),
        language=language or (base.language if base else None),
        authors=list(authors) or (base.authors if base else []),
        category=category,
        shelf_location=shelf_location,
        tags=tags,
        format=book_format,
        notes=notes,
        physical_location=physical_location,
        rating=rating,
        is_read=is_read,
    )

    config = resolve_config(config_path, db_path, covers_dir)
    with open_catalog(config) as catalog:
        if not allow_duplicate:
            for isbn in (record.isbn10, record.isbn13):
                existing = catalog.find_by_isbn(isbn) if isbn else None
                if existing is not None:
                    console.print(
                        f"[yellow]ISBN {escape(isbn)} is already cataloged as "
                        f"'{escape(existing.title)}' (ID {existing.id}).[/yellow]"
                    )
                    raise SystemExit(1)

        try:
            saved = catalog.save(record)
            if cover_file is not None:
                relocator = AssetRelocator(config.covers_dir)
                stored = relocator.store_cover(cover_file, saved.id)  # type: ignore[arg-type]
                catalog.set_cover(saved.id, str(stored))  # type: ignore[arg-type]
        except (StoreError, AssetError, OSError) as exc:
            console.print(f"[red]Could not add book:[/red] {escape(str(exc))}")
            raise SystemExit(1) from exc

    console.print(f"Added [bold]{escape(saved.title)}[/bold] as ID {saved.id}.")
