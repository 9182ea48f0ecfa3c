# ABOUTME: The `homelib export` command for writing the catalog to a portable archive.
# ABOUTME: Packs every book and its cover image into one zip file.

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from homelib.cli.options import library_options, open_catalog, resolve_config
from homelib.core.assets import AssetRelocator
from homelib.core.transfer import export_library
from homelib.db.catalog import StoreError


@click.command("export")
@click.argument("destination", type=click.Path(dir_okay=False, path_type=Path))
@library_options
def export_command(
    destination: Path,
    db_path: Path | None,
    covers_dir: Path | None,
    config_path: Path | None,
) -> None:
    """Export the whole library, with cover images, to an archive file."""
    console = Console()
    config = resolve_config(config_path, db_path, covers_dir)

    with open_catalog(config) as catalog:
        try:
            result = export_library(catalog, AssetRelocator(config.covers_dir), destination)
        except StoreError as exc:
            console.print(f"[red]Export failed:[/red] {escape(str(exc))}")
            raise SystemExit(1) from exc

    console.print(
        f"[green]Exported {result.books} book(s) and {result.assets} cover image(s)[/green] "
        f"to {escape(str(result.path))}"
    )
    if result.missing_covers:
        console.print(
            f"\n[yellow]{len(result.missing_covers)} cover image(s) were missing "
            "and not exported:[/yellow]"
        )
        for title in result.missing_covers:
            console.print(f"  [dim]{escape(title)}[/dim]")
