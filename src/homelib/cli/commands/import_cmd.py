# ABOUTME: The `homelib import` command for loading an archive into the catalog.
# ABOUTME: Skips books already cataloged and reports every skip and error.

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn

from homelib.cli.options import library_options, open_catalog, resolve_config
from homelib.core.archive import FormatError
from homelib.core.assets import AssetRelocator
from homelib.core.transfer import ImportResult, import_library
from homelib.db.catalog import StoreError


def _make_progress(console: Console) -> Progress:
    """Create a Rich progress bar for the import batch."""
    return Progress(
        TextColumn("[bold]Importing"),
        BarColumn(),
        MofNCompleteColumn(),
        console=console,
        transient=True,
    )


def _print_summary(console: Console, result: ImportResult) -> None:
    parts = [f"[green]{result.added} added[/green]"]
    if result.skipped:
        parts.append(f"[yellow]{result.skipped} skipped[/yellow]")
    if result.errors:
        parts.append(f"[red]{result.errors} error(s)[/red]")
    console.print(", ".join(parts))

    if result.skip_details:
        console.print(f"\n[yellow]{result.skipped} duplicate(s) skipped:[/yellow]")
        for skip in result.skip_details:
            console.print(f"  [dim]{escape(skip.title)}:[/dim] {escape(skip.reason)}")

    if result.error_details:
        console.print(f"\n[red]{result.errors} book(s) could not be imported:[/red]")
        for title, message in result.error_details:
            console.print(f"  [dim]{escape(title)}:[/dim] {escape(message)}")


@click.command("import")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@library_options
def import_command(
    source: Path,
    db_path: Path | None,
    covers_dir: Path | None,
    config_path: Path | None,
) -> None:
    """Import books and cover images from an archive file."""
    console = Console()
    config = resolve_config(config_path, db_path, covers_dir)

    with open_catalog(config) as catalog, _make_progress(console) as progress:
        task_id = progress.add_task("import", total=None)

        def on_progress(done: int, total: int) -> None:
            progress.update(task_id, completed=done, total=total)

        try:
            result = import_library(
                source, catalog, AssetRelocator(config.covers_dir), on_progress=on_progress,
            )
        except (FormatError, StoreError) as exc:
            progress.stop()
            console.print(f"[red]Import failed:[/red] {escape(str(exc))}")
            raise SystemExit(1) from exc

    _print_summary(console, result)
