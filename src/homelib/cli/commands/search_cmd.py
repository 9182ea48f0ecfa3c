# ABOUTME: The `homelib search` command for full-text search of the catalog.
# ABOUTME: Searches title, subtitle, authors, tags, and notes using SQLite FTS5.

from pathlib import Path

import click
from rich.console import Console

from homelib.cli.commands.ls_cmd import render_book_table
from homelib.cli.options import library_options, open_catalog, resolve_config


@click.command("search")
@click.argument("query")
@library_options
def search(
    query: str, db_path: Path | None, covers_dir: Path | None, config_path: Path | None,
) -> None:
    """Search the library by title, author, tags, or notes."""
    console = Console()
    config = resolve_config(config_path, db_path, covers_dir)

    with open_catalog(config) as catalog:
        results = catalog.search(query)

    if not results:
        console.print("[yellow]No results found.[/yellow]")
        return

    console.print(render_book_table(results))
    console.print(f"\n[dim]{len(results)} result(s)[/dim]")
