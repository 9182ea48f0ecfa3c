# ABOUTME: CLI package for homelib, built on Click.
# ABOUTME: Defines the root command group, logging setup, and registers subcommands.

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from homelib.cli.commands import (
    add_cmd,
    cover_cmd,
    export_cmd,
    import_cmd,
    info_cmd,
    lend_cmd,
    ls_cmd,
    rm_cmd,
    search_cmd,
    stats_cmd,
)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=verbose)
        ],
        force=True,
    )


@click.group()
@click.version_option(package_name="homelib")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """homelib - catalog your home book collection."""
    _configure_logging(verbose)


cli.add_command(add_cmd.add)
cli.add_command(ls_cmd.ls)
cli.add_command(info_cmd.info)
cli.add_command(search_cmd.search)
cli.add_command(rm_cmd.rm)
cli.add_command(cover_cmd.cover)
cli.add_command(lend_cmd.lend)
cli.add_command(lend_cmd.return_book)
cli.add_command(stats_cmd.stats)
cli.add_command(export_cmd.export_command)
cli.add_command(import_cmd.import_command)
