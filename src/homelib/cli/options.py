# ABOUTME: Shared Click options and catalog session handling for homelib CLI commands.
# ABOUTME: Provides --db, --covers-dir, --config, and a context manager that opens the catalog.

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TypeVar

import click

from homelib.config import DEFAULT_CONFIG_PATH, ConfigError, LibraryConfig, load_config
from homelib.db.catalog import LibraryCatalog, StoreError
from homelib.db.connection import open_library

F = TypeVar("F", bound=Callable[..., object])

db_option = click.option(
    "--db",
    "db_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to library database (default: from config, else ~/.homelib/library.db)",
)

covers_option = click.option(
    "--covers-dir",
    "covers_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for cover images (default: from config, else ~/.homelib/covers)",
)

config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help=f"Path to config file (default: {DEFAULT_CONFIG_PATH})",
)


def library_options(func: F) -> F:
    """Apply --db, --covers-dir, and --config to a command."""
    return db_option(covers_option(config_option(func)))  # type: ignore[return-value]


def resolve_config(
    config_path: Path | None, db_path: Path | None, covers_dir: Path | None,
) -> LibraryConfig:
    """Load the config file and apply command-line overrides."""
    try:
        config = load_config(config_path)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    return config.with_overrides(db_path=db_path, covers_dir=covers_dir)


@contextmanager
def open_catalog(config: LibraryConfig) -> Iterator[LibraryCatalog]:
    """Open the catalog database for the duration of a command."""
    try:
        conn = open_library(config.db_path)
    except StoreError as exc:
        raise click.ClickException(str(exc)) from exc
    try:
        yield LibraryCatalog(conn)
    finally:
        conn.close()
