# ABOUTME: Fixtures for CLI end-to-end tests.
# ABOUTME: Runs homelib commands against a throwaway database, covers dir, and config path.

import logging
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from click.testing import CliRunner, Result

from homelib.cli import cli


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """The CLI reconfigures root logging onto the runner's streams; undo that."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def library_args(tmp_path: Path) -> list[str]:
    """--db/--covers-dir/--config flags pointing into tmp_path."""
    return [
        "--db", str(tmp_path / "home" / "library.db"),
        "--covers-dir", str(tmp_path / "home" / "covers"),
        "--config", str(tmp_path / "home" / "config.json"),
    ]


@pytest.fixture
def run(library_args: list[str]) -> Callable[..., Result]:
    """Invoke a homelib subcommand with the temporary library flags appended."""
    runner = CliRunner()

    def _run(*args: str, input: str | None = None) -> Result:
        return runner.invoke(cli, [*args, *library_args], input=input)

    return _run
