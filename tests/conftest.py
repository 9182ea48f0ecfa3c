# ABOUTME: Shared pytest fixtures for homelib tests.
# ABOUTME: Provides temporary catalogs, cover directories, and sample records.

from collections.abc import Iterator
from datetime import datetime
from pathlib import Path

import pytest

from homelib.core.assets import AssetRelocator
from homelib.db.catalog import LibraryCatalog
from homelib.db.connection import open_library
from homelib.metadata.types import CatalogRecord


@pytest.fixture
def catalog(tmp_path: Path) -> Iterator[LibraryCatalog]:
    """Provide a LibraryCatalog backed by a temporary database."""
    conn = open_library(tmp_path / "library.db")
    yield LibraryCatalog(conn)
    conn.close()


@pytest.fixture
def covers_dir(tmp_path: Path) -> Path:
    """An existing covers directory for the store side."""
    path = tmp_path / "covers"
    path.mkdir()
    return path


@pytest.fixture
def relocator(covers_dir: Path) -> AssetRelocator:
    return AssetRelocator(covers_dir)


@pytest.fixture
def make_cover(tmp_path: Path):
    """Factory writing a fake image file into a source directory outside the covers dir."""
    source_dir = tmp_path / "images"
    source_dir.mkdir()

    def _make(name: str, content: bytes | None = None) -> Path:
        path = source_dir / name
        path.write_bytes(content if content is not None else b"\x89PNG fake " + name.encode())
        return path

    return _make


@pytest.fixture
def full_record() -> CatalogRecord:
    """A CatalogRecord with every field populated."""
    return CatalogRecord(
        title="The Name of the Rose",
        subtitle="A Novel",
        isbn10="0156001314",
        isbn13="9780156001311",
        publisher="Harcourt",
        year_published=1983,
        shelf_location="Living room, shelf 2",
        tags="mystery, medieval",
        format="Paperback",
        language="eng",
        notes="Gift from Anna.",
        physical_location="Home",
        is_read=True,
        is_borrowed=True,
        borrowed_to="Marco",
        borrowed_date=datetime(2024, 3, 1, 18, 30, 0),
        rating=5,
        date_added=datetime(2023, 12, 24, 9, 15, 0),
        category="Fiction",
        authors=["Umberto Eco"],
    )
