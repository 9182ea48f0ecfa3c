# ABOUTME: Public API for the homelib catalog database layer.
# ABOUTME: Exports connection management, catalog operations, and store errors.

from homelib.db.catalog import LibraryCatalog, LibraryStats, StoreError
from homelib.db.connection import DEFAULT_DB_PATH, open_library

__all__ = [
    "DEFAULT_DB_PATH",
    "LibraryCatalog",
    "LibraryStats",
    "StoreError",
    "open_library",
]
