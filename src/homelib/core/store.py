# ABOUTME: RecordStore protocol: the narrow view of the catalog the import/export core needs.
# ABOUTME: LibraryCatalog satisfies it; tests can pass any in-memory implementation.

from typing import Protocol, runtime_checkable

from homelib.metadata.types import CatalogRecord


@runtime_checkable
class RecordStore(Protocol):
    """Protocol for the persistent catalog consumed by import and export.

    Implementations raise homelib.db.StoreError (or any exception, on import,
    where it is recorded against the failing record) when a call fails.
    """

    def list_all(self) -> list[CatalogRecord]: ...

    def find_by_isbn(self, isbn: str) -> CatalogRecord | None: ...

    def save(self, record: CatalogRecord) -> CatalogRecord: ...
