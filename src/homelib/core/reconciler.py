# ABOUTME: Duplicate detection for archive imports.
# ABOUTME: Classifies incoming records against a one-time snapshot of the catalog.

from collections.abc import Iterable
from dataclasses import dataclass

from homelib.metadata.types import CatalogRecord


@dataclass(frozen=True)
class DuplicateSkip:
    """An incoming record that already exists in the catalog, and why we think so."""

    title: str
    reason: str

    @property
    def message(self) -> str:
        return f"Skipped '{self.title}' ({self.reason})"


def _author_key(authors: Iterable[str]) -> frozenset[str]:
    return frozenset(name.lower() for name in authors if name)


class DuplicateReconciler:
    """Decides whether an incoming record duplicates one already in the store.

    The store is snapshotted once, at construction. Records saved during the
    same import are not added to the snapshot, so two incoming records that
    only duplicate each other are both treated as new.
    """

    def __init__(self, existing: Iterable[CatalogRecord]) -> None:
        self._isbn10: set[str] = set()
        self._isbn13: set[str] = set()
        self._titles: dict[str, list[frozenset[str]]] = {}

        for record in existing:
            if record.isbn10:
                self._isbn10.add(record.isbn10)
            if record.isbn13:
                self._isbn13.add(record.isbn13)
            self._titles.setdefault(record.title.lower(), []).append(
                _author_key(record.authors)
            )

    def classify(self, record: CatalogRecord) -> DuplicateSkip | None:
        """Return a DuplicateSkip if record is already cataloged, else None.

        Checked in order: ISBN-10, ISBN-13, then case-insensitive title with
        the same case-insensitive set of authors (no authors on both sides
        counts as the same).
        """
        if record.isbn10 and record.isbn10 in self._isbn10:
            return DuplicateSkip(record.title, f"ISBN-10: {record.isbn10}")

        if record.isbn13 and record.isbn13 in self._isbn13:
            return DuplicateSkip(record.title, f"ISBN-13: {record.isbn13}")

        author_sets = self._titles.get(record.title.lower(), [])
        if _author_key(record.authors) in author_sets:
            return DuplicateSkip(record.title, "Title and authors match")

        return None
