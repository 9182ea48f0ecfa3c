# ABOUTME: CRUD operations for the homelib catalog.
# ABOUTME: Saves, queries, and deletes books, resolving author and category names to ids.

import logging
import sqlite3
from dataclasses import dataclass

from homelib.db.mapping import BOOK_COLUMNS, record_to_row, row_to_record
from homelib.metadata.types import CatalogRecord

logger = logging.getLogger(__name__)

_SELECT_BOOKS = (
    "SELECT b.*, c.name AS category_name FROM books b "
    "LEFT JOIN categories c ON b.category_id = c.id"
)


class StoreError(Exception):
    """Raised when the catalog database rejects a read or write."""


@dataclass
class LibraryStats:
    """Counts shown by `homelib stats`."""

    total_books: int = 0
    read_books: int = 0
    unread_books: int = 0
    borrowed_books: int = 0
    total_authors: int = 0
    total_categories: int = 0


def _fts_query(query: str) -> str:
    """Quote each term as an FTS5 prefix query so user input can't break MATCH syntax."""
    terms = [term.replace('"', '""') for term in query.split()]
    return " ".join(f'"{term}"*' for term in terms)


class LibraryCatalog:
    """Wraps a sqlite3 connection and provides typed CRUD for the catalog.

    Author and category identity is by name at this interface; their integer
    ids stay inside the database.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    # --- Writes ---

    def save(self, record: CatalogRecord) -> CatalogRecord:
        """Insert a new book (id is None) or update an existing one.

        Category and authors are looked up by name and created if missing.
        The whole save is one transaction.

        Returns:
            The stored record, reloaded with its assigned id and date_added.

        Raises:
            StoreError: If the database rejects the write.
            ValueError: If record.id is set but no such book exists.
        """
        try:
            category_id = self._category_id(record.category)
            row = record_to_row(record, category_id)
            if record.id is None:
                book_id = self._insert(row)
            else:
                book_id = record.id
                self._update(book_id, row)
            self._link_authors(book_id, record.authors)
            self._index(book_id, record)
            self._conn.commit()
        except sqlite3.Error as exc:
            self._conn.rollback()
            raise StoreError(f"Failed to save '{record.title}': {exc}") from exc
        except ValueError:
            self._conn.rollback()
            raise

        logger.debug("Saved book %d: %s", book_id, record.title)
        return self.get_by_id(book_id)  # type: ignore[return-value]

    def _insert(self, row: dict[str, object]) -> int:
        columns = ", ".join(row.keys())
        placeholders = ", ".join("?" for _ in row)
        cursor = self._conn.execute(
            f"INSERT INTO books ({columns}) VALUES ({placeholders})",
            list(row.values()),
        )
        return cursor.lastrowid  # type: ignore[return-value]

    def _update(self, book_id: int, row: dict[str, object]) -> None:
        set_clause = ", ".join(f"{k} = ?" for k in row)
        cursor = self._conn.execute(
            f"UPDATE books SET {set_clause} WHERE id = ?",
            [*row.values(), book_id],
        )
        if cursor.rowcount == 0:
            raise ValueError(f"Book with id {book_id} not found")

    def _category_id(self, name: str | None) -> int | None:
        if not name:
            return None
        self._conn.execute("INSERT OR IGNORE INTO categories (name) VALUES (?)", (name,))
        row = self._conn.execute("SELECT id FROM categories WHERE name = ?", (name,)).fetchone()
        return row[0]

    def _author_id(self, name: str) -> int:
        self._conn.execute("INSERT OR IGNORE INTO authors (name) VALUES (?)", (name,))
        row = self._conn.execute("SELECT id FROM authors WHERE name = ?", (name,)).fetchone()
        return row[0]

    def _link_authors(self, book_id: int, authors: list[str]) -> None:
        self._conn.execute("DELETE FROM book_authors WHERE book_id = ?", (book_id,))
        seen: set[int] = set()
        for position, name in enumerate(authors):
            if not name:
                continue
            author_id = self._author_id(name)
            if author_id in seen:
                continue
            seen.add(author_id)
            self._conn.execute(
                "INSERT INTO book_authors (book_id, author_id, position) VALUES (?, ?, ?)",
                (book_id, author_id, position),
            )

    def _index(self, book_id: int, record: CatalogRecord) -> None:
        """Refresh the FTS row for a book."""
        self._conn.execute("DELETE FROM books_fts WHERE rowid = ?", (book_id,))
        self._conn.execute(
            "INSERT INTO books_fts (rowid, title, subtitle, authors, tags, notes) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (book_id, record.title, record.subtitle, record.author, record.tags, record.notes),
        )

    def set_cover(self, book_id: int, cover_path: str | None) -> None:
        """Set or clear the cover image path for a book."""
        self._update_columns(book_id, cover_image_path=cover_path)

    def set_read(self, book_id: int, is_read: bool) -> None:
        self._update_columns(book_id, is_read=int(is_read))

    def set_borrowed(
        self, book_id: int, borrowed_to: str | None, borrowed_date: str | None
    ) -> None:
        """Mark a book as lent to someone, or returned when borrowed_to is None."""
        self._update_columns(
            book_id,
            is_borrowed=int(borrowed_to is not None),
            borrowed_to=borrowed_to,
            borrowed_date=borrowed_date,
        )

    def _update_columns(self, book_id: int, **fields: object) -> None:
        unknown = set(fields) - set(BOOK_COLUMNS)
        if unknown:
            raise ValueError(f"Unknown book columns: {', '.join(sorted(unknown))}")
        set_clause = ", ".join(f"{k} = ?" for k in fields)
        try:
            cursor = self._conn.execute(
                f"UPDATE books SET {set_clause} WHERE id = ?",
                [*fields.values(), book_id],
            )
            self._conn.commit()
        except sqlite3.Error as exc:
            self._conn.rollback()
            raise StoreError(f"Failed to update book {book_id}: {exc}") from exc

        if cursor.rowcount == 0:
            raise ValueError(f"Book with id {book_id} not found")

    def delete_book(self, book_id: int) -> None:
        """Delete a book from the catalog.

        Raises:
            ValueError: If the book_id does not exist.
        """
        try:
            cursor = self._conn.execute("DELETE FROM books WHERE id = ?", (book_id,))
            self._conn.commit()
        except sqlite3.Error as exc:
            self._conn.rollback()
            raise StoreError(f"Failed to delete book {book_id}: {exc}") from exc

        if cursor.rowcount == 0:
            raise ValueError(f"Book with id {book_id} not found")

    # --- Reads ---

    def _query(self, where: str = "", params: tuple[object, ...] = ()) -> list[CatalogRecord]:
        sql = f"{_SELECT_BOOKS} {where}" if where else f"{_SELECT_BOOKS} ORDER BY b.title"
        try:
            rows = self._conn.execute(sql, params).fetchall()
            authors = self._authors_by_book([row["id"] for row in rows])
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to read catalog: {exc}") from exc
        return [row_to_record(row, authors.get(row["id"], [])) for row in rows]

    def _authors_by_book(self, book_ids: list[int]) -> dict[int, list[str]]:
        """Fetch ordered author names for many books in one query."""
        if not book_ids:
            return {}
        placeholders = ", ".join("?" for _ in book_ids)
        cursor = self._conn.execute(
            "SELECT ba.book_id, a.name FROM book_authors ba "
            "JOIN authors a ON a.id = ba.author_id "
            f"WHERE ba.book_id IN ({placeholders}) "
            "ORDER BY ba.book_id, ba.position",
            book_ids,
        )
        result: dict[int, list[str]] = {}
        for book_id, name in cursor.fetchall():
            result.setdefault(book_id, []).append(name)
        return result

    def get_by_id(self, book_id: int) -> CatalogRecord | None:
        """Retrieve a book by its row ID."""
        records = self._query("WHERE b.id = ?", (book_id,))
        return records[0] if records else None

    def find_by_isbn(self, isbn: str) -> CatalogRecord | None:
        """Retrieve a book whose ISBN-10 or ISBN-13 equals isbn."""
        if not isbn:
            return None
        records = self._query(
            "WHERE b.isbn10 = ? OR b.isbn13 = ? ORDER BY b.id LIMIT 1", (isbn, isbn),
        )
        return records[0] if records else None

    def list_all(self) -> list[CatalogRecord]:
        """Return all books in the catalog, ordered by title."""
        return self._query()

    def list_by_category(self, category: str) -> list[CatalogRecord]:
        """Return books in a category (case-insensitive name match)."""
        return self._query("WHERE c.name = ? COLLATE NOCASE ORDER BY b.title", (category,))

    def list_by_read_status(self, is_read: bool) -> list[CatalogRecord]:
        return self._query("WHERE b.is_read = ? ORDER BY b.title", (int(is_read),))

    def list_by_borrowed_status(self, is_borrowed: bool) -> list[CatalogRecord]:
        return self._query("WHERE b.is_borrowed = ? ORDER BY b.title", (int(is_borrowed),))

    def search(self, query: str) -> list[CatalogRecord]:
        """Full-text search across title, subtitle, authors, tags, and notes.

        Each whitespace-separated term is matched as a prefix. Results are
        ranked by relevance (FTS5 rank).
        """
        fts = _fts_query(query)
        if not fts:
            return []
        try:
            rows = self._conn.execute(
                "SELECT rowid FROM books_fts WHERE books_fts MATCH ? ORDER BY rank",
                (fts,),
            ).fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"Search failed for {query!r}: {exc}") from exc

        ranked = [row[0] for row in rows]
        if not ranked:
            return []
        placeholders = ", ".join("?" for _ in ranked)
        by_id = {r.id: r for r in self._query(f"WHERE b.id IN ({placeholders})", tuple(ranked))}
        return [by_id[book_id] for book_id in ranked if book_id in by_id]

    def list_categories(self) -> list[tuple[str, int]]:
        """List all categories with their book counts, alphabetically sorted."""
        cursor = self._conn.execute(
            "SELECT c.name, COUNT(b.id) FROM categories c "
            "LEFT JOIN books b ON b.category_id = c.id "
            "GROUP BY c.id ORDER BY c.name"
        )
        return [(row[0], row[1]) for row in cursor.fetchall()]

    def list_authors(self) -> list[str]:
        cursor = self._conn.execute("SELECT name FROM authors ORDER BY name")
        return [row[0] for row in cursor.fetchall()]

    def stats(self) -> LibraryStats:
        """Aggregate counts across the catalog."""
        row = self._conn.execute(
            "SELECT COUNT(*), COALESCE(SUM(is_read), 0), COALESCE(SUM(is_borrowed), 0) FROM books"
        ).fetchone()
        total, read, borrowed = row[0], row[1], row[2]
        authors = self._conn.execute(
            "SELECT COUNT(DISTINCT author_id) FROM book_authors"
        ).fetchone()[0]
        categories = self._conn.execute("SELECT COUNT(*) FROM categories").fetchone()[0]
        return LibraryStats(
            total_books=total,
            read_books=read,
            unread_books=total - read,
            borrowed_books=borrowed,
            total_authors=authors,
            total_categories=categories,
        )
