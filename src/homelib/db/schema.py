# ABOUTME: SQL DDL statements for the homelib catalog database schema.
# ABOUTME: Defines books, authors, categories, their links, FTS5 search, and migrations.

SCHEMA_V1 = """
CREATE TABLE categories (
    id   INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE
);

CREATE TABLE authors (
    id   INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE
);

-- Core book catalog table
CREATE TABLE books (
    id                INTEGER PRIMARY KEY AUTOINCREMENT,
    title             TEXT NOT NULL,
    subtitle          TEXT,
    isbn10            TEXT,
    isbn13            TEXT,
    publisher         TEXT,
    year_published    INTEGER,
    category_id       INTEGER REFERENCES categories(id) ON DELETE SET NULL,
    shelf_location    TEXT,
    tags              TEXT,
    format            TEXT,
    language          TEXT,
    notes             TEXT,
    physical_location TEXT,
    cover_image_path  TEXT,
    is_read           INTEGER NOT NULL DEFAULT 0,
    is_borrowed       INTEGER NOT NULL DEFAULT 0,
    borrowed_to       TEXT,
    borrowed_date     TEXT,
    rating            INTEGER CHECK (rating IS NULL OR rating BETWEEN 0 AND 5),
    date_added        TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now', 'localtime'))
);

CREATE INDEX idx_books_isbn10 ON books(isbn10) WHERE isbn10 IS NOT NULL;
CREATE INDEX idx_books_isbn13 ON books(isbn13) WHERE isbn13 IS NOT NULL;
CREATE INDEX idx_books_category ON books(category_id);

-- Ordered many-to-many link between books and authors
CREATE TABLE book_authors (
    book_id   INTEGER NOT NULL REFERENCES books(id) ON DELETE CASCADE,
    author_id INTEGER NOT NULL REFERENCES authors(id) ON DELETE CASCADE,
    position  INTEGER NOT NULL,
    PRIMARY KEY (book_id, author_id)
);

-- Schema versioning for future migrations
CREATE TABLE schema_version (
    version    INTEGER NOT NULL,
    applied_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now'))
);

INSERT INTO schema_version (version) VALUES (1);
"""

# V2: full-text search over the text fields people actually search by.
# Author names are denormalized into the index by the catalog on save.
MIGRATION_V2 = """
CREATE VIRTUAL TABLE books_fts USING fts5(
    title, subtitle, authors, tags, notes
);

CREATE TRIGGER books_ad AFTER DELETE ON books BEGIN
    DELETE FROM books_fts WHERE rowid = old.id;
END;

INSERT INTO schema_version (version) VALUES (2);
"""

MIGRATIONS: list[tuple[int, str]] = [
    (1, SCHEMA_V1),
    (2, MIGRATION_V2),
]
