# ABOUTME: Opens the homelib catalog database and keeps its schema current.
# ABOUTME: Every schema step, the initial tables included, is a numbered migration.

import logging
import sqlite3
from pathlib import Path

from homelib.db.catalog import StoreError
from homelib.db.schema import MIGRATIONS

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path.home() / ".homelib" / "library.db"

_PRAGMAS = ("journal_mode=WAL", "foreign_keys=ON")


def schema_version(conn: sqlite3.Connection) -> int:
    """Highest migration recorded in conn; 0 for a database with no catalog yet."""
    tracked = conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = 'schema_version'"
    ).fetchone()
    if tracked is None:
        return 0
    return conn.execute("SELECT MAX(version) FROM schema_version").fetchone()[0] or 0


def migrate(conn: sqlite3.Connection) -> int:
    """Run the migrations conn has not seen yet and return its final version."""
    current = schema_version(conn)
    for version, script in MIGRATIONS:
        if version <= current:
            continue
        logger.info("Upgrading catalog schema from v%d to v%d", current, version)
        conn.executescript(script)
        current = version
    return current


def open_library(path: Path | None = None) -> sqlite3.Connection:
    """Connect to the catalog at path, ~/.homelib/library.db by default.

    A missing file is created along with its directories, and an older
    catalog is upgraded in place. Rows come back as sqlite3.Row.

    Raises:
        StoreError: If the file exists but is not a usable SQLite database.
    """
    db_path = path or DEFAULT_DB_PATH
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path))
    try:
        conn.row_factory = sqlite3.Row
        for pragma in _PRAGMAS:
            conn.execute(f"PRAGMA {pragma}")
        version = migrate(conn)
    except sqlite3.Error as exc:
        conn.close()
        raise StoreError(f"Cannot open catalog {db_path}: {exc}") from exc

    logger.debug("Opened catalog %s at schema v%d", db_path, version)
    return conn
