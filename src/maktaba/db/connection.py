# ABOUTME: SQLite connection management for the Maktaba document store.
# ABOUTME: Opens or creates the database, applies the schema, and checks its version.

import logging
import sqlite3
from pathlib import Path

from maktaba.db.schema import SCHEMA_V1, SCHEMA_VERSION
from maktaba.db.store import StorageError

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path.home() / ".maktaba" / "library.db"


def _schema_exists(conn: sqlite3.Connection) -> bool:
    """Check if the schema has already been applied."""
    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name='schema_version'"
    )
    return cursor.fetchone() is not None


def _apply_schema(conn: sqlite3.Connection) -> None:
    """Execute the DDL to create all tables and indexes."""
    conn.executescript(SCHEMA_V1)


def get_schema_version(conn: sqlite3.Connection) -> int:
    """Read the current schema version from the database."""
    cursor = conn.execute("SELECT version FROM schema_version ORDER BY version DESC LIMIT 1")
    row = cursor.fetchone()
    return row[0] if row else 0


def open_library(path: Path | None = None) -> sqlite3.Connection:
    """Open or create the Maktaba library database.

    Creates the database file and parent directories if they don't exist.
    Applies the schema on first creation. Sets WAL journal mode and
    sqlite3.Row factory for dict-like column access.

    Args:
        path: Path to the database file. Defaults to ~/.maktaba/library.db.

    Returns:
        A configured sqlite3.Connection.

    Raises:
        StorageError: If the file cannot be opened, is not a database, or
            was written by a newer schema.
    """
    db_path = path or DEFAULT_DB_PATH
    try:
        db_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise StorageError(f"Cannot create {db_path.parent}: {exc}") from exc

    try:
        conn = sqlite3.connect(str(db_path))
    except sqlite3.Error as exc:
        raise StorageError(f"Cannot open {db_path}: {exc}") from exc

    try:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")

        if not _schema_exists(conn):
            logger.info("Creating library database at %s", db_path)
            _apply_schema(conn)

        version = get_schema_version(conn)
    except sqlite3.Error as exc:
        conn.close()
        raise StorageError(f"Cannot open {db_path}: {exc}") from exc

    if version > SCHEMA_VERSION:
        conn.close()
        raise StorageError(
            f"{db_path} uses schema version {version}; this build supports {SCHEMA_VERSION}"
        )

    return conn
