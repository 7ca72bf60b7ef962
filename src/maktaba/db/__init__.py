# ABOUTME: Public API for the Maktaba storage layer.
# ABOUTME: Exports connection management, the document store, and record types.

from maktaba.db.connection import DEFAULT_DB_PATH, open_library
from maktaba.db.mapping import Book, Page, Volume
from maktaba.db.store import DocumentStore, StorageError

__all__ = [
    "DEFAULT_DB_PATH",
    "Book",
    "DocumentStore",
    "Page",
    "StorageError",
    "Volume",
    "open_library",
]
