# ABOUTME: SQL DDL statements for the Maktaba document store.
# ABOUTME: Defines the books, volumes, and pages tables keyed by their composite identifiers.

SCHEMA_VERSION = 1

SCHEMA_V1 = """
-- One row per book; a translation is its own book linked by source_id
CREATE TABLE books (
    id           TEXT PRIMARY KEY,
    title        TEXT NOT NULL,
    author       TEXT,
    volume_count INTEGER NOT NULL DEFAULT 0,
    source_id    TEXT,
    language     TEXT,
    imported_at  TEXT
);

CREATE INDEX idx_books_source_id ON books(source_id) WHERE source_id IS NOT NULL;

-- Keyed by (book_id, volume); the primary key serves book_id prefix lookups
CREATE TABLE volumes (
    book_id     TEXT NOT NULL,
    volume      INTEGER NOT NULL CHECK (volume >= 1),
    total_pages INTEGER NOT NULL CHECK (total_pages >= 0),
    imported_at TEXT,
    PRIMARY KEY (book_id, volume)
) WITHOUT ROWID;

-- Keyed by (book_id, volume, page); text is a JSON list of paragraphs
CREATE TABLE pages (
    book_id TEXT NOT NULL,
    volume  INTEGER NOT NULL,
    page    INTEGER NOT NULL CHECK (page >= 1),
    text    TEXT NOT NULL,
    PRIMARY KEY (book_id, volume, page)
) WITHOUT ROWID;

-- Schema versioning for future migrations
CREATE TABLE schema_version (
    version    INTEGER NOT NULL,
    applied_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now'))
);

INSERT INTO schema_version (version) VALUES (1);
"""
