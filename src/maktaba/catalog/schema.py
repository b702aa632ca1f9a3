"""SQLite schema and pragmas for the category stores."""

from __future__ import annotations

import sqlite3


PRAGMA_BUSY_TIMEOUT_MS = 5000


def apply_runtime_pragmas(connection: sqlite3.Connection) -> None:
    """Apply runtime pragmas for concurrent readers."""

    connection.execute("PRAGMA journal_mode=WAL;")
    connection.execute(f"PRAGMA busy_timeout={PRAGMA_BUSY_TIMEOUT_MS};")
    connection.execute("PRAGMA synchronous=NORMAL;")


_GENERIC_COLUMNS = """
    id INTEGER PRIMARY KEY,
    title TEXT,
    description TEXT,
    localized_name TEXT,
    prepared_by TEXT,
    translators TEXT,
    add_date TEXT,
    pub_date TEXT,
    attachments TEXT,
    api_url TEXT,
    extracted_at TEXT
"""


def ensure_schema(connection: sqlite3.Connection) -> None:
    """Create the five category tables if missing."""

    connection.executescript(
        f"""
        CREATE TABLE IF NOT EXISTS books (
            id INTEGER PRIMARY KEY,
            name TEXT,
            author TEXT,
            open_file TEXT,
            pages INTEGER,
            files TEXT,
            parts TEXT,
            researcher_supervisor TEXT,
            publisher TEXT,
            publication_country TEXT,
            city TEXT,
            main_category TEXT,
            sub_category TEXT,
            topics TEXT,
            download_link TEXT,
            alternative_link TEXT,
            section_books_count INTEGER,
            parts_count INTEGER,
            size_bytes INTEGER,
            format TEXT,
            created_at TEXT
        );

        CREATE TABLE IF NOT EXISTS fatwa (
            id INTEGER PRIMARY KEY,
            title TEXT,
            question TEXT,
            answer TEXT,
            audio TEXT,
            created_at TEXT
        );

        CREATE TABLE IF NOT EXISTS articles ({_GENERIC_COLUMNS});
        CREATE TABLE IF NOT EXISTS audios ({_GENERIC_COLUMNS});
        CREATE TABLE IF NOT EXISTS videos ({_GENERIC_COLUMNS});

        CREATE INDEX IF NOT EXISTS idx_articles_extracted_at ON articles(extracted_at);
        CREATE INDEX IF NOT EXISTS idx_audios_extracted_at ON audios(extracted_at);
        CREATE INDEX IF NOT EXISTS idx_videos_extracted_at ON videos(extracted_at);
        """
    )
