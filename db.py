#!/usr/bin/env python3
"""Database utilities for the local scrobble history."""

import os
import sqlite3
from pathlib import Path
from typing import Iterable, Optional, Union

from models import Scrobble

DB_PATH = Path(os.environ.get("SCROBBLES_DB", Path.home() / ".scrobbles.db"))


def get_connection(db_path: Optional[Union[str, Path]] = None) -> sqlite3.Connection:
    """Get a database connection with row factory."""
    conn = sqlite3.connect(db_path if db_path is not None else DB_PATH)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(conn: sqlite3.Connection):
    """Initialize the scrobble history schema."""
    conn.execute("""
        CREATE TABLE IF NOT EXISTS scrobbles (
            id INTEGER PRIMARY KEY,
            timestamp INTEGER NOT NULL,
            artist TEXT NOT NULL,
            title TEXT NOT NULL,
            album TEXT NOT NULL DEFAULT '',
            UNIQUE (timestamp, artist, title)
        )
    """)
    conn.execute("""
        CREATE INDEX IF NOT EXISTS idx_scrobbles_timestamp ON scrobbles(timestamp)
    """)
    conn.commit()


def log_scrobbles(conn: sqlite3.Connection, scrobbles: Iterable[Scrobble]) -> int:
    """Store scrobbles, skipping ones already present.

    Returns:
        Number of rows inserted
    """
    before = conn.total_changes
    conn.executemany(
        """
        INSERT OR IGNORE INTO scrobbles (timestamp, artist, title, album)
        VALUES (?, ?, ?, ?)
        """,
        ((s.timestamp, s.artist, s.track, s.album) for s in scrobbles),
    )
    conn.commit()
    return conn.total_changes - before


def get_scrobbles(
    conn: sqlite3.Connection,
    start: Optional[int] = None,
    end: Optional[int] = None,
) -> list[Scrobble]:
    """Get scrobbles with start <= timestamp < end, most recent first."""
    query = "SELECT timestamp, artist, title, album FROM scrobbles WHERE 1=1"
    params = []

    if start is not None:
        query += " AND timestamp >= ?"
        params.append(start)
    if end is not None:
        query += " AND timestamp < ?"
        params.append(end)

    query += " ORDER BY timestamp DESC, id DESC"

    rows = conn.execute(query, params).fetchall()
    return [
        Scrobble(artist=row["artist"], track=row["title"], album=row["album"], timestamp=row["timestamp"])
        for row in rows
    ]


def get_latest_timestamp(conn: sqlite3.Connection) -> Optional[int]:
    """Timestamp of the newest stored scrobble, None if there are none."""
    return conn.execute("SELECT MAX(timestamp) FROM scrobbles").fetchone()[0]
