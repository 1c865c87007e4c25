#!/usr/bin/env python3
"""
Track Catalogs

Read-only lookups of track lengths in a local music database. The default
catalog is the `library` table filled by library_scanner; a Clementine (or
Strawberry) player database can be used instead.
"""

import logging
import sqlite3
from pathlib import Path
from typing import Optional, Protocol, Union

log = logging.getLogger(__name__)

# Albums shorter than this never prefix-match, e.g. "Live" vs "Live at Wembley"
MIN_ALBUM_PREFIX = 5


class Catalog(Protocol):
    """Anything that can answer approximate track length queries."""

    def find_lengths(
        self,
        title: str,
        artist: Optional[str] = None,
        album: Optional[str] = None,
    ) -> list[int]:
        """Return the length in seconds of every row matching the query.

        Title always has to match. Artist and album only constrain the
        result when given. Duplicate rows are returned as they are.
        """
        ...


class SQLiteCatalog:
    """Catalog backed by a table with title/artist/album/length columns."""

    table = "library"
    length_column = "duration_ms"
    length_unit = 1000  # column units per second

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def build_query(self, match_artist: bool, match_album: bool) -> str:
        """Build the SELECT for one combination of constraints."""
        conditions = [f"{self.length_column} > 0"]
        if match_artist:
            conditions.append("artist = :artist COLLATE NOCASE")
        if match_album:
            conditions.append(f"""(
                album = :album COLLATE NOCASE
                OR ((instr(lower(:album), lower(album)) = 1
                     OR instr(lower(album), lower(:album)) = 1)
                    AND length(album) > {MIN_ALBUM_PREFIX}
                    AND length(:album) > {MIN_ALBUM_PREFIX})
            )""")
        conditions.append("title = :title COLLATE NOCASE")
        return (
            f"SELECT {self.length_column} / {self.length_unit} AS length "
            f"FROM {self.table} WHERE " + " AND ".join(conditions)
        )

    def find_lengths(
        self,
        title: str,
        artist: Optional[str] = None,
        album: Optional[str] = None,
    ) -> list[int]:
        params = {"title": title}
        if artist is not None:
            params["artist"] = artist
        if album is not None:
            params["album"] = album

        query = self.build_query(artist is not None, album is not None)
        rows = self.conn.execute(query, params).fetchall()
        return [int(row[0]) for row in rows]


class ClementineCatalog(SQLiteCatalog):
    """Catalog reading the `songs` table of a Clementine database."""

    table = "songs"
    length_column = "length"
    length_unit = 1000000000  # nanoseconds


def open_catalog(path: Union[str, Path], clementine: bool = False) -> SQLiteCatalog:
    """Open a catalog database file read-only."""
    db_path = Path(path).expanduser().resolve()
    log.debug(f"Opening catalog {db_path}")
    conn = sqlite3.connect(f"{db_path.as_uri()}?mode=ro", uri=True)
    if clementine:
        return ClementineCatalog(conn)
    return SQLiteCatalog(conn)
