#!/usr/bin/env python3
"""
Library Scanner

Scans music files and stores their tags and lengths in the library table,
the default catalog for track length lookups.
"""

import argparse
import logging
import os
import sqlite3
import sys
from pathlib import Path
from typing import Any, Optional

import mutagen

import db

# Supported audio extensions
AUDIO_EXTENSIONS = {'.mp3', '.flac', '.ogg', '.opus', '.m4a', '.mp4', '.aac', '.wav'}

log = logging.getLogger(__name__)


def init_library_table(conn: sqlite3.Connection):
    """Create the library metadata table."""
    conn.execute("""
        CREATE TABLE IF NOT EXISTS library (
            id INTEGER PRIMARY KEY,
            file_path TEXT UNIQUE NOT NULL,
            title TEXT,
            artist TEXT,
            album TEXT,
            duration_ms INTEGER,
            last_scanned DATETIME DEFAULT CURRENT_TIMESTAMP
        )
    """)
    conn.execute("CREATE INDEX IF NOT EXISTS idx_library_title ON library(title COLLATE NOCASE)")
    conn.commit()


def first_tag(tags: Any, key: str) -> Optional[str]:
    """First value of an easy tag, None if missing or empty."""
    if not tags or key not in tags:
        return None
    values = tags[key]
    if isinstance(values, list):
        return str(values[0]) if values else None
    return str(values) if values else None


def extract_metadata(file_path: str) -> Optional[dict[str, Any]]:
    """Read title, artist, album and length from an audio file."""
    try:
        audio = mutagen.File(file_path, easy=True)
    except (mutagen.MutagenError, OSError) as e:
        log.warning(f"Error reading {file_path}: {e}")
        return None
    if audio is None:
        return None

    info = getattr(audio, 'info', None)
    length = getattr(info, 'length', None)
    return {
        'file_path': file_path,
        'title': first_tag(audio.tags, 'title'),
        'artist': first_tag(audio.tags, 'artist'),
        'album': first_tag(audio.tags, 'album'),
        'duration_ms': int(length * 1000) if length else None,
    }


def store_metadata(conn: sqlite3.Connection, metadata: dict[str, Any]) -> bool:
    """Insert or update one file's row. Returns True if the file is new."""
    existing = conn.execute(
        "SELECT id FROM library WHERE file_path = ?",
        (metadata['file_path'],)
    ).fetchone()

    conn.execute("""
        INSERT INTO library (file_path, title, artist, album, duration_ms)
        VALUES (:file_path, :title, :artist, :album, :duration_ms)
        ON CONFLICT(file_path) DO UPDATE SET
            title = excluded.title,
            artist = excluded.artist,
            album = excluded.album,
            duration_ms = excluded.duration_ms,
            last_scanned = CURRENT_TIMESTAMP
    """, metadata)
    return existing is None


def scan_directory(conn: sqlite3.Connection, music_dir: str) -> tuple[int, int, int]:
    """Scan a directory for music files and store metadata.

    Returns:
        (scanned, added, updated) file counts
    """
    music_path = Path(music_dir).expanduser().resolve()

    if not music_path.exists():
        log.error(f"Directory not found: {music_path}")
        return 0, 0, 0

    init_library_table(conn)

    scanned = 0
    added = 0
    updated = 0
    errors = 0

    log.info(f"Scanning: {music_path}")

    for root, dirs, files in os.walk(music_path):
        for filename in sorted(files):
            if Path(filename).suffix.lower() not in AUDIO_EXTENSIONS:
                continue

            file_path = os.path.join(root, filename)
            scanned += 1
            log.debug(f"  [{scanned}] {filename}")

            metadata = extract_metadata(file_path)
            if metadata is None:
                errors += 1
                continue

            if store_metadata(conn, metadata):
                added += 1
            else:
                updated += 1

            # Commit every 100 files
            if scanned % 100 == 0:
                conn.commit()
                log.info(f"  Scanned {scanned} files...")

    conn.commit()
    log.info(f"Scan complete: {scanned} scanned, {added} new, {updated} updated, {errors} errors")

    return scanned, added, updated


def get_library_stats(conn: sqlite3.Connection) -> dict[str, Any]:
    """Get statistics about the library."""
    stats = {}

    stats['total_tracks'] = conn.execute("SELECT COUNT(*) FROM library").fetchone()[0]

    stats['unique_artists'] = conn.execute(
        "SELECT COUNT(DISTINCT artist) FROM library WHERE artist IS NOT NULL"
    ).fetchone()[0]

    stats['unique_albums'] = conn.execute(
        "SELECT COUNT(DISTINCT album) FROM library WHERE album IS NOT NULL"
    ).fetchone()[0]

    # Tracks the length lookup can never find
    stats['missing_length'] = conn.execute(
        "SELECT COUNT(*) FROM library WHERE duration_ms IS NULL OR duration_ms <= 0"
    ).fetchone()[0]

    total_ms = conn.execute(
        "SELECT SUM(duration_ms) FROM library WHERE duration_ms IS NOT NULL"
    ).fetchone()[0] or 0
    stats['total_hours'] = total_ms / 1000 / 3600

    return stats


def display_library_stats(conn: sqlite3.Connection):
    """Display library statistics."""
    init_library_table(conn)
    stats = get_library_stats(conn)

    if stats['total_tracks'] == 0:
        print("No library data. Run: library-scan ~/Music")
        return

    print("\n" + "=" * 50)
    print("  LIBRARY STATISTICS")
    print("=" * 50)

    print(f"\n  Total tracks:    {stats['total_tracks']:,}")
    print(f"  Unique artists:  {stats['unique_artists']:,}")
    print(f"  Unique albums:   {stats['unique_albums']:,}")
    print(f"  Total duration:  {stats['total_hours']:.1f} hours")
    print(f"  Without length:  {stats['missing_length']:,}")
    print()


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Scan music library into the track length catalog",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  library-scan ~/Music          Scan music folder
  library-scan ~/Music -v       Verbose output
  library-scan --stats          Show library statistics
        """
    )

    parser.add_argument('path', nargs='?', help='Path to music directory')
    parser.add_argument('-v', '--verbose', action='store_true', help='Verbose output')
    parser.add_argument('--stats', action='store_true', help='Show library statistics')
    parser.add_argument('--db', help=f'Database file (default: {db.DB_PATH})')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
    )

    if not args.stats and not args.path:
        parser.print_help()
        return 1

    conn = db.get_connection(args.db)
    try:
        if args.stats:
            display_library_stats(conn)
        else:
            scan_directory(conn, args.path)
    except sqlite3.Error as e:
        log.error(f"Database error: {e}")
        return 1
    finally:
        conn.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
