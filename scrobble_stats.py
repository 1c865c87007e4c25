#!/usr/bin/env python3
"""
Scrobble Stats CLI

Display listening time per month, season or fixed period, and the artists
that dominated each period.
"""

import argparse
import logging
import os
import sqlite3
import sys
import time
from typing import Optional

import requests
from dotenv import load_dotenv

import db
from calendar_math import format_date, format_seconds
from catalog import SQLiteCatalog, open_catalog
from hyped import get_hyped_artists_per, get_hyped_artists_per_from
from lastfm import LastFmError, LastFmHistory
from library_scanner import init_library_table
from models import IntervalResult, Scrobble
from track_length import attach_track_lengths
from windows import POLICIES, get_lengths_per, get_month_lengths, get_season_lengths

DAY = 24 * 60 * 60
HYPED_DEFAULT_DAYS = 30

log = logging.getLogger(__name__)


def print_section(title: str):
    """Print a section header."""
    print(f"\n{'=' * 60}")
    print(f"  {title}")
    print('=' * 60)


def text_bar(value: int, max_value: int, width: int = 25) -> str:
    """Generate a text-based bar."""
    if max_value <= 0:
        return ""
    filled = int((value / max_value) * width)
    return "█" * filled + "░" * (width - filled)


def display_lengths(results: list[IntervalResult], title: str):
    print_section(title)
    if not results:
        print("  No scrobbles in range.")
        return

    longest = max(seconds for _, seconds in results)
    for (start, end), seconds in results:
        bar = text_bar(seconds, longest)
        print(f"  {format_date(start)} - {format_date(end)}  {format_seconds(seconds):>10}  {bar}")

    total = sum(seconds for _, seconds in results)
    print(f"\n  Total: {format_seconds(total)}")


def display_hyped(results: list[IntervalResult], title: str):
    print_section(title)
    if not results:
        print("  No scrobbles in range.")
        return

    for (start, end), hype in results:
        if hype is None:
            text = "-"
        else:
            artist, share = hype
            text = f"{artist} ({share:.0%})"
        print(f"  {format_date(start)} - {format_date(end)}  {text}")


def sync_history(conn: sqlite3.Connection, lastfm: LastFmHistory) -> int:
    """Fetch scrobbles newer than the stored ones into the local database."""
    latest = db.get_latest_timestamp(conn)
    start = latest + 1 if latest is not None else None
    inserted = db.log_scrobbles(conn, lastfm.get_scrobbles(start=start))
    log.info(f"Stored {inserted} new scrobbles")
    return inserted


def load_history(args: argparse.Namespace, conn: sqlite3.Connection) -> list[Scrobble]:
    """Scrobbles to analyze, most recent first."""
    if args.user:
        api_key = os.environ.get("LASTFM_API_KEY")
        if not api_key:
            raise LastFmError(10, "LASTFM_API_KEY is not set")
        lastfm = LastFmHistory(api_key, args.user)
        if not args.sync:
            return lastfm.get_scrobbles()
        db.init_db(conn)
        sync_history(conn, lastfm)
    else:
        db.init_db(conn)
    return db.get_scrobbles(conn)


def run_report(args: argparse.Namespace, conn: sqlite3.Connection, now: int):
    history = load_history(args, conn)
    log.info(f"Analyzing {len(history)} scrobbles")

    if args.catalog:
        catalog = open_catalog(args.catalog, clementine=args.clementine)
    else:
        init_library_table(conn)
        catalog = SQLiteCatalog(conn)
    timed = attach_track_lengths(history, catalog)

    if args.hyped:
        significant_length = int(args.min_hours * 3600)
        if args.months or args.seasons:
            name = "month" if args.months else "season"
            next_boundary, first_boundary = POLICIES[name]
            results = get_hyped_artists_per_from(
                next_boundary, first_boundary, now, significant_length, args.min_share, timed
            )
            display_hyped(results, f"HYPED ARTISTS PER {name.upper()}")
        else:
            days = args.every or HYPED_DEFAULT_DAYS
            results = get_hyped_artists_per(now, days * DAY, significant_length, args.min_share, timed)
            display_hyped(results, f"HYPED ARTISTS PER {days} DAYS")
    elif args.seasons:
        display_lengths(get_season_lengths(now, timed), "LISTENING TIME PER SEASON")
    elif args.every:
        display_lengths(get_lengths_per(args.every * DAY, now, timed), f"LISTENING TIME PER {args.every} DAYS")
    else:
        display_lengths(get_month_lengths(now, timed), "LISTENING TIME PER MONTH")


def main(argv: Optional[list[str]] = None) -> int:
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="Display listening time and hyped artists from your scrobbles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  scrobble-stats                        Listening time per month
  scrobble-stats --seasons              Listening time per season
  scrobble-stats --every 7              Listening time per week
  scrobble-stats --hyped --months       Hyped artist of every month
  scrobble-stats --user rj --sync       Fetch new Last.fm scrobbles first
  scrobble-stats --catalog ~/.config/Clementine/clementine.db --clementine
        """
    )

    window = parser.add_mutually_exclusive_group()
    window.add_argument('--months', action='store_true', help='Per calendar month (default)')
    window.add_argument('--seasons', action='store_true', help='Per astronomical season')
    window.add_argument('--every', type=int, metavar='DAYS', help='Per fixed number of days')

    parser.add_argument('--hyped', action='store_true', help='Show the hyped artist per period')
    parser.add_argument('--min-hours', type=float, default=2.0,
                        help='Listening time an artist needs to be hyped (default: 2)')
    parser.add_argument('--min-share', type=float, default=0.5,
                        help='Share of the period an artist needs to be hyped (default: 0.5)')

    parser.add_argument('--user', default=os.environ.get("LASTFM_USER"),
                        help='Last.fm user to fetch (needs LASTFM_API_KEY)')
    parser.add_argument('--sync', action='store_true',
                        help='Store new Last.fm scrobbles locally and report from the database')
    parser.add_argument('--db', help=f'Scrobble database (default: {db.DB_PATH})')
    parser.add_argument('--catalog', help='Track length database (default: library table of --db)')
    parser.add_argument('--clementine', action='store_true', help='--catalog is a Clementine database')
    parser.add_argument('--now', type=int, help='End of analysis as Unix timestamp (default: now)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Verbose output')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    if args.every is not None and args.every <= 0:
        parser.error("--every must be a positive number of days")

    now = args.now if args.now is not None else int(time.time())

    conn = db.get_connection(args.db)
    try:
        run_report(args, conn, now)
    except (requests.RequestException, LastFmError, sqlite3.Error) as e:
        log.error(f"Error: {e}")
        return 1
    finally:
        conn.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
