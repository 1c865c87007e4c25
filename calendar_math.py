#!/usr/bin/env python3
"""Conversions between Unix timestamps and UTC calendar dates."""

from datetime import date, datetime, timedelta, timezone

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def to_calendar(timestamp: int) -> tuple[int, int, int]:
    """Return the UTC (year, month, day) a timestamp falls on."""
    day = (EPOCH + timedelta(seconds=timestamp)).date()
    return day.year, day.month, day.day


def from_calendar(year: int, month: int, day: int) -> int:
    """Return the timestamp of midnight UTC on the given date."""
    midnight = datetime(year, month, day, tzinfo=timezone.utc)
    return (midnight - EPOCH) // timedelta(seconds=1)


def format_seconds(seconds: int) -> str:
    """Format seconds as H:MM:SS. Hours are not wrapped at 24."""
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    return f"{hours}:{minutes:02d}:{seconds % 60:02d}"


def format_date(timestamp: int) -> str:
    return date(*to_calendar(timestamp)).isoformat()
