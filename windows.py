#!/usr/bin/env python3
"""Listening time per fixed step, calendar month and astronomical season."""

from typing import Callable, Sequence

from calendar_math import from_calendar, to_calendar
from intervals import apply_per_interval, earliest_timestamp
from models import IntervalResult, TimedScrobble

# Approximate (month, day) starts of spring, summer, autumn and winter
SEASON_DATES = ((3, 20), (6, 21), (9, 22), (12, 21))


def total_length(timed_scrobbles: Sequence[TimedScrobble]) -> int:
    return sum(length for _, length in timed_scrobbles)


def get_lengths_per_from(
    next_boundary: Callable[[int], int],
    first_boundary: Callable[[Sequence[TimedScrobble]], int],
    now: int,
    timed_scrobbles: Sequence[TimedScrobble],
) -> list[IntervalResult]:
    """Total listening time for every interval of the given policy."""
    return apply_per_interval(total_length, next_boundary, first_boundary, now, timed_scrobbles)


def fixed_step(time_diff: int) -> Callable[[int], int]:
    if time_diff <= 0:
        raise ValueError(f"Interval length must be positive, got {time_diff}")
    return lambda timestamp: timestamp + time_diff


def get_lengths_per(
    time_diff: int,
    now: int,
    timed_scrobbles: Sequence[TimedScrobble],
) -> list[IntervalResult]:
    """Total listening time per interval of time_diff seconds.

    Intervals start at the earliest scrobble.
    """
    return get_lengths_per_from(fixed_step(time_diff), earliest_timestamp, now, timed_scrobbles)


def next_month(timestamp: int) -> int:
    """Midnight UTC on the first day of the following month."""
    year, month, _ = to_calendar(timestamp)
    if month == 12:
        return from_calendar(year + 1, 1, 1)
    return from_calendar(year, month + 1, 1)


def get_month_lengths(now: int, timed_scrobbles: Sequence[TimedScrobble]) -> list[IntervalResult]:
    """Total listening time per calendar month.

    The first interval runs from the earliest scrobble to the end of its month.
    """
    return get_lengths_per_from(next_month, earliest_timestamp, now, timed_scrobbles)


def next_season(timestamp: int) -> int:
    """Start of the first season beginning strictly after the timestamp's date."""
    year, month, day = to_calendar(timestamp)
    later = [date for date in SEASON_DATES if date > (month, day)]
    if later:
        return from_calendar(year, *later[0])
    return from_calendar(year + 1, *SEASON_DATES[0])


def season_start(timestamp: int) -> int:
    """Start of the season the timestamp's date lies in."""
    year, month, day = to_calendar(timestamp)
    started = [date for date in SEASON_DATES if date <= (month, day)]
    if started:
        return from_calendar(year, *started[-1])
    # Before the spring date: still last year's winter
    return from_calendar(year - 1, *SEASON_DATES[-1])


def first_in_season(timed_scrobbles: Sequence[TimedScrobble]) -> int:
    return season_start(earliest_timestamp(timed_scrobbles))


def get_season_lengths(now: int, timed_scrobbles: Sequence[TimedScrobble]) -> list[IntervalResult]:
    """Total listening time per season, starting at the earliest scrobble's season."""
    return get_lengths_per_from(next_season, first_in_season, now, timed_scrobbles)


# Calendar policies by name: (next_boundary, first_boundary)
POLICIES = {
    "month": (next_month, earliest_timestamp),
    "season": (next_season, first_in_season),
}
