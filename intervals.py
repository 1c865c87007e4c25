#!/usr/bin/env python3
"""Partitioning of a scrobble history into consecutive time intervals.

The partitioner knows nothing about calendars. Callers pass a function that
yields the first interval start for a history, a function that steps from one
start to the next, and a reducer that summarizes the scrobbles of a single
interval.

Histories are ordered most recent first, as Last.fm returns them. The last
element is therefore the earliest scrobble.
"""

from bisect import bisect_left
from typing import Callable, Iterator, Sequence

from models import IntervalResult, T, TimedScrobble


class HistoryOrderError(ValueError):
    """Raised when a history is not ordered most recent first."""


def check_most_recent_first(timed_scrobbles: Sequence[TimedScrobble]):
    """Raise HistoryOrderError if any scrobble is newer than its predecessor."""
    for index in range(1, len(timed_scrobbles)):
        previous = timed_scrobbles[index - 1][0]
        current = timed_scrobbles[index][0]
        if current.timestamp > previous.timestamp:
            raise HistoryOrderError(
                f"History must be ordered most recent first: scrobble {index} "
                f"({current.timestamp}) is newer than scrobble {index - 1} ({previous.timestamp})"
            )


def earliest_timestamp(timed_scrobbles: Sequence[TimedScrobble]) -> int:
    return timed_scrobbles[-1][0].timestamp


def interval_starts(first: int, next_boundary: Callable[[int], int], now: int) -> Iterator[int]:
    """Yield first, next_boundary(first), ... while the value is before now."""
    boundary = first
    while boundary < now:
        yield boundary
        following = next_boundary(boundary)
        if following <= boundary:
            raise ValueError(f"Interval boundary did not advance past {boundary}")
        boundary = following


def apply_per_interval(
    reduce: Callable[[list[TimedScrobble]], T],
    next_boundary: Callable[[int], int],
    first_boundary: Callable[[Sequence[TimedScrobble]], int],
    now: int,
    timed_scrobbles: Sequence[TimedScrobble],
) -> list[IntervalResult]:
    """Split the history into intervals and reduce each one.

    Args:
        reduce: Summarizes the scrobbles inside one interval.
        next_boundary: Maps an interval start to the next, strictly later, start.
        first_boundary: Computes the first interval start from the history.
        now: End of the analysis. The last interval always ends here.
        timed_scrobbles: Scrobbles with lengths, most recent first.

    Returns:
        List of ((start, end), result) tuples in ascending order. Consecutive
        intervals share their boundary. Empty if the history is empty or the
        first start is not before now.
    """
    if not timed_scrobbles:
        return []
    check_most_recent_first(timed_scrobbles)

    starts = list(interval_starts(first_boundary(timed_scrobbles), next_boundary, now))
    intervals = list(zip(starts, starts[1:] + [now]))

    ascending = list(reversed(timed_scrobbles))
    timestamps = [scrobble.timestamp for scrobble, _ in ascending]

    results = []
    for start, end in intervals:
        low = bisect_left(timestamps, start)
        high = bisect_left(timestamps, end)
        results.append(((start, end), reduce(ascending[low:high])))
    return results
