#!/usr/bin/env python3
"""Detection of artists that dominate a period of listening."""

from collections import defaultdict
from typing import Callable, Optional, Sequence

from intervals import apply_per_interval, earliest_timestamp
from models import Hype, IntervalResult, TimedScrobble
from windows import fixed_step


def get_hyped_artist(
    timed_scrobbles: Sequence[TimedScrobble],
    significant_length: int,
    significant_ratio: float,
) -> Optional[Hype]:
    """Find the artist dominating a set of scrobbles.

    Args:
        timed_scrobbles: Scrobbles with lengths, all from one interval.
        significant_length: Seconds an artist has to exceed to be considered.
        significant_ratio: Share of the total listening time the top artist
            has to exceed.

    Returns:
        (artist, share) for the artist with the most listening time, or None
        if no artist passes both thresholds. Artists tied for the most time
        are decided by name, alphabetically first wins.
    """
    totals: dict[str, int] = defaultdict(int)
    for scrobble, length in timed_scrobbles:
        totals[scrobble.artist] += length

    overall = sum(totals.values())
    if overall <= 0:
        return None

    candidates = [(artist, total) for artist, total in totals.items() if total > significant_length]
    if not candidates:
        return None

    artist, total = min(candidates, key=lambda c: (-c[1], c[0]))
    share = total / overall
    if share > significant_ratio:
        return artist, share
    return None


def hyped_artist_reducer(
    significant_length: int,
    significant_ratio: float,
) -> Callable[[Sequence[TimedScrobble]], Optional[Hype]]:
    """Bind the thresholds so get_hyped_artist can be applied per interval."""
    def reduce(timed_scrobbles: Sequence[TimedScrobble]) -> Optional[Hype]:
        return get_hyped_artist(timed_scrobbles, significant_length, significant_ratio)
    return reduce


def get_hyped_artists_per_from(
    next_boundary: Callable[[int], int],
    first_boundary: Callable[[Sequence[TimedScrobble]], int],
    now: int,
    significant_length: int,
    significant_ratio: float,
    timed_scrobbles: Sequence[TimedScrobble],
) -> list[IntervalResult]:
    """Hyped artist, if any, for every interval of the given policy."""
    return apply_per_interval(
        hyped_artist_reducer(significant_length, significant_ratio),
        next_boundary,
        first_boundary,
        now,
        timed_scrobbles,
    )


def get_hyped_artists_per(
    now: int,
    time_diff: int,
    significant_length: int,
    significant_ratio: float,
    timed_scrobbles: Sequence[TimedScrobble],
) -> list[IntervalResult]:
    """Hyped artist per interval of time_diff seconds from the earliest scrobble."""
    return get_hyped_artists_per_from(
        fixed_step(time_diff),
        earliest_timestamp,
        now,
        significant_length,
        significant_ratio,
        timed_scrobbles,
    )
