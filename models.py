#!/usr/bin/env python3
"""Data types shared by the scrobble analysis modules."""

from dataclasses import dataclass
from typing import TypeVar


@dataclass(frozen=True)
class Scrobble:
    """A single recorded play: who, what, from which album, and when (UTC)."""

    artist: str
    track: str
    album: str
    timestamp: int


# A scrobble paired with its resolved length in seconds
TimedScrobble = tuple[Scrobble, int]

# Half-open [start, end) range of Unix timestamps
Interval = tuple[int, int]

# (artist, share of the window's listening time)
Hype = tuple[str, float]

T = TypeVar("T")

# An interval and whatever was computed for it
IntervalResult = tuple[Interval, T]
