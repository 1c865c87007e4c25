#!/usr/bin/env python3
"""Track length resolution.

Scrobbles carry no duration, so every play is looked up in a catalog. Tags
rarely agree exactly: Last.fm corrects artist names and albums gain
"Deluxe"/"Remaster" suffixes. The lookup therefore starts strict and relaxes
one constraint at a time:

    ARTIST_AND_ALBUM -> ALBUM_ONLY -> ARTIST_ONLY -> DEFAULT_TRACK_LENGTH

Catalogs often hold the same track several times. Duplicate lengths are
collapsed first; if different lengths remain, their mean is used.
"""

import logging
from enum import Enum
from typing import Iterable, Optional

from catalog import Catalog
from models import Scrobble, TimedScrobble

log = logging.getLogger(__name__)

# Used when no catalog row matches at any level
DEFAULT_TRACK_LENGTH = 4 * 60


class MatchLevel(Enum):
    """Which constraints a catalog query applies besides the title."""

    ARTIST_AND_ALBUM = (True, True)
    ALBUM_ONLY = (False, True)
    ARTIST_ONLY = (True, False)

    @property
    def match_artist(self) -> bool:
        return self.value[0]

    @property
    def match_album(self) -> bool:
        return self.value[1]


RELAXATION_ORDER = (
    MatchLevel.ARTIST_AND_ALBUM,
    MatchLevel.ALBUM_ONLY,
    MatchLevel.ARTIST_ONLY,
)


def lookup_length(scrobble: Scrobble, catalog: Catalog, level: MatchLevel) -> Optional[int]:
    """Query the catalog once at the given level.

    Returns None when nothing matched, otherwise the mean of the distinct
    lengths found (floor division).
    """
    lengths = catalog.find_lengths(
        scrobble.track,
        artist=scrobble.artist if level.match_artist else None,
        album=scrobble.album if level.match_album else None,
    )
    distinct = sorted(set(lengths))
    if not distinct:
        return None
    if len(distinct) > 1:
        log.debug(f"Inconsistent lengths {distinct} for {scrobble.artist} - {scrobble.track}")
    return sum(distinct) // len(distinct)


def find_track_length(scrobble: Scrobble, catalog: Catalog) -> Optional[int]:
    """Walk the relaxation levels and return the first length found."""
    for level in RELAXATION_ORDER:
        length = lookup_length(scrobble, catalog, level)
        if length is None:
            continue
        if level is not MatchLevel.ARTIST_AND_ALBUM:
            log.debug(f"Found {length}s for {scrobble} at {level.name}")
        return length

    log.debug(f"Not found: {scrobble}")
    return None


def get_track_length(scrobble: Scrobble, catalog: Catalog) -> int:
    """Length of a scrobbled track in seconds, never failing."""
    length = find_track_length(scrobble, catalog)
    if length is None:
        return DEFAULT_TRACK_LENGTH
    return length


def attach_track_lengths(history: Iterable[Scrobble], catalog: Catalog) -> list[TimedScrobble]:
    """Pair every scrobble with its length, keeping the history order."""
    return [(scrobble, get_track_length(scrobble, catalog)) for scrobble in history]
