#!/usr/bin/env python3
"""
Last.fm History

Fetches a user's scrobbles page by page through user.getRecentTracks.
"""

import logging
import time
from typing import Any, Iterator, Optional

import requests

from models import Scrobble

LASTFM_API_URL = "https://ws.audioscrobbler.com/2.0/"
PAGE_LIMIT = 200  # maximum page size the API allows
REQUEST_TIMEOUT = 20

log = logging.getLogger(__name__)


class LastFmError(RuntimeError):
    """Error payload returned by the Last.fm API."""

    def __init__(self, code: int, message: str):
        super().__init__(f"Last.fm error {code}: {message}")
        self.code = code


def parse_track(item: dict[str, Any]) -> Optional[Scrobble]:
    """Convert one recenttracks entry; None for the "now playing" entry."""
    date = item.get("date")
    if not date:
        return None
    return Scrobble(
        artist=item["artist"]["#text"],
        track=item["name"],
        album=(item.get("album") or {}).get("#text", ""),
        timestamp=int(date["uts"]),
    )


class LastFmHistory:
    """Scrobble history of one Last.fm user."""

    def __init__(self, api_key: str, user: str, session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.user = user
        self.session = session if session is not None else requests.Session()

    def get_page(self, page: int, start: Optional[int] = None, end: Optional[int] = None) -> dict[str, Any]:
        params: dict[str, Any] = {
            "method": "user.getRecentTracks",
            "user": self.user,
            "api_key": self.api_key,
            "format": "json",
            "limit": PAGE_LIMIT,
            "page": page,
        }
        if start is not None:
            params["from"] = start
        if end is not None:
            params["to"] = end

        resp = self.session.get(LASTFM_API_URL, params=params, timeout=REQUEST_TIMEOUT)
        resp.raise_for_status()
        data = resp.json()
        if "error" in data:
            raise LastFmError(int(data["error"]), data.get("message", ""))
        return data["recenttracks"]

    def iter_pages(self, start: Optional[int] = None, end: Optional[int] = None) -> Iterator[list[Scrobble]]:
        """Yield the scrobbles of each page, newest page first."""
        # Plays scrobbled while paging would shift later pages
        if end is None:
            end = int(time.time())
        page = 1
        total_pages = 1
        while page <= total_pages:
            recent = self.get_page(page, start, end)
            total_pages = int(recent.get("@attr", {}).get("totalPages", 0))
            log.debug(f"Fetched page {page}/{total_pages} for {self.user}")

            tracks = recent.get("track", [])
            # A single track comes back as an object instead of a list
            if isinstance(tracks, dict):
                tracks = [tracks]
            yield [s for s in map(parse_track, tracks) if s is not None]
            page += 1

    def get_scrobbles(self, start: Optional[int] = None, end: Optional[int] = None) -> list[Scrobble]:
        """All scrobbles between start and end, most recent first."""
        scrobbles = [s for page in self.iter_pages(start, end) for s in page]
        log.info(f"Fetched {len(scrobbles)} scrobbles for {self.user}")
        return sorted(scrobbles, key=lambda s: s.timestamp, reverse=True)
