from models import Scrobble


def scrobble(artist="Artist", track="Track", album="Album", timestamp=0) -> Scrobble:
    return Scrobble(artist=artist, track=track, album=album, timestamp=timestamp)


def timed(timestamps_and_lengths, artist="Artist"):
    """Timed scrobbles from (timestamp, length) pairs, most recent first."""
    pairs = sorted(timestamps_and_lengths, reverse=True)
    return [(scrobble(artist=artist, timestamp=ts), length) for ts, length in pairs]
