"""Scrape-candidate checks -- which tracks still need lyrics/genre scraping.

The scraping itself is site-specific and lives outside this package; these
helpers only decide what to scrape and whether a scrape result is usable.
"""

from __future__ import annotations

from typing import Any, Iterable

from lyric_namer.models.track import Track
from lyric_namer.utils.constants import (
    DEFAULT_SOURCE_HOST,
    INSTRUMENTAL_MARKER,
    MIN_SCRAPED_LYRICS_LENGTH,
)


def has_genre_and_lyrics(track: Track) -> bool:
    """True when a track already has both a genre and lyrics.

    An ``[Instrumental]`` marker counts as lyrics so instrumentals are not
    scraped again on every run.
    """
    has_genre = bool(track.genre and track.genre.strip())
    return has_genre and track.has_lyrics


def get_source_url(track: Track, host: str = DEFAULT_SOURCE_HOST) -> str | None:
    """The track's source URL, if it points at ``host``."""
    url = track.source_url
    if url and host in url:
        return url
    return None


def tracks_needing_scrape(
    tracks: Iterable[Track], host: str = DEFAULT_SOURCE_HOST,
) -> list[Track]:
    """Tracks that lack genre or lyrics and have a source URL to scrape."""
    return [
        t for t in tracks
        if not has_genre_and_lyrics(t) and get_source_url(t, host) is not None
    ]


def is_instrumental(track: Track) -> bool:
    return track.lyrics.strip() == INSTRUMENTAL_MARKER


def validate_scraped_data(data: dict[str, Any] | None) -> bool:
    """Check that a scrape result carries genres or substantial lyrics.

    Expected shape::

        {"genres": {"found": bool, "genres": [...]},
         "lyrics": {"found": bool, "lyrics": "..."}}
    """
    if not data:
        return False

    genres = data.get("genres") or {}
    has_genres = bool(genres.get("found") and genres.get("genres"))

    lyrics = data.get("lyrics") or {}
    text = lyrics.get("lyrics") or ""
    has_lyrics = bool(lyrics.get("found") and len(text) > MIN_SCRAPED_LYRICS_LENGTH)

    return has_genres or has_lyrics
