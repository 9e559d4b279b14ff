"""Track data model -- represents a single audio file and its metadata."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from lyric_namer.utils.constants import GENRE_SEPARATOR


@dataclass
class Track:
    """Represents a single audio file with the metadata the rules engine uses.

    Attributes:
        file_path: Path to the audio file on disk. Unique key of the track.
        title: Track title.
        artist: Primary artist name.
        album: Album name.
        genre: Semicolon-delimited genre string (e.g. ``"rap; dark; bass"``).
        year: Release year.
        lyrics: Plain (unsynchronised) lyrics text, possibly empty.
        track_number: Position within the album, parsed from the stored
            string (``"5"`` or ``"5/12"``). None when absent or not positive.
        album_art: Raw bytes of the embedded cover image.
        album_art_mime: MIME type of ``album_art``.
        source_url: URL of the page the audio came from (filled by scrapers).
        error_message: Description of a read error hit during scanning.
    """

    # --- Required ---
    file_path: Path

    # --- Metadata ---
    title: str | None = None
    artist: str | None = None
    album: str | None = None
    genre: str | None = None
    year: int | None = None
    lyrics: str = ""
    track_number: int | None = None

    # --- Cover Art ---
    album_art: bytes | None = field(default=None, repr=False)
    album_art_mime: str | None = None

    # --- Provenance ---
    source_url: str | None = None

    # --- Processing ---
    error_message: str | None = None

    def __post_init__(self) -> None:
        """Ensure file_path is a Path object."""
        if isinstance(self.file_path, str):
            self.file_path = Path(self.file_path)
        if self.lyrics is None:
            self.lyrics = ""

    @property
    def filename(self) -> str:
        """File name including extension."""
        return self.file_path.name

    @property
    def key(self) -> str:
        """Deduplication key used by the rule matcher."""
        return str(self.file_path)

    @property
    def genre_list(self) -> list[str]:
        """Genres split on the delimiter, trimmed, blanks dropped."""
        if not self.genre:
            return []
        return [g.strip() for g in self.genre.split(GENRE_SEPARATOR) if g.strip()]

    @property
    def has_lyrics(self) -> bool:
        return bool(self.lyrics and self.lyrics.strip())

    def as_dict(self) -> dict:
        """Serialize the track to a dictionary (excludes binary album art).

        Returns:
            Dictionary of track attributes.
        """
        return {
            "file_path": str(self.file_path),
            "filename": self.filename,
            "title": self.title,
            "artist": self.artist,
            "album": self.album,
            "genre": self.genre,
            "year": self.year,
            "lyrics": self.lyrics,
            "track_number": self.track_number,
            "has_album_art": self.album_art is not None,
            "source_url": self.source_url,
            "error_message": self.error_message,
        }
