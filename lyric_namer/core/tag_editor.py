"""Tag editor -- reads and writes audio metadata tags via mutagen."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable

import mutagen
from mutagen.easyid3 import EasyID3
from mutagen.flac import FLAC
from mutagen.id3 import ID3, USLT, WOAS, ID3NoHeaderError
from mutagen.mp4 import MP4, MP4Cover
from mutagen.oggopus import OggOpus
from mutagen.oggvorbis import OggVorbis

from lyric_namer.utils.constants import ID3_ENCODING_UTF8, ID3_LYRICS_LANGUAGE
from lyric_namer.utils.errors import TagReadError
from lyric_namer.utils.logger import get_logger

if TYPE_CHECKING:
    from pathlib import Path

    from lyric_namer.models.track import Track

logger = get_logger("core.tag_editor")

# Track attributes write_tags knows how to persist.
WRITABLE_FIELDS = (
    "title",
    "artist",
    "album",
    "genre",
    "year",
    "track_number",
    "lyrics",
    "source_url",
)

# Fields stored through the mutagen "easy" key names.
_EASY_KEYS = {
    "title": "title",
    "artist": "artist",
    "album": "album",
    "genre": "genre",
    "year": "date",
    "track_number": "tracknumber",
}

# Vorbis comment keys for the fields EasyID3 does not cover.
_VORBIS_LYRICS_KEYS = ("unsyncedlyrics", "lyrics")
_VORBIS_SOURCE_KEY = "website"

_MP4_KEYS = {
    "title": "\xa9nam",
    "artist": "\xa9ART",
    "album": "\xa9alb",
    "genre": "\xa9gen",
    "year": "\xa9day",
    "lyrics": "\xa9lyr",
}
_MP4_SOURCE_KEY = "----:com.lyricnamer:SOURCEURL"


class TagEditor:
    """Reads and writes metadata tags on audio files.

    Supports MP3 (ID3), FLAC, OGG Vorbis, OGG Opus and M4A.  A file whose
    tag block is missing reads as "all fields unknown"; only a file that
    cannot be opened as audio at all raises :class:`TagReadError`.
    """

    def read_tags(self, track: Track) -> Track:
        """Read metadata tags from the audio file and populate the Track.

        Args:
            track: Track object with file_path set.

        Returns:
            The same Track object with metadata fields populated.

        Raises:
            TagReadError: If the file is missing or not readable as audio.
        """
        path = track.file_path
        if not path.exists():
            raise TagReadError(path, "file not found")

        try:
            audio = mutagen.File(path, easy=True)
        except (mutagen.MutagenError, OSError, ValueError) as e:
            raise TagReadError(path, str(e)) from e
        if audio is None:
            raise TagReadError(path, "unsupported or unrecognized audio format")

        track.title = self._get_tag(audio, "title")
        track.artist = self._get_tag(audio, "artist")
        track.album = self._get_tag(audio, "album")
        track.genre = self._get_tag(audio, "genre")
        track.year = self._parse_year(self._get_tag(audio, "date"))
        track.track_number = self._parse_track_number(self._get_tag(audio, "tracknumber"))

        try:
            self._read_extras(path, audio, track)
        except (mutagen.MutagenError, OSError, ValueError) as e:
            # Lyrics/art are optional; the basic tags above still stand
            logger.warning("Could not read lyrics/art from %s: %s", path.name, e)

        logger.debug("Read tags for: %s -> %s - %s", path.name, track.artist, track.title)
        return track

    def write_tags(self, track: Track, fields: Iterable[str] | None = None) -> bool:
        """Write metadata tags to the audio file from the Track object.

        Args:
            track: Track object with metadata to write.
            fields: Names of the Track fields to write. Defaults to all of
                ``WRITABLE_FIELDS``. Fields whose value is empty are skipped.

        Returns:
            True if tags were written successfully, False otherwise.
        """
        path = track.file_path
        if not path.exists():
            logger.error("File not found for tag writing: %s", path)
            return False

        wanted = [f for f in (fields or WRITABLE_FIELDS) if f in WRITABLE_FIELDS]
        values = {
            name: self._format_value(name, getattr(track, name, None))
            for name in wanted
        }
        values = {k: v for k, v in values.items() if v}
        if not values:
            return True

        try:
            suffix = path.suffix.lower()

            if suffix == ".mp3":
                return self._write_mp3_tags(path, values)
            elif suffix == ".flac":
                return self._write_vorbis_tags(FLAC(path), path, values)
            elif suffix == ".ogg":
                return self._write_vorbis_tags(OggVorbis(path), path, values)
            elif suffix == ".opus":
                return self._write_vorbis_tags(OggOpus(path), path, values)
            elif suffix in (".m4a", ".aac", ".mp4"):
                return self._write_mp4_tags(path, values)
            else:
                logger.warning("Tag writing not supported for format: %s", suffix)
                return False

        except (mutagen.MutagenError, OSError, ValueError) as e:
            logger.error("Error writing tags to %s: %s", path, e)
            return False

    # --- Private: Read helpers ---

    def _get_tag(self, audio: mutagen.FileType, key: str) -> str | None:
        """Extract a single tag value from a mutagen file object.

        Args:
            audio: Mutagen file object (opened with easy=True).
            key: Tag key name.

        Returns:
            Tag value as string, or None.
        """
        try:
            value = audio.get(key)
            if value:
                if isinstance(value, list):
                    return str(value[0]).strip() if value[0] else None
                return str(value).strip() or None
        except (KeyError, IndexError, TypeError, ValueError):
            pass
        return None

    def _parse_year(self, date_str: str | None) -> int | None:
        """Parse a year from a date string (may be 'YYYY', 'YYYY-MM-DD', etc.)."""
        if not date_str:
            return None
        try:
            year = int(date_str[:4])
            if 1900 <= year <= 2100:
                return year
        except (ValueError, IndexError):
            pass
        return None

    def _parse_track_number(self, raw: str | None) -> int | None:
        """Parse a track number from a string (may be '5' or '5/12').

        Zero and negative numbers count as "no track number".
        """
        if not raw:
            return None
        try:
            number = int(raw.split("/")[0].strip())
        except (ValueError, IndexError):
            return None
        return number if number > 0 else None

    def _read_extras(self, path: Path, audio: Any, track: Track) -> None:
        """Read lyrics, cover art and source URL (not exposed by easy tags)."""
        suffix = path.suffix.lower()

        if suffix == ".mp3":
            try:
                tags = ID3(path)
            except ID3NoHeaderError:
                return
            lyrics = tags.getall("USLT")
            if lyrics:
                track.lyrics = lyrics[0].text or ""
            pictures = tags.getall("APIC")
            if pictures:
                track.album_art = pictures[0].data
                track.album_art_mime = pictures[0].mime
            sources = tags.getall("WOAS")
            if sources:
                track.source_url = sources[0].url

        elif suffix in (".flac", ".ogg", ".opus"):
            for key in _VORBIS_LYRICS_KEYS:
                value = self._get_tag(audio, key)
                if value:
                    track.lyrics = value
                    break
            track.source_url = self._get_tag(audio, _VORBIS_SOURCE_KEY)
            if isinstance(audio, FLAC) and audio.pictures:
                track.album_art = audio.pictures[0].data
                track.album_art_mime = audio.pictures[0].mime

        elif suffix in (".m4a", ".aac", ".mp4"):
            mp4 = MP4(path)
            if mp4.tags is None:
                return
            lyrics = mp4.tags.get(_MP4_KEYS["lyrics"])
            if lyrics:
                track.lyrics = str(lyrics[0])
            sources = mp4.tags.get(_MP4_SOURCE_KEY)
            if sources:
                track.source_url = bytes(sources[0]).decode("utf-8", errors="replace")
            covers = mp4.tags.get("covr")
            if covers:
                cover = covers[0]
                track.album_art = bytes(cover)
                track.album_art_mime = (
                    "image/png" if cover.imageformat == MP4Cover.FORMAT_PNG else "image/jpeg"
                )

    # --- Private: Write helpers per format ---

    def _format_value(self, name: str, value: Any) -> str | None:
        if value is None:
            return None
        if name == "track_number":
            return str(value) if int(value) > 0 else None
        return str(value)

    def _write_mp3_tags(self, path: Path, values: dict[str, str]) -> bool:
        """Write tags to an MP3 file using EasyID3, plus raw ID3 frames."""
        easy_values = {_EASY_KEYS[k]: v for k, v in values.items() if k in _EASY_KEYS}
        if easy_values:
            try:
                audio = EasyID3(path)
            except ID3NoHeaderError:
                audio = EasyID3()
                audio.save(path)
                audio = EasyID3(path)
            for key, value in easy_values.items():
                audio[key] = value
            audio.save()

        if "lyrics" in values or "source_url" in values:
            try:
                tags = ID3(path)
            except ID3NoHeaderError:
                tags = ID3()
            if "lyrics" in values:
                tags.delall("USLT")
                tags.add(
                    USLT(
                        encoding=ID3_ENCODING_UTF8,
                        lang=ID3_LYRICS_LANGUAGE,
                        desc="",
                        text=values["lyrics"],
                    )
                )
            if "source_url" in values:
                tags.delall("WOAS")
                tags.add(WOAS(url=values["source_url"]))
            tags.save(path)

        logger.debug("Wrote MP3 tags (%s): %s", ", ".join(values), path.name)
        return True

    def _write_vorbis_tags(self, audio: Any, path: Path, values: dict[str, str]) -> bool:
        """Write tags to a Vorbis-comment file (FLAC, OGG Vorbis, OGG Opus)."""
        if audio.tags is None:
            audio.add_tags()
        for name, value in values.items():
            if name in _EASY_KEYS:
                audio[_EASY_KEYS[name]] = [value]
            elif name == "lyrics":
                audio[_VORBIS_LYRICS_KEYS[0]] = [value]
            elif name == "source_url":
                audio[_VORBIS_SOURCE_KEY] = [value]
        audio.save()
        logger.debug("Wrote Vorbis tags (%s): %s", ", ".join(values), path.name)
        return True

    def _write_mp4_tags(self, path: Path, values: dict[str, str]) -> bool:
        """Write tags to an M4A/MP4 file."""
        audio = MP4(path)
        if audio.tags is None:
            audio.add_tags()

        for name, value in values.items():
            if name in _MP4_KEYS:
                audio[_MP4_KEYS[name]] = [value]
            elif name == "track_number":
                existing = audio.tags.get("trkn")
                total = existing[0][1] if existing else 0
                audio["trkn"] = [(int(value), total)]
            elif name == "source_url":
                audio[_MP4_SOURCE_KEY] = [value.encode("utf-8")]

        audio.save()
        logger.debug("Wrote MP4 tags (%s): %s", ", ".join(values), path.name)
        return True
