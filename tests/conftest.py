"""Shared fixtures: an in-file JSON tag store standing in for mutagen."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

import pytest

from lyric_namer.models.track import Track
from lyric_namer.utils.errors import TagReadError

_TAG_FIELDS = (
    "title",
    "artist",
    "album",
    "genre",
    "year",
    "track_number",
    "lyrics",
    "source_url",
)


class JsonTagEditor:
    """Keeps a file's tags as JSON inside the file, so renames carry them along."""

    def __init__(self) -> None:
        self.writes: list[tuple[str, tuple[str, ...]]] = []
        self.fail_writes: set[str] = set()

    def read_tags(self, track: Track) -> Track:
        path = track.file_path
        if not path.exists():
            raise TagReadError(path, "file not found")
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise TagReadError(path, "not an audio file") from e

        for name in _TAG_FIELDS:
            default = "" if name == "lyrics" else None
            setattr(track, name, data.get(name, default))
        return track

    def write_tags(self, track: Track, fields=None) -> bool:
        path = track.file_path
        if path.name in self.fail_writes or not path.exists():
            return False
        data = json.loads(path.read_text(encoding="utf-8"))
        names = tuple(fields or _TAG_FIELDS)
        for name in names:
            data[name] = getattr(track, name)
        path.write_text(json.dumps(data), encoding="utf-8")
        self.writes.append((path.name, names))
        return True


def read_song(path: Path) -> dict:
    """Tags stored in a fake song file."""
    return json.loads(path.read_text(encoding="utf-8"))


@pytest.fixture
def editor() -> JsonTagEditor:
    return JsonTagEditor()


@pytest.fixture
def music_dir(tmp_path: Path) -> Path:
    folder = tmp_path / "music"
    folder.mkdir()
    return folder


@pytest.fixture
def make_song(music_dir: Path) -> Callable[..., Path]:
    """Return a factory writing a fake song file with the given tags."""

    def _make(name: str, **tags) -> Path:
        path = music_dir / name
        path.write_text(json.dumps(tags), encoding="utf-8")
        return path

    return _make


@pytest.fixture
def load_tracks(editor: JsonTagEditor) -> Callable[[Path], list[Track]]:
    """Return a loader scanning a folder through the fake tag store."""
    from lyric_namer.core.scanner import FileScanner

    def _load(folder: Path) -> list[Track]:
        return FileScanner(editor).scan(folder)

    return _load
