"""Tests for lyric_namer/utils/file_utils.py -- listing, renaming, sanitization."""

from pathlib import Path

import pytest

from lyric_namer.utils.errors import ScanError
from lyric_namer.utils.file_utils import (
    is_audio_file,
    is_same_file,
    list_audio_files,
    safe_rename,
    sanitize_filename,
)

# ---------------------------------------------------------------------------
# sanitize_filename
# ---------------------------------------------------------------------------


class TestSanitizeFilename:
    """Tests for sanitize_filename()."""

    def test_removes_invalid_characters(self):
        assert sanitize_filename('song<>:"/\\|?*.mp3') == "song_.mp3"

    def test_strips_leading_trailing_dots_and_spaces(self):
        assert sanitize_filename("...hello...") == "hello"
        assert sanitize_filename("  hello  ") == "hello"

    def test_drops_control_characters(self):
        assert sanitize_filename("first line\nsecond\tline") == "first linesecondline"

    def test_empty_stays_empty(self):
        assert sanitize_filename("") == ""
        assert sanitize_filename("...") == ""

    def test_windows_reserved_names(self):
        assert sanitize_filename("CON") == "_CON"
        assert sanitize_filename("nul") == "_nul"
        assert sanitize_filename("LPT9") == "_LPT9"
        assert sanitize_filename("CON.mp3") == "_CON.mp3"

    def test_non_reserved_similar_names(self):
        assert sanitize_filename("CONSOLE") == "CONSOLE"
        assert sanitize_filename("COM10") == "COM10"

    def test_max_component_length(self):
        assert len(sanitize_filename("A" * 300)) <= 240

    def test_unicode_preserved(self):
        assert sanitize_filename("Café del Mar") == "Café del Mar"


# ---------------------------------------------------------------------------
# list_audio_files
# ---------------------------------------------------------------------------


class TestListAudioFiles:
    """Tests for list_audio_files()."""

    def test_lists_supported_files_sorted(self, tmp_path):
        for name in ("b.MP3", "a.flac", "notes.txt", "c.m4a"):
            (tmp_path / name).write_text("x")
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "nested.mp3").write_text("x")

        assert [p.name for p in list_audio_files(tmp_path)] == ["a.flac", "b.MP3", "c.m4a"]

    def test_missing_folder_raises(self, tmp_path):
        with pytest.raises(ScanError) as exc_info:
            list_audio_files(tmp_path / "nope")
        assert exc_info.value.reason == "directory not found"

    def test_file_instead_of_folder_raises(self, tmp_path):
        f = tmp_path / "song.mp3"
        f.write_text("x")
        with pytest.raises(ScanError):
            list_audio_files(f)

    def test_is_audio_file(self):
        assert is_audio_file(Path("x.OPUS"))
        assert not is_audio_file(Path("x.wav.txt"))


# ---------------------------------------------------------------------------
# safe_rename
# ---------------------------------------------------------------------------


class TestSafeRename:
    """Tests for safe_rename()."""

    def test_renames_file(self, tmp_path):
        src = tmp_path / "old.mp3"
        src.write_text("hello")
        dst = tmp_path / "new.mp3"

        assert safe_rename(src, dst) == dst
        assert dst.read_text() == "hello"
        assert not src.exists()

    def test_never_overwrites(self, tmp_path):
        src = tmp_path / "old.mp3"
        src.write_text("mine")
        dst = tmp_path / "taken.mp3"
        dst.write_text("theirs")

        with pytest.raises(FileExistsError):
            safe_rename(src, dst)
        assert dst.read_text() == "theirs"
        assert src.exists()

    def test_raises_on_missing_source(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            safe_rename(tmp_path / "ghost.mp3", tmp_path / "new.mp3")

    def test_is_same_file(self, tmp_path):
        a = tmp_path / "a.mp3"
        a.write_text("x")
        assert is_same_file(a, tmp_path / "a.mp3")
        assert not is_same_file(a, tmp_path / "missing.mp3")
