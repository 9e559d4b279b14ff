"""Tests for TagEditor -- parsing helpers and mutagen read/write."""

from __future__ import annotations

from pathlib import Path

import pytest

from lyric_namer.core.tag_editor import TagEditor
from lyric_namer.models.track import Track
from lyric_namer.utils.errors import TagReadError


@pytest.fixture
def editor() -> TagEditor:
    return TagEditor()


# ------------------------------------------------------------------
# Parsing helper tests (no audio files needed)
# ------------------------------------------------------------------


class TestParseYear:
    def test_four_digit_year(self, editor: TagEditor):
        assert editor._parse_year("2024") == 2024

    def test_date_string(self, editor: TagEditor):
        assert editor._parse_year("2024-03-15") == 2024

    def test_invalid_year(self, editor: TagEditor):
        assert editor._parse_year("abcd") is None

    def test_none(self, editor: TagEditor):
        assert editor._parse_year(None) is None

    def test_year_out_of_range(self, editor: TagEditor):
        assert editor._parse_year("1800") is None


class TestParseTrackNumber:
    def test_simple_number(self, editor: TagEditor):
        assert editor._parse_track_number("5") == 5

    def test_fraction_format(self, editor: TagEditor):
        assert editor._parse_track_number("5/12") == 5

    def test_none(self, editor: TagEditor):
        assert editor._parse_track_number(None) is None

    def test_invalid(self, editor: TagEditor):
        assert editor._parse_track_number("abc") is None

    def test_zero_means_unnumbered(self, editor: TagEditor):
        assert editor._parse_track_number("0") is None
        assert editor._parse_track_number("0/10") is None

    def test_whitespace(self, editor: TagEditor):
        assert editor._parse_track_number(" 7 / 14 ") == 7


class TestFormatValue:
    def test_track_number(self, editor: TagEditor):
        assert editor._format_value("track_number", 3) == "3"
        assert editor._format_value("track_number", 0) is None

    def test_none(self, editor: TagEditor):
        assert editor._format_value("title", None) is None

    def test_year(self, editor: TagEditor):
        assert editor._format_value("year", 2024) == "2024"


# ------------------------------------------------------------------
# File-level behaviour
# ------------------------------------------------------------------


@pytest.fixture
def mp3_file(tmp_path: Path) -> Path:
    """Create a minimal MP3 file: one MPEG1 Layer3 128kbps 44.1kHz frame."""
    p = tmp_path / "test.mp3"
    frame_header = bytes([0xFF, 0xFB, 0x90, 0x00])
    frame_data = b"\x00" * 413
    p.write_bytes((frame_header + frame_data) * 4)
    return p


class TestReadWrite:
    def test_read_nonexistent_file(self, editor: TagEditor):
        with pytest.raises(TagReadError, match="file not found"):
            editor.read_tags(Track(file_path=Path("/nonexistent/file.mp3")))

    def test_read_garbage_file(self, editor: TagEditor, tmp_path: Path):
        p = tmp_path / "fake.flac"
        p.write_bytes(b"definitely not audio")
        with pytest.raises(TagReadError):
            editor.read_tags(Track(file_path=p))

    def test_write_nonexistent_file(self, editor: TagEditor):
        track = Track(file_path=Path("/nonexistent/file.mp3"), title="Ghost")
        assert editor.write_tags(track) is False

    def test_write_nothing_is_success(self, editor: TagEditor, tmp_path: Path):
        p = tmp_path / "song.mp3"
        p.write_bytes(b"x")
        assert editor.write_tags(Track(file_path=p), fields=("title",)) is True

    def test_unsupported_format(self, editor: TagEditor, tmp_path: Path):
        p = tmp_path / "song.wav"
        p.write_bytes(b"x")
        assert editor.write_tags(Track(file_path=p, title="t"), fields=("title",)) is False

    @pytest.mark.slow
    def test_mp3_round_trip(self, editor: TagEditor, mp3_file: Path):
        track = Track(
            file_path=mp3_file,
            title="Test Title",
            artist="Test Artist",
            album="Test Album",
            genre="rap; dark",
            year=2024,
            track_number=3,
            lyrics="neon rain on the window",
            source_url="https://suno.com/song/abc",
        )

        if not editor.write_tags(track):
            pytest.skip("Cannot write to minimal MP3 - mutagen may need a real frame")

        try:
            read_track = editor.read_tags(Track(file_path=mp3_file))
        except TagReadError:
            pytest.skip("Mutagen cannot re-read the minimal test MP3 (fixture limitation)")

        assert read_track.title == "Test Title"
        assert read_track.artist == "Test Artist"
        assert read_track.genre == "rap; dark"
        assert read_track.year == 2024
        assert read_track.track_number == 3
        assert read_track.lyrics == "neon rain on the window"
        assert read_track.source_url == "https://suno.com/song/abc"

    @pytest.mark.slow
    def test_mp3_partial_write_keeps_other_fields(self, editor: TagEditor, mp3_file: Path):
        track = Track(file_path=mp3_file, title="Keep", artist="Old")
        if not editor.write_tags(track):
            pytest.skip("Cannot write to minimal MP3 - mutagen may need a real frame")

        track.title = "Changed"
        track.artist = "New"
        assert editor.write_tags(track, fields=("artist",))

        try:
            read_track = editor.read_tags(Track(file_path=mp3_file))
        except TagReadError:
            pytest.skip("Mutagen cannot re-read the minimal test MP3 (fixture limitation)")

        assert read_track.title == "Keep"
        assert read_track.artist == "New"
