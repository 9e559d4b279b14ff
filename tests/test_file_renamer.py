"""Tests for FileRenamer -- conflict-safe renames within a directory."""

from __future__ import annotations

from pathlib import Path

import pytest

from lyric_namer.core import file_renamer
from lyric_namer.core.file_renamer import FileRenamer, build_filename
from lyric_namer.models.match_result import FileStatus
from lyric_namer.models.naming_rule import NamingRule

NUMBERED = NamingRule(
    id=1, lyric_searches=["x"], filename_template="{number:03d} - {album}", start_number=5,
)
UNNUMBERED = NamingRule(id=2, lyric_searches=["x"], filename_template="{title}")


def _touch(folder: Path, name: str, content: str = "") -> Path:
    p = folder / name
    p.write_text(content or name, encoding="utf-8")
    return p


class TestBuildFilename:
    def test_renders_and_appends_suffix(self):
        assert build_filename("{number:02d} {title}", {"number": 1, "title": "Song"}, ".mp3") == (
            "01 Song.mp3"
        )

    def test_invalid_characters_replaced(self):
        assert build_filename("{title}", {"title": "AC/DC: Live?"}, ".flac") == "AC_DC_ Live_.flac"

    def test_empty_render_gives_empty_name(self):
        assert build_filename("{missing}", {}, ".mp3") == ""


class TestRename:
    def test_rules_know_whether_filenames_are_numbered(self):
        assert NUMBERED.filename_is_numbered
        assert not UNNUMBERED.filename_is_numbered

    def test_simple_rename(self, tmp_path: Path):
        src = _touch(tmp_path, "old.mp3")

        outcome = FileRenamer().rename(src, "new.mp3", UNNUMBERED, {"title": "new"})

        assert outcome.status is FileStatus.SUCCESS
        assert outcome.path == tmp_path / "new.mp3"
        assert outcome.path.exists()
        assert not src.exists()

    def test_same_name_is_noop(self, tmp_path: Path):
        src = _touch(tmp_path, "keep.mp3")
        outcome = FileRenamer().rename(src, "keep.mp3", UNNUMBERED, {})
        assert outcome.path == src
        assert outcome.status is FileStatus.SUCCESS

    def test_conflict_without_number_placeholder_keeps_name(self, tmp_path: Path):
        src = _touch(tmp_path, "old.mp3")
        _touch(tmp_path, "Taken.mp3", "occupant")

        outcome = FileRenamer().rename(src, "Taken.mp3", UNNUMBERED, {"title": "Taken"})

        assert outcome.status is FileStatus.WARNING
        assert "already exists" in outcome.message
        assert outcome.path == src
        assert (tmp_path / "Taken.mp3").read_text(encoding="utf-8") == "occupant"

    def test_conflict_takes_next_free_slot(self, tmp_path: Path):
        for n in range(5, 10):
            _touch(tmp_path, f"{n:03d} - X.mp3")
        src = _touch(tmp_path, "song.mp3")

        outcome = FileRenamer().rename(
            src, "005 - X.mp3", NUMBERED, {"number": 5, "album": "X"},
        )

        assert outcome.status is FileStatus.SUCCESS
        assert outcome.filename == "010 - X.mp3"
        assert outcome.number == 10
        assert (tmp_path / "005 - X.mp3").read_text(encoding="utf-8") == "005 - X.mp3"

    def test_file_already_in_a_slot_keeps_its_name(self, tmp_path: Path):
        _touch(tmp_path, "005 - X.mp3", "occupant")
        src = _touch(tmp_path, "007 - X.mp3", "mine")

        outcome = FileRenamer().rename(src, "005 - X.mp3", NUMBERED, {"number": 5, "album": "X"})

        assert outcome.status is FileStatus.SUCCESS
        assert outcome.path == src
        assert outcome.number == 7
        assert sorted(p.name for p in tmp_path.iterdir()) == ["005 - X.mp3", "007 - X.mp3"]

    def test_planned_number_not_reported(self, tmp_path: Path):
        src = _touch(tmp_path, "song.mp3")
        outcome = FileRenamer().rename(src, "005 - X.mp3", NUMBERED, {"number": 5, "album": "X"})
        assert outcome.filename == "005 - X.mp3"
        assert outcome.number is None

    def test_slots_track_renames_in_batch(self, tmp_path: Path):
        _touch(tmp_path, "005 - X.mp3")
        first = _touch(tmp_path, "first.mp3")
        second = _touch(tmp_path, "second.mp3")
        renamer = FileRenamer()
        variables = {"number": 5, "album": "X"}

        one = renamer.rename(first, "005 - X.mp3", NUMBERED, variables)
        two = renamer.rename(second, "005 - X.mp3", NUMBERED, variables)

        assert (one.filename, two.filename) == ("006 - X.mp3", "007 - X.mp3")

    def test_slot_pattern_ignores_other_names(self, tmp_path: Path):
        _touch(tmp_path, "005 - X.mp3")
        _touch(tmp_path, "006 - Other.mp3")
        _touch(tmp_path, "007 - X.flac")
        src = _touch(tmp_path, "song.mp3")

        outcome = FileRenamer().rename(src, "005 - X.mp3", NUMBERED, {"number": 5, "album": "X"})

        assert outcome.filename == "006 - X.mp3"

    def test_special_characters_in_template_text(self, tmp_path: Path):
        rule = NamingRule(
            id=3, lyric_searches=["x"], filename_template="[{album}] (+{number:02d})",
        )
        _touch(tmp_path, "[A.B] (+01).mp3")
        src = _touch(tmp_path, "song.mp3")

        outcome = FileRenamer().rename(src, "[A.B] (+01).mp3", rule, {"number": 1, "album": "A.B"})

        assert outcome.filename == "[A.B] (+02).mp3"

    def test_os_error_becomes_warning(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        src = _touch(tmp_path, "old.mp3")

        def _boom(a, b):
            raise PermissionError("read-only share")

        monkeypatch.setattr(file_renamer, "safe_rename", _boom)
        outcome = FileRenamer().rename(src, "new.mp3", UNNUMBERED, {})

        assert outcome.status is FileStatus.WARNING
        assert "rename failed" in outcome.message
        assert outcome.path == src
        assert src.exists()


class TestTwoPhaseRename:
    def test_swap_through_temp_name(self, tmp_path: Path):
        a = _touch(tmp_path, "a.mp3", "was a")
        b = _touch(tmp_path, "b.mp3", "was b")
        renamer = FileRenamer(pending=[a, b])

        first = renamer.rename(a, "b.mp3", UNNUMBERED, {"title": "b"})
        assert first.parked
        assert first.filename == "Temp_b.mp3"

        second = renamer.rename(b, "a.mp3", UNNUMBERED, {"title": "a"})
        assert second.filename == "a.mp3"

        renamer.finalize()

        assert not first.parked
        assert first.status is FileStatus.SUCCESS
        assert first.filename == "b.mp3"
        assert (tmp_path / "b.mp3").read_text(encoding="utf-8") == "was a"
        assert (tmp_path / "a.mp3").read_text(encoding="utf-8") == "was b"
        assert not (tmp_path / "Temp_b.mp3").exists()

    def test_target_still_taken_restores_original(self, tmp_path: Path):
        a = _touch(tmp_path, "a.mp3", "was a")
        b = _touch(tmp_path, "b.mp3", "was b")
        renamer = FileRenamer(pending=[a, b])

        parked = renamer.rename(a, "b.mp3", UNNUMBERED, {"title": "b"})
        # b was expected to move but never does
        renamer.finalize()

        assert parked.status is FileStatus.WARNING
        assert parked.path == a
        assert a.read_text(encoding="utf-8") == "was a"
        assert b.read_text(encoding="utf-8") == "was b"
