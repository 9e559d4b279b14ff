"""Exception hierarchy for Lyric Namer.

Only batch-level and load-time problems are raised as exceptions.  Per-file
I/O problems during preview/apply are recorded as result entries instead.
"""

from __future__ import annotations

from pathlib import Path


class LyricNamerError(Exception):
    """Base class for all Lyric Namer errors."""


class ScanError(LyricNamerError):
    """A music folder could not be read. Fatal for the whole batch."""

    def __init__(self, folder: Path | str, reason: str) -> None:
        self.folder = Path(folder)
        self.reason = reason
        super().__init__(f"Cannot read folder {self.folder}: {reason}")


class TagReadError(LyricNamerError):
    """An audio file could not be opened to read its tags."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot read tags from {self.path.name}: {reason}")


class RuleStoreError(LyricNamerError):
    """A persisted rule-set file is missing or malformed."""
