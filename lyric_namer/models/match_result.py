"""Match and result models for the naming pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from lyric_namer.models.naming_rule import NamingRule, RuleId
from lyric_namer.models.track import Track

# (rule id, rendered album) -- tracks sharing a key are numbered together
GroupKey = tuple


@dataclass
class MatchEntry:
    """A track bound to the rule that claimed it, plus its variable bag.

    Built fresh on every preview/apply pass and never persisted.
    """

    track: Track
    rule: NamingRule
    variables: dict[str, Any]
    group_key: GroupKey

    @property
    def rule_id(self) -> RuleId:
        return self.rule.id

    @property
    def number(self) -> int | None:
        return self.variables.get("number")


@dataclass
class NamingMatch:
    """One preview row: what a matched track looks like before and after."""

    original_path: Path
    original_filename: str
    new_filename: str
    original_artist: str | None
    original_title: str | None
    original_album: str | None
    new_artist: str
    new_title: str
    new_album: str
    rule_id: RuleId
    variables: dict[str, Any] = field(default_factory=dict)

    @property
    def number(self) -> int | None:
        return self.variables.get("number")

    @property
    def renames_file(self) -> bool:
        return self.new_filename != self.original_filename

    def as_dict(self) -> dict:
        return {
            "originalPath": str(self.original_path),
            "originalFilename": self.original_filename,
            "newFilename": self.new_filename,
            "originalArtist": self.original_artist,
            "originalTitle": self.original_title,
            "originalAlbum": self.original_album,
            "newArtist": self.new_artist,
            "newTitle": self.new_title,
            "newAlbum": self.new_album,
            "ruleId": self.rule_id,
            "variables": dict(self.variables),
        }


@dataclass
class NamingPreview:
    """Result of a preview pass."""

    matches: list[NamingMatch] = field(default_factory=list)

    @property
    def total_matches(self) -> int:
        return len(self.matches)

    def as_dict(self) -> dict:
        return {
            "totalMatches": self.total_matches,
            "matches": [m.as_dict() for m in self.matches],
        }


class FileStatus(Enum):
    """Outcome of applying a change to one file."""

    SUCCESS = "success"
    WARNING = "warning"
    FAILURE = "failure"


@dataclass
class FileResult:
    """Per-file outcome of a batch operation.

    ``WARNING`` means the metadata change stood but something else (usually
    the rename) did not happen as planned.
    """

    filename: str
    status: FileStatus
    message: str | None = None
    new_filename: str | None = None
    changes: dict[str, Any] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        """True when the metadata part of the change was applied."""
        return self.status is not FileStatus.FAILURE

    def as_dict(self) -> dict:
        return {
            "filename": self.filename,
            "status": self.status.value,
            "message": self.message,
            "newFilename": self.new_filename,
            "changes": dict(self.changes),
        }


@dataclass
class ApplyResult:
    """Aggregate result of an apply (or genre cleanup) batch."""

    results: list[FileResult] = field(default_factory=list)
    cancelled: bool = False

    @property
    def updated_count(self) -> int:
        return sum(1 for r in self.results if r.succeeded)

    @property
    def success_count(self) -> int:
        return self._count(FileStatus.SUCCESS)

    @property
    def warning_count(self) -> int:
        return self._count(FileStatus.WARNING)

    @property
    def failure_count(self) -> int:
        return self._count(FileStatus.FAILURE)

    def _count(self, status: FileStatus) -> int:
        return sum(1 for r in self.results if r.status is status)

    def summary(self) -> str:
        text = (
            f"{self.success_count} succeeded, {self.warning_count} with warnings, "
            f"{self.failure_count} failed"
        )
        if self.cancelled:
            text += " (cancelled)"
        return text
