"""Data models for Lyric Namer."""

from lyric_namer.models.config import AppConfig
from lyric_namer.models.match_result import (
    ApplyResult,
    FileResult,
    FileStatus,
    MatchEntry,
    NamingMatch,
    NamingPreview,
)
from lyric_namer.models.naming_rule import NamingRule
from lyric_namer.models.progress import ProgressEvent, ProgressPhase
from lyric_namer.models.track import Track

__all__ = [
    "AppConfig",
    "ApplyResult",
    "FileResult",
    "FileStatus",
    "MatchEntry",
    "NamingMatch",
    "NamingPreview",
    "NamingRule",
    "ProgressEvent",
    "ProgressPhase",
    "Track",
]
