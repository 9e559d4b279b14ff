"""Naming rule model -- a lyric-match-to-template mapping.

Rule records come in two persisted shapes:

* **legacy**: a single ``lyricSearch`` string per rule.
* **current**: a ``lyricSearches`` list.

``parse_rule_record`` tags a raw dict as one or the other, and
``upconvert`` turns either into a :class:`NamingRule`.  This happens once,
at load time, so the matcher only ever sees the current shape.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from lyric_namer.core.template_renderer import has_number_placeholder
from lyric_namer.utils.constants import DEFAULT_ALBUM_TEMPLATE, DEFAULT_START_NUMBER

RuleId = Union[str, int]


@dataclass
class NamingRule:
    """A user-defined rule: lyric phrases in, four templates out.

    Attributes:
        id: Unique identifier, stable across save/load.
        lyric_searches: Phrases searched for (case-insensitive) in lyrics.
            Any one of them matching is enough.
        artist_template: Template for the new artist tag.
        song_template: Template for the new title tag.
        album_template: Template for the new album tag. Also drives the
            numbering group of a match.
        filename_template: Template for the new filename (no extension).
        start_number: Lowest number handed out to unnumbered tracks.
    """

    id: RuleId
    lyric_searches: list[str] = field(default_factory=list)
    artist_template: str = ""
    song_template: str = ""
    album_template: str = ""
    filename_template: str = ""
    start_number: int = DEFAULT_START_NUMBER

    def __post_init__(self) -> None:
        self.start_number = _coerce_start_number(self.start_number)

    @property
    def valid_searches(self) -> list[str]:
        """Non-blank search phrases."""
        return [s for s in self.lyric_searches if s and s.strip()]

    @property
    def is_inert(self) -> bool:
        """A rule without a usable phrase matches nothing."""
        return not self.valid_searches

    @property
    def effective_album_template(self) -> str:
        return self.album_template or DEFAULT_ALBUM_TEMPLATE

    @property
    def display_name(self) -> str:
        return self.album_template or "Unnamed Rule"

    @property
    def filename_is_numbered(self) -> bool:
        return has_number_placeholder(self.filename_template)

    @classmethod
    def from_dict(cls, data: dict) -> NamingRule:
        """Build a rule from either persisted shape."""
        return upconvert(parse_rule_record(data))

    def to_dict(self) -> dict:
        """Serialize to the current persisted shape."""
        return {
            "id": self.id,
            "lyricSearches": list(self.lyric_searches),
            "albumTemplate": self.album_template,
            "songTemplate": self.song_template,
            "artistTemplate": self.artist_template,
            "filenameTemplate": self.filename_template,
            "startNumber": self.start_number,
        }


@dataclass(frozen=True)
class LegacyRuleRecord:
    """A rule saved before multi-phrase search existed."""

    id: RuleId
    lyric_search: str
    artist_template: str = ""
    song_template: str = ""
    album_template: str = ""
    filename_template: str = ""
    start_number: Any = DEFAULT_START_NUMBER


RuleRecord = Union[LegacyRuleRecord, NamingRule]


def parse_rule_record(data: dict) -> RuleRecord:
    """Tag a raw rule dict as legacy or current.

    A record counts as legacy when it carries a ``lyricSearch`` string and
    no non-empty ``lyricSearches`` list.

    Raises:
        ValueError: If the record has no ``id``.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Rule record must be an object, got {type(data).__name__}")
    if data.get("id") is None:
        raise ValueError("Rule record has no 'id'")

    common = {
        "id": data["id"],
        "artist_template": data.get("artistTemplate") or "",
        "song_template": data.get("songTemplate") or "",
        "album_template": data.get("albumTemplate") or "",
        "filename_template": data.get("filenameTemplate") or "",
        "start_number": data.get("startNumber", DEFAULT_START_NUMBER),
    }

    searches = data.get("lyricSearches")
    legacy_search = data.get("lyricSearch")
    if legacy_search and not searches:
        return LegacyRuleRecord(lyric_search=str(legacy_search), **common)

    if isinstance(searches, str):
        searches = [searches]
    return NamingRule(
        lyric_searches=[str(s) for s in (searches or []) if s is not None],
        **common,
    )


def upconvert(record: RuleRecord) -> NamingRule:
    """Turn any rule record into the current :class:`NamingRule` shape."""
    if isinstance(record, NamingRule):
        return record
    return NamingRule(
        id=record.id,
        lyric_searches=[record.lyric_search],
        artist_template=record.artist_template,
        song_template=record.song_template,
        album_template=record.album_template,
        filename_template=record.filename_template,
        start_number=record.start_number,
    )


def _coerce_start_number(value: Any) -> int:
    """Parse a start number, falling back to 1 for junk or non-positive input."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        return DEFAULT_START_NUMBER
    return number if number >= 1 else DEFAULT_START_NUMBER
