"""Rule matcher -- claims tracks for naming rules by lyric phrase search."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Iterable

from lyric_namer.core.template_renderer import render
from lyric_namer.models.match_result import GroupKey, MatchEntry
from lyric_namer.models.naming_rule import NamingRule
from lyric_namer.models.track import Track
from lyric_namer.utils.constants import (
    UNKNOWN_ALBUM,
    UNKNOWN_ARTIST,
    UNKNOWN_GENRE,
    UNKNOWN_TITLE,
)
from lyric_namer.utils.logger import get_logger

logger = get_logger("core.rule_matcher")

# Called with (rule_index, rule_count, rule) before each rule is evaluated
RuleCallback = Callable[[int, int, NamingRule], None]


def matches(track: Track, rule: NamingRule) -> bool:
    """Check whether any of the rule's phrases occurs in the track's lyrics.

    The comparison is a case-insensitive substring test.  Blank phrases are
    ignored, and a track without lyrics never matches.
    """
    if not track.lyrics:
        return False
    lyrics = track.lyrics.casefold()
    return any(phrase.casefold() in lyrics for phrase in rule.valid_searches)


class RuleMatcher:
    """Applies an ordered rule list to a track list.

    Each track belongs to at most one rule per pass: rules are tried in list
    order and the first one that matches claims the track.  File paths are
    the dedup key, so a path listed twice is also claimed only once.
    """

    def __init__(self, current_year: int | None = None) -> None:
        """Initialize the matcher.

        Args:
            current_year: Year used for tracks without one. Defaults to the
                current calendar year.
        """
        self._current_year = current_year or datetime.now().year

    def collect_matches(
        self,
        rules: Iterable[NamingRule],
        tracks: Iterable[Track],
        on_rule: RuleCallback | None = None,
    ) -> list[MatchEntry]:
        """Match every track against the rule list.

        Args:
            rules: Rules in priority order.
            tracks: Candidate tracks.
            on_rule: Optional callback fired before each rule is evaluated.

        Returns:
            Match entries in rule order, then track order.
        """
        rules = list(rules)
        tracks = list(tracks)
        claimed: set[str] = set()
        entries: list[MatchEntry] = []

        for index, rule in enumerate(rules, start=1):
            if on_rule:
                on_rule(index, len(rules), rule)

            if rule.is_inert:
                logger.debug("Skipping rule %s: no search phrases", rule.id)
                continue

            rule_hits = 0
            for track in tracks:
                if track.key in claimed:
                    continue
                if not matches(track, rule):
                    continue

                claimed.add(track.key)
                entries.append(self._make_entry(track, rule))
                rule_hits += 1

            logger.debug("Rule %s claimed %d tracks", rule.id, rule_hits)

        logger.info("Matched %d tracks across %d rules", len(entries), len(rules))
        return entries

    def build_variables(self, track: Track) -> dict:
        """Build the template variable bag for a track.

        ``number`` is left as None; the numbering resolver fills it in.
        """
        return {
            "number": None,
            "artist": track.artist or UNKNOWN_ARTIST,
            "title": track.title or UNKNOWN_TITLE,
            "album": track.album or UNKNOWN_ALBUM,
            "genre": track.genre or UNKNOWN_GENRE,
            "year": track.year or self._current_year,
        }

    def _make_entry(self, track: Track, rule: NamingRule) -> MatchEntry:
        variables = self.build_variables(track)
        return MatchEntry(
            track=track,
            rule=rule,
            variables=variables,
            group_key=group_key_for(rule, variables),
        )


def group_key_for(rule: NamingRule, variables: dict) -> GroupKey:
    """Numbering group of a match: the rule plus its album before numbering.

    The album template is rendered without a number so that an album name
    containing ``{number}`` does not split every track into its own group.
    """
    unnumbered = {k: v for k, v in variables.items() if k != "number"}
    return (rule.id, render(rule.effective_album_template, unnumbered))
