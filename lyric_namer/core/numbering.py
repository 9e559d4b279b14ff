"""Numbering resolver -- stable sequence numbers within a match group."""

from __future__ import annotations

from collections import OrderedDict
from typing import Iterable

from lyric_namer.models.match_result import GroupKey, MatchEntry
from lyric_namer.utils.logger import get_logger

logger = get_logger("core.numbering")


class NumberingResolver:
    """Assigns each entry of a group exactly one track number.

    Policy:
    1. An entry whose track already has a positive track number keeps it,
       unless an earlier entry of the same group already holds that number.
       Later claimants of a taken number count as unnumbered.
    2. Unnumbered entries, ordered by title then filename, get the lowest
       free numbers starting at ``max(highest kept + 1, start_number)``.

    Numbers below the highest kept number are never handed out, so gaps in
    existing numbering stay gaps.  Re-running over an unchanged input gives
    the same result, and adding tracks only numbers the new ones.
    """

    def resolve(self, entries: list[MatchEntry], start_number: int = 1) -> list[MatchEntry]:
        """Write a ``number`` into every entry's variable bag.

        Args:
            entries: Entries sharing one group key, in match order.
            start_number: Lowest number for unnumbered entries.

        Returns:
            The entries ordered by their assigned number.
        """
        kept: dict[int, MatchEntry] = {}
        unnumbered: list[MatchEntry] = []

        for entry in entries:
            existing = entry.track.track_number
            if existing is not None and existing > 0 and existing not in kept:
                kept[existing] = entry
            else:
                if existing is not None and existing > 0:
                    logger.debug(
                        "Duplicate track number %d on %s, reassigning",
                        existing, entry.track.filename,
                    )
                unnumbered.append(entry)

        for number, entry in kept.items():
            entry.variables["number"] = number

        highest = max(kept, default=0)
        next_number = max(highest + 1, start_number)
        taken = set(kept)

        unnumbered.sort(key=_stable_order)
        for entry in unnumbered:
            while next_number in taken:
                next_number += 1
            entry.variables["number"] = next_number
            taken.add(next_number)
            next_number += 1

        return sorted(entries, key=lambda e: e.variables["number"])

    def resolve_all(self, entries: Iterable[MatchEntry]) -> list[MatchEntry]:
        """Group entries by key and resolve each group.

        Groups are processed in first-seen order.

        Returns:
            All entries, group by group, each group in number order.
        """
        groups: OrderedDict[GroupKey, list[MatchEntry]] = OrderedDict()
        for entry in entries:
            groups.setdefault(entry.group_key, []).append(entry)

        ordered: list[MatchEntry] = []
        for key, group in groups.items():
            resolved = self.resolve(group, group[0].rule.start_number)
            logger.debug(
                "Group %r: numbered %d tracks (%d-%d)",
                key, len(resolved),
                resolved[0].variables["number"], resolved[-1].variables["number"],
            )
            ordered.extend(resolved)
        return ordered


def _stable_order(entry: MatchEntry) -> tuple[str, str]:
    title = entry.track.title or ""
    return (title.casefold(), entry.track.filename)
