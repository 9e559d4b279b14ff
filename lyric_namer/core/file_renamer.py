"""File renamer -- conflict-safe in-place renames for a naming batch.

Renames happen inside the file's own directory and never overwrite an
existing file.  A destination that is taken is handled in one of three ways:

1. The occupant is itself about to be renamed by this batch: the file is
   parked under a ``Temp_`` name and moved to its final name in
   :meth:`FileRenamer.finalize`, once the occupant has moved away.
2. The filename template has a number placeholder: the name is re-rendered
   with the lowest free number in that directory's numeric slots. A file
   that already sits in one of those slots keeps its name.
3. Otherwise the rename is skipped with a warning.

Numeric slots are computed once per directory and name pattern, then kept
up to date as this batch renames files.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

from lyric_namer.core.template_renderer import render
from lyric_namer.models.match_result import FileStatus
from lyric_namer.models.naming_rule import NamingRule
from lyric_namer.utils.constants import TEMP_RENAME_PREFIX
from lyric_namer.utils.file_utils import is_same_file, safe_rename, sanitize_filename
from lyric_namer.utils.logger import get_logger

logger = get_logger("core.file_renamer")

# Stand-in for the number while deriving a name pattern. Alphanumeric so
# sanitize_filename leaves it alone.
_NUMBER_SENTINEL = "LYRICNAMERNUMBERSLOT"
_NUMBER_PLACEHOLDER_RE = re.compile(r"\{number(?::\d+d)?\}")


def build_filename(template: str, variables: dict[str, Any], suffix: str) -> str:
    """Render a filename template into a safe filename with extension.

    Returns an empty string when the template renders to nothing usable.
    """
    stem = sanitize_filename(render(template, variables))
    return f"{stem}{suffix}" if stem else ""


@dataclass
class RenameOutcome:
    """What happened to one file's rename.

    Attributes:
        path: Where the file is now.
        status: SUCCESS, or WARNING when the rename was skipped, failed, or
            ended under a different name than planned.
        message: Warning text, if any.
        parked: True while the file sits under a temp name awaiting
            :meth:`FileRenamer.finalize`.
        number: The number in the final filename when conflict resolution
            chose one other than the planned number, else None.
    """

    path: Path
    status: FileStatus = FileStatus.SUCCESS
    message: str | None = None
    parked: bool = False
    number: int | None = None

    @property
    def filename(self) -> str:
        return self.path.name


@dataclass
class _ParkedRename:
    temp_path: Path
    final_path: Path
    original_path: Path
    rule: NamingRule
    variables: dict[str, Any]
    outcome: RenameOutcome


@dataclass
class _SlotPattern:
    regex: re.Pattern
    used: set[int] = field(default_factory=set)

    def number_of(self, name: str) -> int | None:
        m = self.regex.fullmatch(name)
        return int(m.group(1)) if m else None


class FileRenamer:
    """Renames files for one apply batch.

    Usage:
        renamer = FileRenamer(pending=[...original paths to be renamed...])
        outcome = renamer.rename(path, "001 - Song.mp3", rule, variables)
        ...
        renamer.finalize()
    """

    def __init__(self, pending: Iterable[Path] = ()) -> None:
        """Initialize the renamer.

        Args:
            pending: Original paths of every file the batch intends to
                rename. Used to tell a temporary collision (the occupant will
                move) from a real one.
        """
        self._pending: set[Path] = {Path(p) for p in pending}
        self._parked: list[_ParkedRename] = []
        self._slots: dict[tuple[Path, str], _SlotPattern] = {}

    def rename(
        self,
        path: Path,
        new_filename: str,
        rule: NamingRule,
        variables: dict[str, Any],
    ) -> RenameOutcome:
        """Rename a file within its directory, resolving name conflicts.

        Never raises for filesystem problems: a failed rename comes back as
        a WARNING outcome with the file left at ``path``.
        """
        self._pending.discard(path)

        if not new_filename or new_filename == path.name:
            return RenameOutcome(path)

        dest = path.parent / new_filename
        if dest.exists() and not is_same_file(path, dest):
            if dest in self._pending:
                return self._park(path, dest, rule, variables)
            return self._resolve_conflict(path, dest, rule, variables)

        return self._do_rename(path, dest)

    def finalize(self) -> list[RenameOutcome]:
        """Move every parked file from its temp name to its final name.

        Returns:
            The outcomes that were updated (same objects handed out by
            :meth:`rename`).
        """
        updated: list[RenameOutcome] = []
        parked, self._parked = self._parked, []

        for item in parked:
            outcome = item.outcome
            outcome.parked = False
            temp = item.temp_path

            if not temp.exists():
                outcome.status = FileStatus.WARNING
                outcome.message = f"Temporary file {temp.name} disappeared before finalizing"
                updated.append(outcome)
                continue

            if not item.final_path.exists():
                final = self._do_rename(temp, item.final_path)
            else:
                final = self._resolve_conflict(temp, item.final_path, item.rule, item.variables)
                if final.path == temp:
                    final = self._restore_original(temp, item.original_path, final.message)

            outcome.path = final.path
            outcome.status = final.status
            outcome.message = final.message
            outcome.number = final.number
            updated.append(outcome)

        if updated:
            logger.info("Finalized %d temporary renames", len(updated))
        return updated

    # --- Private ---

    def _park(
        self, path: Path, dest: Path, rule: NamingRule, variables: dict[str, Any],
    ) -> RenameOutcome:
        temp = dest.with_name(f"{TEMP_RENAME_PREFIX}{dest.name}")
        if temp.exists():
            return self._resolve_conflict(path, dest, rule, variables)

        outcome = self._do_rename(path, temp)
        if outcome.status is not FileStatus.SUCCESS:
            return outcome

        outcome.parked = True
        self._parked.append(
            _ParkedRename(
                temp_path=temp,
                final_path=dest,
                original_path=path,
                rule=rule,
                variables=dict(variables),
                outcome=outcome,
            )
        )
        logger.debug("Parked %s as %s until %s is free", path.name, temp.name, dest.name)
        return outcome

    def _resolve_conflict(
        self,
        path: Path,
        dest: Path,
        rule: NamingRule,
        variables: dict[str, Any],
    ) -> RenameOutcome:
        if not rule.filename_is_numbered:
            message = f"'{dest.name}' already exists; kept filename '{path.name}'"
            logger.warning("Rename skipped: %s", message)
            return RenameOutcome(path, FileStatus.WARNING, message)

        suffix = dest.suffix
        slots = self._slots_for(dest.parent, rule.filename_template, variables, suffix)
        planned = variables.get("number")

        # Already in a slot of this pattern: that slot is the file's own
        current = slots.number_of(path.name) if path.parent == dest.parent else None
        if current is not None:
            logger.info("'%s' was taken; %s keeps its numbered name", dest.name, path.name)
            return RenameOutcome(path, number=current if current != planned else None)

        number = max(rule.start_number, 1)
        while True:
            if number not in slots.used:
                candidate_name = build_filename(
                    rule.filename_template, {**variables, "number": number}, suffix,
                )
                candidate = dest.parent / candidate_name
                if candidate_name and not candidate.exists():
                    break
                slots.used.add(number)
            number += 1

        outcome = self._do_rename(path, candidate)
        if outcome.status is FileStatus.SUCCESS:
            if number != planned:
                outcome.number = number
            logger.info(
                "'%s' was taken; renamed %s to '%s' instead",
                dest.name, path.name, candidate.name,
            )
        return outcome

    def _restore_original(self, temp: Path, original: Path, reason: str | None) -> RenameOutcome:
        """Move a parked file back to where it started when its target stays taken."""
        if not original.exists():
            restored = self._do_rename(temp, original)
            if restored.status is FileStatus.SUCCESS:
                restored.status = FileStatus.WARNING
                restored.message = reason or "Target name stayed taken; kept original filename"
            return restored
        message = f"{reason or 'Target name stayed taken'}; file left as '{temp.name}'"
        logger.warning("Rename not finalized: %s", message)
        return RenameOutcome(temp, FileStatus.WARNING, message)

    def _do_rename(self, src: Path, dst: Path) -> RenameOutcome:
        try:
            safe_rename(src, dst)
        except OSError as e:
            logger.error("Failed to rename %s -> %s: %s", src.name, dst.name, e)
            return RenameOutcome(
                src, FileStatus.WARNING, f"Metadata updated but file rename failed: {e}",
            )
        self._record_move(src, dst)
        logger.info("Renamed: %s -> %s", src.name, dst.name)
        return RenameOutcome(dst)

    def _slots_for(
        self, directory: Path, template: str, variables: dict[str, Any], suffix: str,
    ) -> _SlotPattern:
        """Numeric slots used in ``directory`` by names shaped like this template."""
        pattern = self._name_pattern(template, variables, suffix)
        key = (directory, pattern.pattern)
        slots = self._slots.get(key)
        if slots is None:
            slots = _SlotPattern(pattern)
            try:
                for entry in directory.iterdir():
                    number = slots.number_of(entry.name)
                    if number is not None:
                        slots.used.add(number)
            except OSError as e:
                logger.warning("Cannot list %s for numbering: %s", directory, e)
            self._slots[key] = slots
            logger.debug("Slots for %s in %s: %s", pattern.pattern, directory, sorted(slots.used))
        return slots

    def _name_pattern(self, template: str, variables: dict[str, Any], suffix: str) -> re.Pattern:
        marked = _NUMBER_PLACEHOLDER_RE.sub(_NUMBER_SENTINEL, template, count=1)
        name = sanitize_filename(render(marked, variables)) + suffix
        head, _, tail = name.partition(_NUMBER_SENTINEL)
        return re.compile(re.escape(head) + r"(\d+)" + re.escape(tail))

    def _record_move(self, src: Path, dst: Path) -> None:
        """Keep cached slot sets in step with renames made by this batch."""
        for (directory, _), slots in self._slots.items():
            if directory == src.parent:
                old = slots.number_of(src.name)
                if old is not None:
                    slots.used.discard(old)
            if directory == dst.parent:
                new = slots.number_of(dst.name)
                if new is not None:
                    slots.used.add(new)
