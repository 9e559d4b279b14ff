"""Naming processor -- orchestrates the lyric-rule preview and apply pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from lyric_namer.core.file_renamer import FileRenamer, RenameOutcome, build_filename
from lyric_namer.core.numbering import NumberingResolver
from lyric_namer.core.rule_matcher import RuleMatcher
from lyric_namer.core.scanner import FileScanner
from lyric_namer.core.template_renderer import render
from lyric_namer.models.match_result import (
    ApplyResult,
    FileResult,
    FileStatus,
    MatchEntry,
    NamingMatch,
    NamingPreview,
)
from lyric_namer.models.naming_rule import NamingRule
from lyric_namer.models.progress import ProgressCallback, ProgressEvent, ProgressPhase
from lyric_namer.models.track import Track
from lyric_namer.utils.constants import DEFAULT_PROGRESS_INTERVAL
from lyric_namer.utils.errors import TagReadError
from lyric_namer.utils.logger import get_logger

if TYPE_CHECKING:
    from lyric_namer.core.tag_editor import TagEditor

logger = get_logger("core.naming_processor")


class NamingProcessor:
    """Runs naming rules over a track set.

    Pipeline:
    1. Match: each track is claimed by the first rule whose phrases occur
       in its lyrics.
    2. Number: matches are grouped per rule and album, then numbered.
    3. Render: artist, title, album and filename templates are filled in.
    4. Apply (apply only): per file, write changed tags, then rename.

    ``preview`` and ``apply`` share steps 1-3, so an apply straight after a
    preview over the same input produces the same matches and numbers.
    Files are processed one at a time in order; a rename's conflict check
    sees the effects of every earlier rename in the batch.
    """

    def __init__(
        self,
        tag_editor: TagEditor | None = None,
        progress_callback: ProgressCallback | None = None,
        progress_interval: int = DEFAULT_PROGRESS_INTERVAL,
        dry_run: bool = False,
    ) -> None:
        """Initialize the processor.

        Args:
            tag_editor: Metadata store for reading and writing tags.
            progress_callback: Optional observer for progress events.
            progress_interval: Emit an "applying" event every N files.
            dry_run: If True, ``apply`` computes and reports the changes but
                writes no tags and renames no files.
        """
        if tag_editor is None:
            from lyric_namer.core.tag_editor import TagEditor
            tag_editor = TagEditor()
        self._tag_editor = tag_editor
        self._matcher = RuleMatcher()
        self._resolver = NumberingResolver()
        self._progress_callback = progress_callback
        self._progress_interval = max(1, progress_interval)
        self._dry_run = dry_run
        self._cancelled = False

    def cancel(self) -> None:
        """Stop the running apply after the current file."""
        self._cancelled = True
        logger.info("Naming apply cancelled")

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    # --- Public pipeline ---

    def preview(self, rules: list[NamingRule], tracks: list[Track]) -> NamingPreview:
        """Compute what applying the rules would do, without touching files.

        Args:
            rules: Rules in priority order.
            tracks: Tracks to match.

        Returns:
            NamingPreview with one NamingMatch per matched track.
        """
        try:
            self._emit(ProgressPhase.STARTING, "Initializing preview analysis...", 0, len(rules))
            preview = self._build_preview(rules, tracks)
            self._emit(
                ProgressPhase.COMPLETE,
                f"Analysis complete! Found {preview.total_matches} total matches",
                len(rules), len(rules),
                f"{preview.total_matches} files will be processed",
            )
            return preview
        except Exception as e:
            self._emit(ProgressPhase.ERROR, f"Error during analysis: {e}", details=repr(e))
            raise

    def apply(self, rules: list[NamingRule], tracks: list[Track]) -> ApplyResult:
        """Apply the rules: write changed tags, then rename files.

        Per-file problems (missing file, unreadable or unwritable tags,
        failed rename) are recorded in the result and never stop the batch.
        Nothing is rolled back.  Matched tracks are updated in place with
        the values that were applied.

        Args:
            rules: Rules in priority order.
            tracks: Tracks to match.

        Returns:
            ApplyResult with one FileResult per processed match.
        """
        self._cancelled = False
        try:
            self._emit(ProgressPhase.STARTING, "Initializing file updates...", 0, len(rules))
            preview = self._build_preview(rules, tracks)
            result = self._apply_preview(preview, rules, tracks)
            self._emit(
                ProgressPhase.COMPLETE,
                f"File updates complete! Updated {result.updated_count} files",
                len(rules), len(rules),
                result.summary(),
            )
            return result
        except Exception as e:
            self._emit(ProgressPhase.ERROR, f"Error during file updates: {e}", details=repr(e))
            raise

    def preview_folder(self, rules: list[NamingRule], folder: Path | str) -> NamingPreview:
        """Scan a folder, then preview. A folder that cannot be read is fatal."""
        return self.preview(rules, self._scan(folder))

    def apply_folder(self, rules: list[NamingRule], folder: Path | str) -> ApplyResult:
        """Scan a folder, then apply. A folder that cannot be read is fatal."""
        return self.apply(rules, self._scan(folder))

    # --- Private: preview ---

    def _scan(self, folder: Path | str) -> list[Track]:
        try:
            return FileScanner(self._tag_editor).scan(folder)
        except Exception as e:
            self._emit(ProgressPhase.ERROR, f"Cannot read folder: {e}", details=repr(e))
            raise

    def _build_preview(self, rules: list[NamingRule], tracks: list[Track]) -> NamingPreview:
        def on_rule(index: int, total: int, rule: NamingRule) -> None:
            self._emit(
                ProgressPhase.PROCESSING,
                f"Processing rule {index}: {rule.display_name}",
                index, total,
            )

        entries = self._matcher.collect_matches(rules, tracks, on_rule=on_rule)
        numbered = self._resolver.resolve_all(entries)
        preview = NamingPreview(matches=[self._render_match(e) for e in numbered])
        logger.info("Preview: %d matches", preview.total_matches)
        return preview

    def _render_match(self, entry: MatchEntry) -> NamingMatch:
        track, rule, variables = entry.track, entry.rule, entry.variables

        new_filename = build_filename(rule.filename_template, variables, track.file_path.suffix)
        return NamingMatch(
            original_path=track.file_path,
            original_filename=track.filename,
            new_filename=new_filename or track.filename,
            original_artist=track.artist,
            original_title=track.title,
            original_album=track.album,
            new_artist=render(rule.artist_template, variables) or (track.artist or ""),
            new_title=render(rule.song_template, variables) or (track.title or ""),
            new_album=render(rule.album_template, variables) or (track.album or ""),
            rule_id=rule.id,
            variables=dict(variables),
        )

    # --- Private: apply ---

    def _apply_preview(
        self,
        preview: NamingPreview,
        rules: list[NamingRule],
        tracks: list[Track],
    ) -> ApplyResult:
        rules_by_id = {rule.id: rule for rule in rules}
        tracks_by_path: dict[Path, Track] = {}
        for track in tracks:
            tracks_by_path.setdefault(track.file_path, track)
        matches = preview.matches
        total = len(matches)

        renamer = FileRenamer(pending=[m.original_path for m in matches if m.renames_file])
        result = ApplyResult()
        parked: list[tuple[FileResult, Track, RenameOutcome]] = []

        self._emit(ProgressPhase.APPLYING, f"Updating {total} files...", 0, total)

        for index, match in enumerate(matches):
            if self._cancelled:
                logger.info("Apply stopped after %d of %d files", index, total)
                result.cancelled = True
                break

            if index % self._progress_interval == 0:
                self._emit(
                    ProgressPhase.APPLYING,
                    f"Updating files: {index + 1}/{total}",
                    index + 1, total,
                    f"Current: {match.original_filename}",
                )

            track = tracks_by_path[match.original_path]
            file_result, outcome = self._apply_one(
                match, rules_by_id[match.rule_id], track, renamer,
            )
            result.results.append(file_result)
            if outcome is not None and outcome.parked:
                parked.append((file_result, track, outcome))

        renamer.finalize()
        for file_result, track, outcome in parked:
            track.file_path = outcome.path
            file_result.new_filename = outcome.filename
            if outcome.status is FileStatus.WARNING:
                file_result.status = FileStatus.WARNING
                file_result.message = outcome.message
            self._sync_track_number(track, outcome, file_result)

        logger.info("Apply finished: %s", result.summary())
        return result

    def _apply_one(
        self,
        match: NamingMatch,
        rule: NamingRule,
        track: Track,
        renamer: FileRenamer,
    ) -> tuple[FileResult, RenameOutcome | None]:
        path = match.original_path
        name = match.original_filename

        if not path.exists():
            logger.error("File not found: %s", path)
            return FileResult(name, FileStatus.FAILURE, "File not found"), None

        try:
            current = self._tag_editor.read_tags(Track(file_path=path))
        except TagReadError as e:
            logger.error("%s", e)
            return FileResult(
                name, FileStatus.FAILURE,
                "Cannot read metadata - file may be corrupted or not a valid audio file",
            ), None

        changes = self._merge_changes(match, current)

        if self._dry_run:
            logger.info("[DRY RUN] Would update %s: %s -> %s", name, changes, match.new_filename)
            return FileResult(
                name, FileStatus.SUCCESS, "Dry run: no changes written",
                new_filename=match.new_filename, changes=changes,
            ), None

        if changes and not self._tag_editor.write_tags(current, fields=list(changes)):
            return FileResult(
                name, FileStatus.FAILURE,
                "Cannot write metadata - file may be read-only or corrupted",
            ), None

        for field_name, value in changes.items():
            setattr(track, field_name, value)

        if not match.renames_file:
            return FileResult(name, FileStatus.SUCCESS, new_filename=name, changes=changes), None

        outcome = renamer.rename(path, match.new_filename, rule, match.variables)
        track.file_path = outcome.path
        file_result = FileResult(
            name, outcome.status, outcome.message,
            new_filename=outcome.filename, changes=changes,
        )
        if not outcome.parked:
            self._sync_track_number(track, outcome, file_result)
        return file_result, outcome

    def _sync_track_number(
        self, track: Track, outcome: RenameOutcome, file_result: FileResult,
    ) -> None:
        """Write back the number a name conflict put into the filename."""
        number = outcome.number
        if number is None or track.track_number == number:
            return

        previous = track.track_number
        track.track_number = number
        if self._tag_editor.write_tags(track, fields=["track_number"]):
            file_result.changes["track_number"] = number
            logger.info("Track number of %s set to %d to match its filename", track.filename, number)
            return

        track.track_number = previous
        file_result.status = FileStatus.WARNING
        file_result.message = (
            f"Renamed to '{outcome.filename}' but could not update its track number to {number}"
        )

    def _merge_changes(self, match: NamingMatch, current: Track) -> dict:
        """Copy the fields that actually change onto ``current``.

        Returns:
            Mapping of Track field name -> new value, only for changed fields.
        """
        changes: dict = {}
        for field_name, new, old in (
            ("artist", match.new_artist, match.original_artist),
            ("title", match.new_title, match.original_title),
            ("album", match.new_album, match.original_album),
        ):
            if new and new != (old or ""):
                changes[field_name] = new

        number = match.number
        if number and current.track_number != number:
            changes["track_number"] = number

        for field_name, value in changes.items():
            setattr(current, field_name, value)
        return changes

    def _emit(
        self,
        phase: ProgressPhase,
        message: str,
        current: int = 0,
        total: int = 0,
        details: str = "",
    ) -> None:
        if self._progress_callback:
            self._progress_callback(ProgressEvent(phase, message, current, total, details))
