"""Genre cleanup -- removes selected genres without leaving tracks genre-less."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from lyric_namer.models.match_result import ApplyResult, FileResult, FileStatus
from lyric_namer.models.track import Track
from lyric_namer.utils.constants import GENRE_JOINER, MIN_GENRES_KEPT
from lyric_namer.utils.logger import get_logger

if TYPE_CHECKING:
    from lyric_namer.core.tag_editor import TagEditor

logger = get_logger("core.genre_cleaner")


def clean_genre(
    current: list[str],
    to_remove: Iterable[str],
    min_kept: int = MIN_GENRES_KEPT,
) -> list[str]:
    """Remove genres from one track's genre list.

    The remaining genres keep their original order.  When every genre would
    be removed, the track keeps its whole list if it has ``min_kept`` or
    fewer genres, otherwise its ``min_kept`` shortest genres (shortest
    first, ties in original order).

    Args:
        current: The track's genres.
        to_remove: Genres selected for removal.
        min_kept: Floor applied when the removal would empty the list.

    Returns:
        The new genre list.
    """
    removal = set(to_remove)
    remaining = [g for g in current if g not in removal]
    if remaining:
        return remaining

    if len(current) <= min_kept:
        return list(current)
    return sorted(current, key=len)[:min_kept]


def collect_genres(tracks: Iterable[Track]) -> list[str]:
    """Alphabetically sorted set of every genre used across the tracks."""
    genres: set[str] = set()
    for track in tracks:
        genres.update(track.genre_list)
    return sorted(genres)


class GenreCleaner:
    """Applies :func:`clean_genre` to a track set and writes the results."""

    def __init__(
        self,
        tag_editor: TagEditor | None = None,
        min_kept: int = MIN_GENRES_KEPT,
        dry_run: bool = False,
    ) -> None:
        """Initialize the cleaner.

        Args:
            tag_editor: Metadata store used to write the new genre tag.
            min_kept: Genre floor passed to :func:`clean_genre`.
            dry_run: If True, compute and log changes without writing.
        """
        if tag_editor is None:
            from lyric_namer.core.tag_editor import TagEditor
            tag_editor = TagEditor()
        self._tag_editor = tag_editor
        self._min_kept = min_kept
        self._dry_run = dry_run

    def plan(
        self, tracks: Iterable[Track], to_remove: Iterable[str]
    ) -> list[tuple[Track, str]]:
        """Compute the new genre string for every track that would change.

        Returns:
            (track, new genre string) pairs in track order.
        """
        removal = set(to_remove)
        changes: list[tuple[Track, str]] = []
        for track in tracks:
            current = track.genre_list
            if not current:
                continue
            new_list = clean_genre(current, removal, self._min_kept)
            if new_list != current:
                changes.append((track, GENRE_JOINER.join(new_list)))
        return changes

    def apply(self, tracks: list[Track], to_remove: Iterable[str]) -> ApplyResult:
        """Remove genres from every track and write the genre tag.

        Tracks whose genre does not change are not touched.  A failed write
        is recorded for that file and processing continues.

        Returns:
            ApplyResult with one entry per changed track.
        """
        result = ApplyResult()
        changes = self.plan(tracks, to_remove)
        logger.info("Genre cleanup: %d of %d tracks change", len(changes), len(tracks))

        for track, new_genre in changes:
            if self._dry_run:
                logger.info("[DRY RUN] Would set genre of %s to: %s", track.filename, new_genre)
                result.results.append(
                    FileResult(track.filename, FileStatus.SUCCESS, changes={"genre": new_genre})
                )
                continue

            old_genre = track.genre
            track.genre = new_genre
            if self._tag_editor.write_tags(track, fields=("genre",)):
                result.results.append(
                    FileResult(track.filename, FileStatus.SUCCESS, changes={"genre": new_genre})
                )
            else:
                track.genre = old_genre
                result.results.append(
                    FileResult(
                        track.filename,
                        FileStatus.FAILURE,
                        message="Cannot write genre tag",
                    )
                )

        logger.info("Genre cleanup finished: %s", result.summary())
        return result
