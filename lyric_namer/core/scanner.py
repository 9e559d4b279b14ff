"""File scanner -- bulk metadata scan of a music folder."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Callable

from lyric_namer.models.track import Track
from lyric_namer.utils.errors import TagReadError
from lyric_namer.utils.file_utils import list_audio_files
from lyric_namer.utils.logger import get_logger

if TYPE_CHECKING:
    from lyric_namer.core.tag_editor import TagEditor

logger = get_logger("core.scanner")


class FileScanner:
    """Lists the audio files of a folder and reads their tags into Tracks.

    Usage:
        scanner = FileScanner()
        tracks = scanner.scan("/path/to/music")
    """

    def __init__(
        self,
        tag_editor: TagEditor | None = None,
        progress_callback: Callable[[int, int, str], None] | None = None,
    ) -> None:
        """Initialize the scanner.

        Args:
            tag_editor: Metadata store used to read tags.
            progress_callback: Optional callback(current, total, filename)
                called for each file read.
        """
        if tag_editor is None:
            from lyric_namer.core.tag_editor import TagEditor
            tag_editor = TagEditor()
        self._tag_editor = tag_editor
        self._progress_callback = progress_callback

    def scan(self, folder: Path | str) -> list[Track]:
        """Read every audio file directly inside ``folder``.

        A file whose tags cannot be read is still returned, with
        ``error_message`` set and its metadata left unknown.

        Args:
            folder: Folder to scan (not recursive).

        Returns:
            One Track per audio file, sorted by path.

        Raises:
            ScanError: If the folder is missing or unreadable.
        """
        folder = Path(folder)
        logger.info("Scanning folder: %s", folder)

        audio_files = list_audio_files(folder)
        total = len(audio_files)
        logger.info("Found %d audio files", total)

        tracks: list[Track] = []
        failed = 0
        for idx, file_path in enumerate(audio_files, start=1):
            track = Track(file_path=file_path.resolve())
            try:
                self._tag_editor.read_tags(track)
            except TagReadError as e:
                logger.error("%s", e)
                track.error_message = e.reason
                failed += 1
            tracks.append(track)

            if self._progress_callback:
                self._progress_callback(idx, total, file_path.name)

        logger.info("Scan complete: %d tracks read, %d with errors", len(tracks), failed)
        return tracks
