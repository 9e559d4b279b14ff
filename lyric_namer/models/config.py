"""Typed configuration model for Lyric Namer.

All configuration values have explicit types, defaults, and documentation.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from lyric_namer.utils.constants import (
    DEFAULT_PROGRESS_INTERVAL,
    DEFAULT_RULES_FILENAME,
    DEFAULT_SOURCE_HOST,
    MIN_GENRES_KEPT,
)


@dataclass
class AppConfig:
    """Strongly-typed configuration for the Lyric Namer application.

    Attributes:
        music_folder: Default folder of audio files to operate on.
        rules_file: Default naming-rules JSON file.
        min_genres_kept: How many genres cleanup keeps when a removal would
            otherwise leave a track with none.
        progress_interval: Emit an "applying" progress event every N files.
        source_host: Host a track's source URL must contain for it to be
            considered scrapeable.
        write_report: Write ``_naming_report.{json,txt}`` after apply.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        log_file: Path to log file (None = console only).
        dry_run: If True, apply only previews and never touches files.
    """

    # --- Input ---
    music_folder: str = ""
    rules_file: str = DEFAULT_RULES_FILENAME

    # --- Rules Engine ---
    min_genres_kept: int = MIN_GENRES_KEPT
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL

    # --- Scraping ---
    source_host: str = DEFAULT_SOURCE_HOST

    # --- Output ---
    write_report: bool = True

    # --- Logging ---
    log_level: str = "INFO"
    log_file: str | None = None

    # --- Safety ---
    dry_run: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> AppConfig:
        """Create an AppConfig from a raw dictionary (e.g., from YAML).

        Unknown keys are silently ignored so YAML files with extra keys
        don't break older code.

        Args:
            data: Dictionary of configuration values.

        Returns:
            Populated AppConfig instance.
        """
        known_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in known_fields and v is not None}
        return cls(**filtered)

    def to_dict(self) -> dict:
        """Serialize the config to a dictionary."""
        from dataclasses import asdict
        return asdict(self)

    @property
    def music_folder_resolved(self) -> Path | None:
        """Return music_folder as a resolved Path, or None if not set."""
        if not self.music_folder:
            return None
        return Path(self.music_folder).expanduser().resolve()
