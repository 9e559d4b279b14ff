"""Path helpers and safe file operations for Lyric Namer."""

from __future__ import annotations

from pathlib import Path

from lyric_namer.utils.constants import SUPPORTED_EXTENSIONS
from lyric_namer.utils.errors import ScanError
from lyric_namer.utils.logger import get_logger

logger = get_logger("utils.file_utils")

# Windows reserved device names that cannot be used as filenames.
_WINDOWS_RESERVED_NAMES = frozenset(
    {"CON", "PRN", "AUX", "NUL"}
    | {f"COM{i}" for i in range(1, 10)}
    | {f"LPT{i}" for i in range(1, 10)}
)

# Maximum length for a single path component (filename or directory name).
# NTFS allows 255 characters per component; leave room for the extension
# and a "Temp_" prefix.
MAX_COMPONENT_LENGTH = 240


def is_audio_file(path: Path) -> bool:
    """Check if a file has a supported audio extension.

    Args:
        path: Path to check.

    Returns:
        True if the file extension is a supported audio format.
    """
    return path.suffix.lower() in SUPPORTED_EXTENSIONS


def list_audio_files(folder: Path | str) -> list[Path]:
    """List the audio files directly inside a folder (not recursive).

    Args:
        folder: Directory to list.

    Returns:
        Sorted list of audio file paths.

    Raises:
        ScanError: If the folder is missing or cannot be listed.
    """
    folder = Path(folder)
    if not folder.exists():
        raise ScanError(folder, "directory not found")
    if not folder.is_dir():
        raise ScanError(folder, "not a directory")
    try:
        entries = sorted(folder.iterdir())
    except OSError as e:
        raise ScanError(folder, str(e)) from e
    return [p for p in entries if p.is_file() and is_audio_file(p)]


def sanitize_filename(name: str) -> str:
    """Remove or replace characters that are invalid in filenames.

    Also guards against Windows reserved device names (CON, PRN, AUX, NUL,
    COM1-COM9, LPT1-LPT9) and enforces a maximum component length.  An empty
    input stays empty so callers can fall back to the original name.

    Args:
        name: Raw filename string (without extension).

    Returns:
        Sanitized filename safe for all major operating systems.
    """
    invalid_chars = '<>:"/\\|?*'
    sanitized = name
    for char in invalid_chars:
        sanitized = sanitized.replace(char, "_")

    # Control characters (newlines from lyrics-derived titles, tabs)
    sanitized = "".join(ch for ch in sanitized if ch.isprintable())

    # Leading/trailing dots and spaces break on Windows
    sanitized = sanitized.strip(". ")

    while "__" in sanitized:
        sanitized = sanitized.replace("__", "_")

    stem = sanitized.split(".")[0].upper()
    if stem in _WINDOWS_RESERVED_NAMES:
        sanitized = f"_{sanitized}"

    if len(sanitized) > MAX_COMPONENT_LENGTH:
        sanitized = sanitized[:MAX_COMPONENT_LENGTH].rstrip(". ")

    return sanitized


def safe_rename(src: Path, dst: Path) -> Path:
    """Rename a file without ever overwriting an existing destination.

    ``Path.rename`` silently replaces the target on POSIX, so the
    destination is checked first.

    Args:
        src: Existing file path.
        dst: New file path.

    Returns:
        The destination path.

    Raises:
        FileNotFoundError: If source does not exist.
        FileExistsError: If the destination is already taken.
        OSError: If the rename itself fails.
    """
    if not src.exists():
        raise FileNotFoundError(f"Source file not found: {src}")
    if dst.exists() and not is_same_file(src, dst):
        raise FileExistsError(f"Destination already exists: {dst}")

    src.rename(dst)
    logger.debug("Renamed: %s -> %s", src.name, dst.name)
    return dst


def is_same_file(a: Path, b: Path) -> bool:
    """True when two paths point at the same file (case-only renames)."""
    try:
        return a.samefile(b)
    except OSError:
        return False
