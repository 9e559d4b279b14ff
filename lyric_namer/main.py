"""Lyric Namer -- command-line entry point and configuration loading.

Commands:
    lyric-namer genres [FOLDER]                    List every genre in a folder
    lyric-namer clean-genres FOLDER GENRE...       Remove genres from all tracks
    lyric-namer rules [RULES] [--upgrade]          Show (or re-save) a rule set
    lyric-namer preview [RULES] [FOLDER]           Show what apply would change
    lyric-namer apply [RULES] [FOLDER]             Write tags and rename files
    lyric-namer scrape-candidates [FOLDER]         Tracks that still need scraping

FOLDER defaults to ``music_folder`` and RULES to ``rules_file`` from
config.yaml.
"""

from __future__ import annotations

import json
from pathlib import Path

import click
import yaml

from lyric_namer.utils.constants import (
    APP_NAME,
    APP_VERSION,
    DEFAULT_CONFIG_FILENAME,
    DEFAULT_PROGRESS_INTERVAL,
    MIN_GENRES_KEPT,
)
from lyric_namer.utils.errors import LyricNamerError
from lyric_namer.utils.logger import get_logger, setup_logger

_VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

# Directories that should never be used as a music folder (exact matches).
_DANGEROUS_PATHS = frozenset(
    {
        "/",
        "C:\\",
        "C:\\Windows",
        "C:\\Windows\\System32",
        "C:\\Program Files",
        "/usr",
        "/usr/bin",
        "/etc",
        "/var",
        "/System",
        "/Library",
        "/bin",
        "/sbin",
        "/lib",
    }
)

# Minimum number of path components below the filesystem root.
_MIN_PATH_DEPTH = 1


def _is_dangerous_path(raw: str) -> str | None:
    """Check if a music folder is too dangerous to rename files in.

    Args:
        raw: The folder as written in the config.

    Returns:
        A human-readable reason string if the path is dangerous, or None
        if it's safe.
    """
    normalized = raw.replace("\\", "/").rstrip("/").lower()
    for dangerous in _DANGEROUS_PATHS:
        if normalized == dangerous.replace("\\", "/").rstrip("/").lower():
            return f"is a known system directory ({raw})."

    # Windows drive letters are checked on the raw string so the check
    # behaves the same on every platform.
    if len(normalized) >= 2 and normalized[1] == ":":
        depth = len([p for p in normalized.split("/") if p]) - 1
    else:
        depth = len(Path(raw).expanduser().resolve().parts) - 1

    if depth < _MIN_PATH_DEPTH:
        return (
            f"is only {depth} level(s) deep from the filesystem root. "
            f"Pick the folder that actually holds your songs."
        )
    return None


def validate_config(config: dict) -> list[str]:
    """Validate configuration values and return a list of warnings.

    Invalid values are reset to their defaults in ``config``.

    Checks:
    - music_folder is not a system directory or a filesystem root
    - progress_interval and min_genres_kept are positive integers
    - log_level is a known logging level
    - rules_file looks like a JSON file

    Args:
        config: Configuration dictionary.

    Returns:
        List of human-readable warning strings. Empty if all checks pass.
    """
    warnings: list[str] = []

    music_folder = config.get("music_folder") or ""
    if music_folder:
        reason = _is_dangerous_path(str(music_folder))
        if reason:
            warnings.append(f"music_folder '{music_folder}' {reason}")

    for key, default in (
        ("progress_interval", DEFAULT_PROGRESS_INTERVAL),
        ("min_genres_kept", MIN_GENRES_KEPT),
    ):
        value = config.get(key, default)
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            warnings.append(
                f"{key} must be a positive integer, got {value!r}. "
                f"Using default ({default})."
            )
            config[key] = default

    log_level = config.get("log_level", "INFO")
    if not isinstance(log_level, str) or log_level.upper() not in _VALID_LOG_LEVELS:
        warnings.append(f"log_level {log_level!r} is not a logging level. Using INFO.")
        config["log_level"] = "INFO"

    rules_file = config.get("rules_file") or ""
    if rules_file and Path(str(rules_file)).suffix.lower() != ".json":
        warnings.append(
            f"rules_file '{rules_file}' does not end in .json. "
            f"Rule sets are stored as JSON."
        )

    return warnings


def load_config(config_path: Path | str | None = None) -> dict:
    """Load configuration from config.yaml.

    Without an explicit path, ``./config/config.yaml`` is tried first, then
    the ``config/`` folder next to the package.

    Returns:
        Configuration dictionary (suitable for ``AppConfig.from_dict()``).

    Raises:
        click.ClickException: If the file exists but is not valid YAML.
    """
    if config_path is not None:
        candidates = [Path(config_path)]
    else:
        candidates = [
            Path.cwd() / "config" / DEFAULT_CONFIG_FILENAME,
            Path(__file__).resolve().parent.parent / "config" / DEFAULT_CONFIG_FILENAME,
        ]

    for path in candidates:
        if not path.exists():
            continue
        try:
            with open(path, encoding="utf-8") as f:
                config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise click.ClickException(f"Invalid config file {path}: {e}") from e
        if not isinstance(config, dict):
            raise click.ClickException(f"Config file {path} must hold a mapping")
        return config

    return {}


# --- CLI helpers ---


def _resolve_folder(config, folder: str | None) -> Path:
    chosen = folder or config.music_folder
    if not chosen:
        raise click.UsageError("No FOLDER given and no music_folder in config.yaml")
    return Path(chosen).expanduser()


def _resolve_rules(config, rules: str | None) -> Path:
    chosen = rules or config.rules_file
    if not chosen:
        raise click.UsageError("No RULES file given and no rules_file in config.yaml")
    return Path(chosen).expanduser()


def _echo_progress(event) -> None:
    from lyric_namer.models.progress import ProgressPhase

    if event.phase is ProgressPhase.ERROR:
        click.secho(event.message, fg="red", err=True)
    elif event.phase is ProgressPhase.APPLYING:
        click.echo(f"  {event.message}  {event.details}".rstrip())
    elif event.phase.is_terminal():
        click.secho(event.message, fg="green")


def _echo_result(result) -> None:
    from lyric_namer.models.match_result import FileStatus

    colors = {FileStatus.SUCCESS: "green", FileStatus.WARNING: "yellow", FileStatus.FAILURE: "red"}
    for r in result.results:
        line = f"[{r.status.value}] {r.filename}"
        if r.new_filename and r.new_filename != r.filename:
            line += f" -> {r.new_filename}"
        if r.message:
            line += f"  ({r.message})"
        click.secho(line, fg=colors[r.status])
    click.echo(result.summary())


# --- CLI ---


@click.group()
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to config.yaml (default: ./config/config.yaml).",
)
@click.option("--log-level", default=None, help="Override log_level from config.yaml.")
@click.version_option(APP_VERSION, prog_name=APP_NAME)
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, log_level: str | None) -> None:
    """Rename and retag songs by phrases found in their lyrics."""
    from lyric_namer.models.config import AppConfig

    raw_config = load_config(config_path)
    if log_level:
        raw_config["log_level"] = log_level

    # Validate the raw dict first (mutates to fix invalid values)
    config_warnings = validate_config(raw_config)
    config = AppConfig.from_dict(raw_config)

    setup_logger(log_level=config.log_level, log_file=config.log_file)
    logger = get_logger("main")
    logger.debug("%s v%s starting", APP_NAME, APP_VERSION)
    for warning in config_warnings:
        logger.warning("Config: %s", warning)

    ctx.obj = config


@cli.command()
@click.argument("folder", required=False)
@click.pass_obj
def genres(config, folder: str | None) -> None:
    """List every genre used in FOLDER, alphabetically."""
    from lyric_namer.core.genre_cleaner import collect_genres
    from lyric_namer.core.scanner import FileScanner

    try:
        tracks = FileScanner().scan(_resolve_folder(config, folder))
    except LyricNamerError as e:
        raise click.ClickException(str(e)) from e

    found = collect_genres(tracks)
    for genre in found:
        click.echo(genre)
    click.echo(f"{len(found)} genres across {len(tracks)} tracks", err=True)


@cli.command("clean-genres")
@click.argument("folder", type=click.Path(file_okay=False, path_type=Path))
@click.argument("genre", nargs=-1, required=True)
@click.option("--dry-run", is_flag=True, default=False, help="Show the changes without writing tags.")
@click.pass_obj
def clean_genres(config, folder: Path, genre: tuple[str, ...], dry_run: bool) -> None:
    """Remove each GENRE from every track in FOLDER.

    A track never loses all of its genres: if every one of them was selected,
    it keeps its shortest few instead.
    """
    from lyric_namer.core.genre_cleaner import GenreCleaner
    from lyric_namer.core.scanner import FileScanner

    try:
        tracks = FileScanner().scan(folder)
    except LyricNamerError as e:
        raise click.ClickException(str(e)) from e

    cleaner = GenreCleaner(min_kept=config.min_genres_kept, dry_run=dry_run or config.dry_run)
    _echo_result(cleaner.apply(tracks, genre))


@cli.command()
@click.argument("rules", required=False)
@click.option("--upgrade", is_flag=True, default=False, help="Re-save the file in the current format.")
@click.pass_obj
def rules(config, rules: str | None, upgrade: bool) -> None:
    """Show the rules in a RULES file."""
    from lyric_namer.core.rule_store import load_rules, save_rules

    path = _resolve_rules(config, rules)
    try:
        loaded = load_rules(path)
    except LyricNamerError as e:
        raise click.ClickException(str(e)) from e

    for rule in loaded:
        state = " (inert)" if rule.is_inert else ""
        click.echo(f"{rule.id}: {rule.display_name}{state}")
        click.echo(f"    phrases:  {', '.join(rule.valid_searches) or '-'}")
        click.echo(f"    filename: {rule.filename_template or '-'}  (from {rule.start_number})")

    if upgrade:
        save_rules(path, loaded)
        click.echo(f"Saved {len(loaded)} rules to {path}")


@cli.command()
@click.argument("rules", required=False)
@click.argument("folder", required=False)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the preview as JSON.")
@click.pass_obj
def preview(config, rules: str | None, folder: str | None, as_json: bool) -> None:
    """Show what applying RULES to FOLDER would change."""
    from lyric_namer.core.naming_processor import NamingProcessor
    from lyric_namer.core.rule_store import load_rules

    try:
        loaded = load_rules(_resolve_rules(config, rules))
        processor = NamingProcessor(progress_interval=config.progress_interval)
        result = processor.preview_folder(loaded, _resolve_folder(config, folder))
    except LyricNamerError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(json.dumps(result.as_dict(), indent=2, ensure_ascii=False))
        return

    for m in result.matches:
        click.echo(f"{m.original_filename} -> {m.new_filename}")
        click.echo(f"    {m.new_artist} / {m.new_title} / {m.new_album}  [rule {m.rule_id}]")
    click.echo(f"{result.total_matches} files will be processed")


@cli.command()
@click.argument("rules", required=False)
@click.argument("folder", required=False)
@click.option("--dry-run", is_flag=True, default=False, help="Report changes without touching files.")
@click.option("--report/--no-report", default=None, help="Write _naming_report.{json,txt} to FOLDER.")
@click.option("--yes", "-y", is_flag=True, default=False, help="Do not ask for confirmation.")
@click.pass_obj
def apply(
    config, rules: str | None, folder: str | None, dry_run: bool, report: bool | None, yes: bool,
) -> None:
    """Apply RULES to FOLDER: write changed tags, then rename files."""
    from lyric_namer.core.naming_processor import NamingProcessor
    from lyric_namer.core.report_writer import ReportWriter
    from lyric_namer.core.rule_store import load_rules

    dry_run = dry_run or config.dry_run
    music_folder = _resolve_folder(config, folder)

    try:
        loaded = load_rules(_resolve_rules(config, rules))
    except LyricNamerError as e:
        raise click.ClickException(str(e)) from e

    if not dry_run and not yes:
        click.confirm(f"Rename and retag matching files in {music_folder}?", abort=True)

    processor = NamingProcessor(
        progress_callback=_echo_progress,
        progress_interval=config.progress_interval,
        dry_run=dry_run,
    )
    try:
        result = processor.apply_folder(loaded, music_folder)
    except LyricNamerError as e:
        raise click.ClickException(str(e)) from e

    _echo_result(result)

    write_report = config.write_report if report is None else report
    if write_report and not dry_run:
        ReportWriter.write_apply_report(music_folder, result)

    if result.failure_count:
        raise SystemExit(1)


@cli.command("scrape-candidates")
@click.argument("folder", required=False)
@click.pass_obj
def scrape_candidates(config, folder: str | None) -> None:
    """List tracks missing genre or lyrics that have a source URL."""
    from lyric_namer.core.scanner import FileScanner
    from lyric_namer.core.scrape_checks import get_source_url, tracks_needing_scrape

    try:
        tracks = FileScanner().scan(_resolve_folder(config, folder))
    except LyricNamerError as e:
        raise click.ClickException(str(e)) from e

    candidates = tracks_needing_scrape(tracks, config.source_host)
    for track in candidates:
        click.echo(f"{track.filename}\t{get_source_url(track, config.source_host)}")
    click.echo(f"{len(candidates)} of {len(tracks)} tracks need scraping", err=True)


def main() -> None:
    """Application entry point."""
    cli()


if __name__ == "__main__":
    main()
