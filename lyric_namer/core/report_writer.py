"""Apply report generation and loading."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

from lyric_namer.models.match_result import ApplyResult, FileStatus
from lyric_namer.utils.constants import (
    REPORT_JSON_FILENAME,
    REPORT_TITLE,
    REPORT_TXT_FILENAME,
)
from lyric_namer.utils.logger import get_logger

logger = get_logger("core.report_writer")


class ReportWriter:
    """Generates and loads JSON/TXT reports for a naming apply run."""

    @staticmethod
    def write_apply_report(folder: Path, result: ApplyResult) -> tuple[Path, Path]:
        """Write a report of what an apply run did to each file.

        Generates two files in ``folder``:
        - _naming_report.json  -- machine-readable, one record per file
        - _naming_report.txt   -- human-readable summary

        A report file that cannot be written is logged and skipped.

        Args:
            folder: Folder the apply run operated on.
            result: The ApplyResult returned by ``NamingProcessor.apply``.

        Returns:
            (json_path, txt_path)
        """
        folder = Path(folder)
        folder.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

        warnings = [r for r in result.results if r.status is FileStatus.WARNING]
        failures = [r for r in result.results if r.status is FileStatus.FAILURE]

        # --- JSON report ---
        report_data = {
            "generated_at": timestamp,
            "cancelled": result.cancelled,
            "stats": {
                "total": len(result.results),
                "updated": result.updated_count,
                "success": result.success_count,
                "warnings": result.warning_count,
                "failures": result.failure_count,
            },
            "files": [r.as_dict() for r in result.results],
        }

        json_path = folder / REPORT_JSON_FILENAME
        try:
            json_path.write_text(
                json.dumps(report_data, indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
            logger.info("Apply report (JSON) written to: %s", json_path)
        except OSError as e:
            logger.error("Failed to write JSON report: %s", e)

        # --- Text report ---
        lines = [
            REPORT_TITLE,
            f"Generated: {timestamp}",
            "",
            "=== Summary ===",
            f"  Files processed:  {len(result.results)}",
            f"  Updated:          {result.updated_count}",
            f"  Warnings:         {result.warning_count}",
            f"  Failures:         {result.failure_count}",
        ]
        if result.cancelled:
            lines.append("  Run was cancelled before all files were processed.")
        lines.append("")

        renamed = [
            r for r in result.results
            if r.succeeded and r.new_filename and r.new_filename != r.filename
        ]
        if renamed:
            lines.append(f"=== Renamed ({len(renamed)}) ===")
            for r in renamed:
                lines.append(f"  {r.filename} -> {r.new_filename}")
            lines.append("")

        if warnings:
            lines.append(f"=== Warnings ({len(warnings)}) ===")
            lines.append("  Metadata was written, but the file kept or got a different name.")
            lines.append("")
            for r in warnings:
                lines.append(f"  File: {r.filename}")
                lines.append(f"    {r.message}")
                lines.append("")

        if failures:
            lines.append(f"=== Failures ({len(failures)}) ===")
            lines.append("  These files were left untouched.")
            lines.append("")
            for r in failures:
                lines.append(f"  File: {r.filename}")
                lines.append(f"    Error: {r.message}")
                lines.append("")

        txt_path = folder / REPORT_TXT_FILENAME
        try:
            txt_path.write_text("\n".join(lines), encoding="utf-8")
            logger.info("Apply report (TXT) written to: %s", txt_path)
        except OSError as e:
            logger.error("Failed to write TXT report: %s", e)

        return json_path, txt_path

    @staticmethod
    def load_apply_report(folder: Path) -> dict | None:
        """Load the last apply report from ``folder``.

        Returns:
            Parsed report data dict, or None if no readable report exists.
        """
        json_path = Path(folder) / REPORT_JSON_FILENAME
        if not json_path.exists():
            logger.debug("No apply report found at %s", json_path)
            return None

        try:
            data = json.loads(json_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error("Failed to load apply report: %s", e)
            return None

        logger.info(
            "Loaded apply report: %d files (from %s)",
            len(data.get("files", [])),
            data.get("generated_at", "?"),
        )
        return data
