"""Rule store -- saves and loads naming rule sets as versioned JSON.

File shape::

    {
      "version": "1.0",
      "timestamp": "2025-01-01T12:00:00+00:00",
      "rulesCount": 2,
      "rules": [{"id": ..., "lyricSearches": [...], "albumTemplate": ..., ...}]
    }

Rules saved in the legacy single-``lyricSearch`` shape, and files holding a
bare list of rules, are accepted and upconverted on load.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

from lyric_namer.models.naming_rule import NamingRule, parse_rule_record, upconvert
from lyric_namer.utils.constants import RULES_FORMAT_VERSION
from lyric_namer.utils.errors import RuleStoreError
from lyric_namer.utils.logger import get_logger

logger = get_logger("core.rule_store")


def rules_to_document(rules: list[NamingRule]) -> dict:
    """Build the versioned JSON document for a rule set."""
    return {
        "version": RULES_FORMAT_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "rulesCount": len(rules),
        "rules": [rule.to_dict() for rule in rules],
    }


def rules_from_document(data: dict | list) -> list[NamingRule]:
    """Parse a rule-set document (versioned or bare list) into rules.

    Raises:
        RuleStoreError: If the document or any rule record is malformed.
    """
    if isinstance(data, list):
        records = data
    elif isinstance(data, dict) and isinstance(data.get("rules"), list):
        records = data["rules"]
        version = data.get("version")
        if version and str(version) != RULES_FORMAT_VERSION:
            logger.warning(
                "Rule file version %s differs from %s; loading anyway",
                version, RULES_FORMAT_VERSION,
            )
    else:
        raise RuleStoreError("Rule file has no 'rules' list")

    rules: list[NamingRule] = []
    seen_ids: set = set()
    for position, record in enumerate(records, start=1):
        try:
            rule = upconvert(parse_rule_record(record))
        except ValueError as e:
            raise RuleStoreError(f"Rule #{position} is invalid: {e}") from e
        if rule.id in seen_ids:
            raise RuleStoreError(f"Rule #{position} reuses id {rule.id!r}")
        seen_ids.add(rule.id)
        rules.append(rule)
    return rules


def save_rules(path: Path | str, rules: list[NamingRule]) -> Path:
    """Write a rule set to ``path`` as pretty-printed UTF-8 JSON.

    Returns:
        The path written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(rules_to_document(rules), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    logger.info("Saved %d naming rules to %s", len(rules), path)
    return path


def load_rules(path: Path | str) -> list[NamingRule]:
    """Load a rule set from ``path``.

    Raises:
        RuleStoreError: If the file is missing, not JSON, or malformed.
    """
    path = Path(path)
    if not path.exists():
        raise RuleStoreError(f"File not found: {path}")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise RuleStoreError(f"Cannot read rule file {path}: {e}") from e

    rules = rules_from_document(data)
    logger.info("Loaded %d naming rules from %s", len(rules), path)
    return rules
