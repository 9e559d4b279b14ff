"""Tests for rule-set persistence -- versioned JSON, legacy upconversion."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from lyric_namer.core.rule_store import load_rules, rules_from_document, save_rules
from lyric_namer.models.naming_rule import LegacyRuleRecord, NamingRule, parse_rule_record
from lyric_namer.utils.errors import RuleStoreError


def _write(path: Path, data) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestSaveRules:
    def test_versioned_document(self, tmp_path: Path):
        rules = [
            NamingRule(
                id=1700000000000,
                lyric_searches=["neon rain", "neon reign"],
                artist_template="Night Drive",
                song_template="{title}",
                album_template="Neon Rain",
                filename_template="{number:02d} - {title}",
                start_number=3,
            ),
        ]

        path = save_rules(tmp_path / "rules" / "naming-rules.json", rules)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["version"] == "1.0"
        assert data["rulesCount"] == 1
        assert "timestamp" in data
        assert data["rules"][0] == {
            "id": 1700000000000,
            "lyricSearches": ["neon rain", "neon reign"],
            "albumTemplate": "Neon Rain",
            "songTemplate": "{title}",
            "artistTemplate": "Night Drive",
            "filenameTemplate": "{number:02d} - {title}",
            "startNumber": 3,
        }
        assert load_rules(path) == rules


class TestLoadRules:
    def test_legacy_single_phrase_upconverted(self, tmp_path: Path):
        path = _write(tmp_path / "r.json", {
            "version": "1.0",
            "rules": [{"id": "old", "lyricSearch": "moon", "startNumber": "4"}],
        })

        (rule,) = load_rules(path)

        assert rule.lyric_searches == ["moon"]
        assert rule.start_number == 4
        assert rule.to_dict()["lyricSearches"] == ["moon"]

    def test_bare_list_accepted(self, tmp_path: Path):
        path = _write(tmp_path / "r.json", [
            {"id": 1, "lyricSearches": ["a"]},
            {"id": 2, "lyricSearches": ["b"], "startNumber": 0},
        ])

        rules = load_rules(path)

        assert [r.id for r in rules] == [1, 2]
        assert rules[1].start_number == 1

    def test_newer_version_still_loads(self, tmp_path: Path):
        path = _write(tmp_path / "r.json", {"version": "2.0", "rules": [{"id": 1}]})
        (rule,) = load_rules(path)
        assert rule.is_inert

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(RuleStoreError, match="File not found"):
            load_rules(tmp_path / "none.json")

    def test_invalid_json(self, tmp_path: Path):
        path = tmp_path / "r.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(RuleStoreError):
            load_rules(path)

    def test_document_without_rules(self):
        with pytest.raises(RuleStoreError):
            rules_from_document({"version": "1.0"})

    def test_rule_without_id(self):
        with pytest.raises(RuleStoreError, match="Rule #2"):
            rules_from_document([{"id": 1}, {"lyricSearches": ["x"]}])

    def test_duplicate_ids(self):
        with pytest.raises(RuleStoreError, match="reuses id"):
            rules_from_document([{"id": 1}, {"id": 1}])


class TestParseRuleRecord:
    def test_legacy_shape_tagged(self):
        record = parse_rule_record({"id": 1, "lyricSearch": "moon"})
        assert isinstance(record, LegacyRuleRecord)

    def test_list_wins_over_legacy_field(self):
        record = parse_rule_record({"id": 1, "lyricSearch": "old", "lyricSearches": ["new"]})
        assert isinstance(record, NamingRule)
        assert record.lyric_searches == ["new"]

    def test_not_a_mapping(self):
        with pytest.raises(ValueError):
            parse_rule_record(["id", 1])
