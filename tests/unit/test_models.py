# tests/unit/test_models.py
"""Tests for the shared review data model."""

import pytest
from pydantic import ValidationError

from checkpoint_review.pipeline.models import (
    Checkpoint,
    CheckpointResult,
    Priority,
    ReviewInput,
    Artifact,
    Violation,
)


class TestViolation:
    """Violation parsing from engine output."""

    def test_defaults(self):
        v = Violation()
        assert v.category == "Uncategorized"
        assert v.severity == "medium"
        assert v.confidence == 0.5
        assert v.file is None and v.line is None

    def test_field_name_variations(self):
        """description/fix/file_path are accepted as issue/fix_guidance/file."""
        v = Violation.model_validate(
            {
                "description": "SOQL in loop",
                "fix": "Bulkify the query",
                "file_path": "classes/Foo.cls",
                "severity": "HIGH",
            }
        )
        assert v.issue == "SOQL in loop"
        assert v.fix_guidance == "Bulkify the query"
        assert v.file == "classes/Foo.cls"
        assert v.severity == "high"

    def test_explicit_issue_wins_over_alias(self):
        v = Violation.model_validate({"issue": "primary", "message": "secondary"})
        assert v.issue == "primary"

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("blocker", "critical"),
            ("Major", "high"),
            ("warning", "medium"),
            ("Moderate", "medium"),
            ("info", "low"),
            ("trivial", "low"),
        ],
    )
    def test_severity_aliases(self, raw, expected):
        assert Violation(severity=raw).severity == expected

    @pytest.mark.parametrize("raw", ["catastrophic", "", None, 3])
    def test_unknown_severity_becomes_medium(self, raw):
        assert Violation(severity=raw).severity == "medium"

    def test_unknown_severity_keeps_sibling_violations(self):
        r = CheckpointResult(
            checkpoint_name="01-static",
            checkpoint_priority=Priority.CRITICAL,
            status="fail",
            violations=[
                {"severity": "critical", "issue": "SOQL in loop"},
                {"severity": "cosmetic", "issue": "Naming"},
            ],
        )
        assert [v.severity for v in r.violations] == ["critical", "medium"]

    @pytest.mark.parametrize("raw,expected", [("42", 42), ("12-14", 12), ("N/A", None), ("", None)])
    def test_line_coercion(self, raw, expected):
        assert Violation(line=raw).line == expected

    def test_unknown_keys_ignored(self):
        v = Violation.model_validate({"issue": "x", "rule_id": "ApexCRUDViolation"})
        assert not hasattr(v, "rule_id")

    def test_frozen(self):
        v = Violation(issue="x")
        with pytest.raises(ValidationError):
            v.issue = "y"


class TestCheckpointResult:
    """CheckpointResult validation and helpers."""

    def test_status_lowercased(self):
        r = CheckpointResult(checkpoint_name="a", checkpoint_priority=Priority.HIGH, status="PASS")
        assert r.status == "pass"

    def test_summary_normalization(self):
        none_summary = CheckpointResult(checkpoint_name="a", checkpoint_priority="HIGH", summary=None)
        text_summary = CheckpointResult(checkpoint_name="a", checkpoint_priority="HIGH", summary="ok")
        assert none_summary.summary == {}
        assert text_summary.summary == {"text": "ok"}

    def test_extra_fields_retained(self):
        r = CheckpointResult.model_validate(
            {"checkpoint_name": "a", "checkpoint_priority": "CRITICAL", "alignment_score": 0.8}
        )
        assert r.model_dump()["alignment_score"] == 0.8

    def test_blocker_requires_literal_true(self):
        blocker = CheckpointResult(
            checkpoint_name="a", checkpoint_priority="CRITICAL", summary={"production_blocker": True}
        )
        truthy = CheckpointResult(
            checkpoint_name="a", checkpoint_priority="CRITICAL", summary={"production_blocker": "yes"}
        )
        assert blocker.is_blocker is True
        assert truthy.is_blocker is False

    def test_from_error(self):
        checkpoint = Checkpoint("02-audit", Priority.CRITICAL, 2)
        r = CheckpointResult.from_error(checkpoint, "boom")
        assert r.status == "error"
        assert r.violations == []
        assert r.summary == {"execution_error": True}
        assert r.error == "boom"
        assert r.checkpoint_name == "02-audit"
        assert r.checkpoint_priority is Priority.CRITICAL


class TestReviewInput:
    def test_by_role(self):
        inputs = ReviewInput(
            artifacts=[
                Artifact("a.cls", "class A {}"),
                Artifact("prompt.md", "# Prompt", role="prompt_template"),
            ]
        )
        assert [a.path for a in inputs.by_role("source")] == ["a.cls"]
        assert [a.path for a in inputs.by_role("prompt_template")] == ["prompt.md"]
        assert inputs.by_role("test_suite") == []
