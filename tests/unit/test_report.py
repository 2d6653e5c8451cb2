# tests/unit/test_report.py
"""Tests for markdown/JSON rendering and report persistence."""

import json
from datetime import datetime, timezone

import pytest

from checkpoint_review.pipeline.checkpoints import PassCriterion
from checkpoint_review.pipeline.models import (
    AggregatedReport,
    CheckpointSummary,
    OverallAssessment,
    Priority,
    ReportMetadata,
    Violation,
    ViolationsBySeverity,
)
from checkpoint_review.report.renderer import ReportRenderer, locator, status_marker
from checkpoint_review.report.writer import ReportWriter, filesystem_timestamp, report_filename


def _report(buckets=None, checkpoints=None, **assessment) -> AggregatedReport:
    buckets = buckets or ViolationsBySeverity()
    every = buckets.critical + buckets.high + buckets.medium + buckets.low
    fields = dict(
        production_readiness="production-ready",
        confidence_score=0.82,
        confidence_rationale="Confidence based on 2 checkpoint executions: no findings.",
        has_production_blockers=False,
    )
    fields.update(assessment)
    return AggregatedReport(
        metadata=ReportMetadata(
            review_type="modular-checkpoint",
            timestamp="2025-01-15T12:00:00+00:00",
            checkpoints_executed=2,
            checkpoints_total=3,
            total_violations=len(every),
        ),
        overall_assessment=OverallAssessment(**fields),
        checkpoint_results=checkpoints or [],
        violations_by_severity=buckets,
        all_violations=every,
    )


class TestHelpers:
    def test_status_marker(self):
        assert status_marker("pass") == "✅"
        assert status_marker("fail") == "❌"
        assert status_marker("warning") == "⚠️"
        assert status_marker("error") == "🚫"
        assert status_marker("mystery") == "❓"

    def test_locator(self):
        assert locator(Violation(file="A.cls", line=4)) == "A.cls:4"
        assert locator(Violation()) == "N/A:N/A"

    def test_locator_keeps_line_zero(self):
        assert locator(Violation(file="A.cls", line=0)) == "A.cls:0"


class TestRenderMarkdown:
    """Section layout of the markdown report."""

    def test_header_and_assessment(self):
        text = ReportRenderer("Apex Code Review").render_markdown(_report())

        assert text.startswith("# Apex Code Review\n")
        assert "**Review Date**: 2025-01-15T12:00:00+00:00" in text
        assert "**Checkpoints Executed**: 2/3" in text
        assert "**Production Readiness**: production-ready" in text
        assert "**Has Production Blockers**: No" in text
        assert "PASS/FAIL" not in text
        assert "## 📊 Full JSON Results" in text

    def test_blockers_flag(self):
        text = ReportRenderer("T").render_markdown(_report(has_production_blockers=True))
        assert "**Has Production Blockers**: YES ⚠️" in text

    def test_pass_fail_table_uses_labels(self):
        criteria = (
            PassCriterion("no_critical_violations", "No critical violations", lambda r, b: True),
            PassCriterion("alignment_score_ok", "Alignment score >= 0.7", lambda r, b: False),
        )
        report = _report(
            pass_fail_status="FAIL",
            pass_criteria={"no_critical_violations": True, "alignment_score_ok": False},
        )
        text = ReportRenderer("T", criteria=criteria).render_markdown(report)

        assert "**PASS/FAIL**: FAIL ❌" in text
        assert "### PASS/FAIL Criteria (All 2 must be TRUE)" in text
        assert "1. ✅ No critical violations: TRUE" in text
        assert "2. ❌ Alignment score >= 0.7: FALSE" in text

    def test_checkpoint_blocks(self):
        checkpoints = [
            CheckpointSummary(
                checkpoint="01-pmd-static-analysis", priority=Priority.CRITICAL, status="pass",
                violation_count=0, summary={"production_blocker": False, "files_reviewed": 3},
            ),
            CheckpointSummary(
                checkpoint="02-security", priority=Priority.HIGH, status="error",
                violation_count=0, summary={"execution_error": True},
            ),
        ]
        text = ReportRenderer("T").render_markdown(_report(checkpoints=checkpoints))

        assert "### 01-pmd-static-analysis (CRITICAL) ✅" in text
        assert "### 02-security (HIGH) 🚫" in text
        assert "  - files_reviewed: 3" in text
        assert "production_blocker" not in text.split("## 📊 Full JSON Results")[0]
        assert "1 checkpoint(s) passed without violations:\n- 01-pmd-static-analysis" in text

    def test_critical_detail(self):
        buckets = ViolationsBySeverity(critical=[
            Violation(category="CRUD", file="A.cls", line=9, issue="No FLS check",
                      severity="critical", confidence=0.9, evidence="insert acc;"),
        ])
        text = ReportRenderer("T", evidence_language="apex").render_markdown(_report(buckets))

        assert "## 🚨 Critical Violations (Production Blockers)" in text
        assert "Found 1 critical violation(s)" in text
        assert "**File**: A.cls:9" in text
        assert "```apex\ninsert acc;\n```" in text
        assert "```apex\nNo guidance provided\n```" in text

    def test_high_grouped_by_category(self):
        buckets = ViolationsBySeverity(high=[
            Violation(category="Bulkification", file="A.cls", line=1, issue="SOQL in loop", severity="high"),
            Violation(category="Bulkification", file="B.cls", line=2, issue="DML in loop", severity="high"),
            Violation(category="Naming", issue="Bad name", severity="high"),
        ])
        text = ReportRenderer("T").render_markdown(_report(buckets))

        assert "### Bulkification (2 issues)" in text
        assert "### Naming (1 issue)" in text
        assert "- **B.cls:2** - DML in loop" in text
        assert "- **N/A:N/A** - Bad name" in text

    def test_medium_list_truncated(self):
        medium = [Violation(category="Style", issue=f"issue {i}", severity="medium") for i in range(12)]
        text = ReportRenderer("T").render_markdown(_report(ViolationsBySeverity(medium=medium)))

        assert "- Style: issue 9" in text
        assert "- Style: issue 10" not in text
        assert "- ...and 2 more medium issues" in text

    def test_low_only_counted(self):
        low = [Violation(category="Docs", issue="Missing comment", severity="low")]
        text = ReportRenderer("T").render_markdown(_report(ViolationsBySeverity(low=low)))

        assert "### Low Priority (1 issue)" in text
        assert "See full JSON results below" in text

    def test_no_passing_checkpoints(self):
        text = ReportRenderer("T").render_markdown(_report())
        assert "No checkpoints passed without violations." in text

    def test_json_section_parses(self):
        report = _report()
        text = ReportRenderer("T").render_markdown(report)
        block = text.split("```json\n")[-1].rsplit("\n```", 1)[0]
        assert json.loads(block)["metadata"]["checkpoints_total"] == 3


class TestWriter:
    MOMENT = datetime(2025, 1, 1, 12, 0, 0, 123000, tzinfo=timezone.utc)

    def test_filesystem_timestamp(self):
        assert filesystem_timestamp(self.MOMENT) == "2025-01-01T12-00-00-123Z"

    @pytest.mark.parametrize(
        "kwargs,expected",
        [
            ({"label": "JIRA-12"}, "JIRA-12-apex-code-review-modular-2025-01-01T12-00-00-123Z.md"),
            ({}, "apex-code-review-modular-2025-01-01T12-00-00-123Z.md"),
            ({"modular": False}, "apex-code-review-2025-01-01T12-00-00-123Z.md"),
            ({"extension": "json"}, "apex-code-review-modular-2025-01-01T12-00-00-123Z.json"),
        ],
    )
    def test_report_filename(self, kwargs, expected):
        assert report_filename("apex", moment=self.MOMENT, **kwargs) == expected

    def test_write_creates_directory(self, tmp_path):
        writer = ReportWriter(tmp_path / "docs" / "analysis")
        path = writer.write("report.md", "# Report")
        assert path == tmp_path / "docs" / "analysis" / "report.md"
        assert path.read_text(encoding="utf-8") == "# Report"
