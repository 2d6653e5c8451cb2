# checkpoint_review/report/renderer.py
"""
Report renderer for converting an AggregatedReport to markdown or JSON.

Every optional field may be missing (errored checkpoints, sparse engine
output), so each accessor falls back to a placeholder instead of failing.
"""

import json
from collections.abc import Sequence
from typing import TYPE_CHECKING

from checkpoint_review.pipeline.models import AggregatedReport, CheckpointSummary, Violation

if TYPE_CHECKING:
    from checkpoint_review.pipeline.checkpoints import PassCriterion, ReviewVariant

MEDIUM_INLINE_LIMIT = 10

STATUS_MARKERS = {
    "pass": "✅",
    "fail": "❌",
    "warning": "⚠️",
    "error": "🚫",
}
UNKNOWN_STATUS_MARKER = "❓"


def status_marker(status: str) -> str:
    return STATUS_MARKERS.get(status, UNKNOWN_STATUS_MARKER)


def locator(violation: Violation) -> str:
    """'file:line' with 'N/A' for whatever is missing."""
    file = violation.file or "N/A"
    line = violation.line if violation.line is not None else "N/A"
    return f"{file}:{line}"


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'s' if count != 1 else ''}"


class ReportRenderer:
    """
    Converts an AggregatedReport to structured markdown.

    Format:
        # {title}
        metadata lines

        ## Overall Assessment        (PASS/FAIL table when criteria exist)
        ## Checkpoint Results        (one block per checkpoint)
        ## Critical Violations       (full detail)
        ## High Priority Issues      (grouped by category)
        ## Recommendations           (medium list, low count)
        ## Positive Findings
        ## Full JSON Results
    """

    def __init__(
        self,
        title: str,
        evidence_language: str = "",
        criteria: Sequence["PassCriterion"] = (),
    ):
        self.title = title
        self.evidence_language = evidence_language
        self.criteria = tuple(criteria)

    @classmethod
    def for_variant(cls, variant: "ReviewVariant") -> "ReportRenderer":
        return cls(
            title=variant.title,
            evidence_language=variant.evidence_language,
            criteria=variant.criteria,
        )

    def render_json(self, report: AggregatedReport) -> str:
        return json.dumps(report.model_dump(mode="json"), indent=2)

    def render_markdown(self, report: AggregatedReport) -> str:
        """
        Render the full markdown report.

        Args:
            report: Aggregated result of one pipeline run

        Returns:
            Markdown string
        """
        sections: list[str] = []
        sections.extend(self._render_header(report))
        sections.extend(self._render_assessment(report))
        sections.extend(self._render_checkpoints(report.checkpoint_results))
        sections.extend(self._render_critical(report.violations_by_severity.critical))
        sections.extend(self._render_high(report.violations_by_severity.high))
        sections.extend(
            self._render_recommendations(
                report.violations_by_severity.medium, report.violations_by_severity.low
            )
        )
        sections.extend(self._render_positive(report.checkpoint_results))

        sections.append("## 📊 Full JSON Results")
        sections.append("")
        sections.append("```json")
        sections.append(self.render_json(report))
        sections.append("```")
        return "\n".join(sections)

    def _render_header(self, report: AggregatedReport) -> list[str]:
        meta = report.metadata
        return [
            f"# {self.title}",
            "",
            f"**Review Date**: {meta.timestamp}",
            f"**Review Type**: {meta.review_type}",
            f"**Checkpoints Executed**: {meta.checkpoints_executed}/{meta.checkpoints_total}",
            f"**Total Violations**: {meta.total_violations}",
            "",
        ]

    def _render_assessment(self, report: AggregatedReport) -> list[str]:
        assessment = report.overall_assessment
        lines = ["## Overall Assessment", ""]

        if assessment.pass_fail_status is not None:
            marker = "✅" if assessment.pass_fail_status == "PASS" else "❌"
            lines.append(f"**PASS/FAIL**: {assessment.pass_fail_status} {marker}")

        lines.append(f"**Production Readiness**: {assessment.production_readiness}")
        lines.append(f"**Confidence Score**: {assessment.confidence_score}")
        lines.append(
            f"**Has Production Blockers**: {'YES ⚠️' if assessment.has_production_blockers else 'No'}"
        )
        lines.append("")

        if assessment.pass_criteria is not None:
            labels = {c.name: c.label for c in self.criteria}
            total = len(assessment.pass_criteria)
            lines.append(f"### PASS/FAIL Criteria (All {total} must be TRUE)")
            lines.append("")
            for i, (name, met) in enumerate(assessment.pass_criteria.items(), start=1):
                label = labels.get(name, name.replace("_", " ").capitalize())
                lines.append(f"{i}. {'✅' if met else '❌'} {label}: {'TRUE' if met else 'FALSE'}")
            lines.append("")

        lines.append("**Confidence Rationale**:")
        lines.append(assessment.confidence_rationale)
        lines.append("")
        return lines

    def _render_checkpoints(self, checkpoints: Sequence[CheckpointSummary]) -> list[str]:
        lines = ["## Checkpoint Results", ""]
        for checkpoint in checkpoints:
            lines.append(
                f"### {checkpoint.checkpoint} ({checkpoint.priority.value}) "
                f"{status_marker(checkpoint.status)}"
            )
            lines.append("")
            lines.append(f"- **Status**: {checkpoint.status}")
            lines.append(f"- **Violations Found**: {checkpoint.violation_count}")

            shown = {k: v for k, v in checkpoint.summary.items() if k != "production_blocker"}
            if shown:
                lines.append("- **Summary**:")
                for key, value in shown.items():
                    lines.append(f"  - {key}: {value}")
            lines.append("")
        return lines

    def _render_critical(self, violations: Sequence[Violation]) -> list[str]:
        if not violations:
            return []

        fence = f"```{self.evidence_language}"
        lines = [
            "## 🚨 Critical Violations (Production Blockers)",
            "",
            f"Found {len(violations)} critical violation(s) that must be addressed before deployment.",
            "",
        ]
        for violation in violations:
            lines.extend(
                [
                    f"### {violation.category}",
                    "",
                    f"**File**: {locator(violation)}",
                    f"**Issue**: {violation.issue}",
                    f"**Confidence**: {violation.confidence}",
                    "",
                    "**Evidence**:",
                    fence,
                    violation.evidence or "N/A",
                    "```",
                    "",
                    "**Fix Guidance**:",
                    fence,
                    violation.fix_guidance or "No guidance provided",
                    "```",
                    "",
                ]
            )
        return lines

    def _render_high(self, violations: Sequence[Violation]) -> list[str]:
        if not violations:
            return []

        lines = [
            "## ⚠️ High Priority Issues",
            "",
            f"Found {len(violations)} high priority issue(s).",
            "",
        ]
        by_category: dict[str, list[Violation]] = {}
        for violation in violations:
            by_category.setdefault(violation.category or "Uncategorized", []).append(violation)

        for category, grouped in by_category.items():
            lines.append(f"### {category} ({_plural(len(grouped), 'issue')})")
            lines.append("")
            for violation in grouped:
                lines.append(f"- **{locator(violation)}** - {violation.issue}")
            lines.append("")
        return lines

    def _render_recommendations(
        self, medium: Sequence[Violation], low: Sequence[Violation]
    ) -> list[str]:
        if not medium and not low:
            return []

        lines = ["## 📋 Recommendations", ""]
        if medium:
            lines.append(f"### Medium Priority ({_plural(len(medium), 'issue')})")
            lines.append("")
            for violation in medium[:MEDIUM_INLINE_LIMIT]:
                where = f" ({violation.file})" if violation.file else ""
                lines.append(f"- {violation.category}: {violation.issue}{where}")
            if len(medium) > MEDIUM_INLINE_LIMIT:
                lines.append(f"- ...and {len(medium) - MEDIUM_INLINE_LIMIT} more medium issues")
            lines.append("")

        if low:
            lines.append(f"### Low Priority ({_plural(len(low), 'issue')})")
            lines.append("")
            lines.append("See full JSON results below for complete list of low priority issues.")
            lines.append("")
        return lines

    def _render_positive(self, checkpoints: Sequence[CheckpointSummary]) -> list[str]:
        lines = ["## ✅ Positive Findings", ""]
        passed = [c for c in checkpoints if c.status == "pass"]
        if passed:
            lines.append(f"{len(passed)} checkpoint(s) passed without violations:")
            for checkpoint in passed:
                lines.append(f"- {checkpoint.checkpoint}")
        else:
            lines.append(
                "No checkpoints passed without violations. "
                "Focus on addressing critical and high priority issues first."
            )
        lines.append("")
        return lines
