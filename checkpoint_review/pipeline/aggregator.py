# checkpoint_review/pipeline/aggregator.py
"""
Merges checkpoint results into one report.

Everything here is a pure function of the result sequence (plus an injected
timestamp), so the same inputs always yield the same report.

Confidence scoring formula:
    adjusted_weight = base_weight * (1 + violation_count * 0.1)
    score = sum(base_weight * adjusted_weight) / sum(adjusted_weight)

Checkpoints that observed more findings pull the score toward their own base
weight. Severity is not part of the formula.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from checkpoint_review.pipeline.models import (
    AggregatedReport,
    CheckpointResult,
    CheckpointSummary,
    OverallAssessment,
    ReportMetadata,
    Violation,
    ViolationsBySeverity,
)

if TYPE_CHECKING:
    from checkpoint_review.pipeline.checkpoints import PassCriterion, ReviewVariant

logger = logging.getLogger(__name__)

DEFAULT_WEIGHT = 0.5
EMPTY_RUN_CONFIDENCE = 0.7
VIOLATION_WEIGHT_STEP = 0.1


def violation_key(violation: Violation) -> str:
    """Identity key for deduplication.

    Located findings are keyed by file, line and category. Findings without a
    file (e.g. template analysis) are keyed by category and issue text.
    """
    if violation.file:
        line = violation.line if violation.line is not None else ""
        return f"{violation.file}:{line}:{violation.category}"
    return f"{violation.category}:{violation.issue}"


def deduplicate_violations(violations: Iterable[Violation]) -> list[Violation]:
    """
    Keep one violation per identity key.

    The higher confidence wins; on a tie the first one seen is kept. Output
    order follows the first appearance of each key.
    """
    kept: dict[str, Violation] = {}
    seen = 0
    for violation in violations:
        seen += 1
        key = violation_key(violation)
        existing = kept.get(key)
        if existing is None or violation.confidence > existing.confidence:
            kept[key] = violation
    deduplicated = list(kept.values())
    logger.debug(f"Deduplicated {seen} -> {len(deduplicated)} violations")
    return deduplicated


def calculate_confidence(
    results: Sequence[CheckpointResult], weights: Mapping[str, float]
) -> float:
    """
    Weighted confidence over every checkpoint that ran.

    Args:
        results: One result per executed checkpoint
        weights: Base weight per checkpoint name (unknown names use 0.5)

    Returns:
        Score rounded to two decimals, or 0.7 when nothing ran
    """
    total_weight = 0.0
    weighted_sum = 0.0
    for result in results:
        weight = weights.get(result.checkpoint_name, DEFAULT_WEIGHT)
        adjusted = weight * (1 + len(result.violations) * VIOLATION_WEIGHT_STEP)
        total_weight += adjusted
        weighted_sum += weight * adjusted

    if total_weight <= 0:
        return EMPTY_RUN_CONFIDENCE
    return round(weighted_sum / total_weight, 2)


def confidence_rationale(
    executed: int, violations: Sequence[Violation], note: str = ""
) -> str:
    """Explain the score: findings per source (category prefix before ':')."""
    counts: dict[str, int] = {}
    for violation in violations:
        source = violation.category.split(":")[0] if violation.category else "Unknown"
        counts[source] = counts.get(source, 0) + 1

    sources = ", ".join(f"{source} ({count} findings)" for source, count in counts.items())
    text = f"Confidence based on {executed} checkpoint executions: {sources or 'no findings'}."
    if note:
        text = f"{text} {note}"
    return text


def partition_by_severity(violations: Sequence[Violation]) -> ViolationsBySeverity:
    """Bucket violations by their own severity field."""
    buckets = ViolationsBySeverity()
    for violation in violations:
        getattr(buckets, violation.severity).append(violation)
    return buckets


def evaluate_criteria(
    criteria: Sequence["PassCriterion"],
    results: Sequence[CheckpointResult],
    buckets: ViolationsBySeverity,
) -> dict[str, bool]:
    """Truth table for a pass/fail checklist."""
    by_name = {r.checkpoint_name: r for r in results}
    return {criterion.name: bool(criterion.check(by_name, buckets)) for criterion in criteria}


def classify_readiness(
    has_blockers: bool,
    buckets: ViolationsBySeverity,
    criteria_met: bool | None = None,
) -> str:
    """
    Readiness in priority order.

    Blockers beat everything, then an unmet pass/fail checklist, then critical
    and high violations. Medium and low violations never change the verdict.
    """
    if has_blockers:
        return "critical-issues"
    if criteria_met is False:
        return "needs-fixes"
    if buckets.critical:
        return "needs-fixes"
    if buckets.high:
        return "ready-with-improvements"
    return "production-ready"


def summarize(result: CheckpointResult) -> CheckpointSummary:
    return CheckpointSummary(
        checkpoint=result.checkpoint_name,
        priority=result.checkpoint_priority,
        status=result.status,
        violation_count=len(result.violations),
        summary=dict(result.summary),
    )


def aggregate(
    results: Sequence[CheckpointResult],
    variant: "ReviewVariant",
    timestamp: datetime | None = None,
) -> AggregatedReport:
    """
    Merge all checkpoint results of a run.

    Args:
        results: Results in execution order
        variant: Variant that produced them (weights, criteria, labels)
        timestamp: Report time (defaults to now, UTC)

    Returns:
        AggregatedReport
    """
    timestamp = timestamp or datetime.now(timezone.utc)
    all_violations = [v for result in results for v in result.violations]
    unique = deduplicate_violations(all_violations)
    buckets = partition_by_severity(unique)

    has_blockers = any(result.is_blocker for result in results)

    pass_criteria: dict[str, bool] | None = None
    pass_fail_status = None
    if variant.criteria:
        pass_criteria = evaluate_criteria(variant.criteria, results, buckets)
        pass_fail_status = "PASS" if all(pass_criteria.values()) else "FAIL"

    readiness = classify_readiness(
        has_blockers,
        buckets,
        criteria_met=None if pass_criteria is None else all(pass_criteria.values()),
    )

    assessment = OverallAssessment(
        production_readiness=readiness,
        confidence_score=calculate_confidence(results, variant.weights),
        confidence_rationale=confidence_rationale(len(results), unique, variant.rationale_note),
        has_production_blockers=has_blockers,
        pass_fail_status=pass_fail_status,
        pass_criteria=pass_criteria,
    )

    return AggregatedReport(
        metadata=ReportMetadata(
            review_type=variant.review_type,
            timestamp=timestamp.isoformat(),
            checkpoints_executed=len(results),
            checkpoints_total=len(variant.checkpoints),
            total_violations=len(unique),
        ),
        overall_assessment=assessment,
        checkpoint_results=[summarize(result) for result in results],
        violations_by_severity=buckets,
        all_violations=unique,
        raw_checkpoint_results=list(results),
    )
