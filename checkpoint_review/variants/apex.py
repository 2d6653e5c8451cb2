# checkpoint_review/variants/apex.py
"""Apex class review: PMD first, then seven analysis checkpoints."""

from checkpoint_review.pipeline.checkpoints import ReviewVariant
from checkpoint_review.pipeline.context import STATIC_FINDINGS
from checkpoint_review.pipeline.models import Checkpoint, Priority
from checkpoint_review.static_analysis import StaticAnalysisCommand

from .common import static_source_payload

PMD_CHECKPOINT = "01-pmd-static-analysis"


def _consumer(name: str, priority: Priority, order: int, weight: float) -> Checkpoint:
    return Checkpoint(name, priority, order, weight, consumes=(STATIC_FINDINGS,))


CHECKPOINTS = (
    Checkpoint(PMD_CHECKPOINT, Priority.CRITICAL, 1, 0.9, produces=(STATIC_FINDINGS,)),
    _consumer("02-sharing-keyword-audit", Priority.CRITICAL, 2, 0.9),
    _consumer("03-security-crud-fls", Priority.CRITICAL, 3, 0.8),
    _consumer("04-static-method-analysis", Priority.CRITICAL, 4, 0.9),
    _consumer("05-architecture-patterns", Priority.HIGH, 5, 0.7),
    _consumer("06-code-standards", Priority.HIGH, 6, 0.7),
    _consumer("07-testing-standards", Priority.MEDIUM, 7, 0.6),
    _consumer("08-quality-process", Priority.LOW, 8, 0.5),
)

PMD_COMMAND = StaticAnalysisCommand(
    tool="PMD",
    args=(
        "pmd", "check",
        "-d", "force-app/main/default/classes",
        "-R", "pmd-ruleset.xml",
        "-f", "json",
        "-r", "{report}",
    ),
    working_dir="development/sf_project",
    report_prefix="pmd_apex_report",
    install_hint="Please ensure PMD is installed and in your PATH",
    env={"PMD_APEX_ROOT_DIRECTORY": "{cwd}"},
)

APEX = ReviewVariant(
    name="apex",
    title="Apex Code Review - Modular Checkpoint Analysis",
    review_type="modular-checkpoint",
    checkpoints=CHECKPOINTS,
    template_subdir="apex-code-review-checkpoints",
    reference_documents=(
        "docs/RFCs/RFC_SALESFORCE_PRACTICES.md",
        "docs/guides/CONFIDENCE_SCORING_GUIDE_APEX_CODE_REVIEW.md",
        "docs/SALESFORCE_APEX_STATIC_TYPES_GUIDE.md",
    ),
    default_payload=static_source_payload(PMD_CHECKPOINT, "pmd_report", "pmd_context"),
    rationale_note=(
        "Higher confidence in automated detections (PMD, static analysis), moderate "
        "confidence in pattern-based checks (architecture, standards), lower confidence "
        "in subjective assessments (quality, testing)."
    ),
    evidence_language="apex",
    artifact_label="Apex",
    file_filter=lambda path: path.endswith(".cls"),
    discover_globs=("force-app/**/*.cls",),
    static_analysis=PMD_COMMAND,
    single_shot_template="APEX_CODE_REVIEW.md",
)
