# checkpoint_review/variants/lwc.py
"""Lightning Web Component review: ESLint first, then four analysis checkpoints."""

from checkpoint_review.pipeline.checkpoints import ReviewVariant
from checkpoint_review.pipeline.context import STATIC_FINDINGS
from checkpoint_review.pipeline.models import Checkpoint, Priority
from checkpoint_review.static_analysis import StaticAnalysisCommand

from .common import static_source_payload

ESLINT_CHECKPOINT = "01-eslint-lwc-static-analysis"
LWC_ROOT = "development/sf_project/force-app/main/default/lwc"
LWC_EXTENSIONS = (".js", ".html", ".css")

CHECKPOINTS = (
    Checkpoint(ESLINT_CHECKPOINT, Priority.CRITICAL, 1, 0.9, produces=(STATIC_FINDINGS,)),
    Checkpoint("02-code-standards", Priority.CRITICAL, 2, 0.7, consumes=(STATIC_FINDINGS,)),
    Checkpoint("03-css-architecture", Priority.HIGH, 3, 0.7, consumes=(STATIC_FINDINGS,)),
    Checkpoint("04-testing-standards", Priority.MEDIUM, 4, 0.6, consumes=(STATIC_FINDINGS,)),
    Checkpoint("05-architecture-patterns", Priority.HIGH, 5, 0.7, consumes=(STATIC_FINDINGS,)),
)

ESLINT_COMMAND = StaticAnalysisCommand(
    tool="ESLint",
    args=(
        "npx", "eslint",
        "force-app/main/default/lwc/**/*.js",
        "--format", "json",
        "--output-file", "{report}",
    ),
    working_dir="development/sf_project",
    report_prefix="eslint_lwc_report",
    install_hint="Please ensure ESLint is installed: npm install eslint",
)


def is_lwc_file(path: str) -> bool:
    return "/lwc/" in path and path.endswith(LWC_EXTENSIONS)


LWC = ReviewVariant(
    name="lwc",
    title="LWC Code Review - Modular Checkpoint Analysis",
    review_type="modular-checkpoint-lwc",
    checkpoints=CHECKPOINTS,
    template_subdir="lwc-code-review-checkpoints",
    reference_documents=(
        "docs/CSS_ARCHITECTURE_GUIDE.md",
        "docs/personas/LWC_FRONTEND_ENGINEER.md",
    ),
    default_payload=static_source_payload(ESLINT_CHECKPOINT, "eslint_report", "eslint_context"),
    rationale_note=(
        "Higher confidence in automated detections (ESLint-LWC, static analysis), moderate "
        "confidence in pattern-based checks (architecture, standards), lower confidence "
        "in subjective assessments (CSS, testing)."
    ),
    evidence_language="javascript",
    artifact_label="LWC",
    file_filter=is_lwc_file,
    discover_globs=tuple(f"{LWC_ROOT}/**/*{ext}" for ext in LWC_EXTENSIONS),
    discover_exclude=("/__tests__/",),
    static_analysis=ESLINT_COMMAND,
)
