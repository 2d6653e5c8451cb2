# checkpoint_review/pipeline/checkpoints.py
"""
Checkpoint definition tables.

A ReviewVariant bundles an ordered checkpoint table with the strategies that
differ between artifact kinds: how each checkpoint's input payload is built,
which reference documents must exist, and which pass/fail criteria apply.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from checkpoint_review.pipeline.models import (
    Checkpoint,
    CheckpointResult,
    ReviewInput,
    ViolationsBySeverity,
)

if TYPE_CHECKING:
    from checkpoint_review.static_analysis import StaticAnalysisCommand

PayloadFn = Callable[[Checkpoint, ReviewInput, dict[str, Any]], dict[str, Any]]
"""(checkpoint, inputs, visible_context) -> JSON-serializable payload"""


@dataclass(frozen=True)
class PassCriterion:
    """
    One named boolean condition of a pass/fail checklist.

    Attributes:
        name: Key in the reported truth table (e.g. "no_critical_violations")
        label: Human-readable description for the report
        check: Predicate over results keyed by checkpoint name and the severity buckets
    """

    name: str
    label: str
    check: Callable[[dict[str, CheckpointResult], ViolationsBySeverity], bool]


@dataclass(frozen=True)
class ReviewVariant:
    """
    A pipeline configuration for one artifact kind.

    Attributes:
        name: Registry key and CLI command (e.g. "apex")
        title: Report title
        review_type: Label recorded in report metadata
        checkpoints: Checkpoint definition table
        template_subdir: Directory (under the templates root) holding checkpoint templates
        reference_documents: Paths that must exist before any checkpoint runs
        default_payload: Payload strategy for checkpoints without a specific one
        payload_builders: Payload strategies keyed by checkpoint name
        criteria: Optional pass/fail checklist; empty means no PASS/FAIL verdict
        rationale_note: Appended to the confidence rationale
        evidence_language: Fence language for evidence blocks in the report
        artifact_label: Noun for the reviewed files in messages (e.g. "Apex")
        file_filter: Predicate selecting reviewable paths from a pull request
        discover_globs: Glob patterns (relative to the project root) used by --all discovery
        discover_exclude: Path fragments excluded from --all discovery
        static_analysis: Tool producing the report consumed by the first checkpoint
        single_shot_template: Prompt used by the monolithic review mode, if any
    """

    name: str
    title: str
    review_type: str
    checkpoints: tuple[Checkpoint, ...]
    template_subdir: str
    reference_documents: tuple[str, ...] = ()
    default_payload: PayloadFn | None = None
    payload_builders: Mapping[str, PayloadFn] = field(default_factory=dict)
    criteria: tuple[PassCriterion, ...] = ()
    rationale_note: str = ""
    evidence_language: str = ""
    artifact_label: str = "source"
    file_filter: Callable[[str], bool] | None = None
    discover_globs: tuple[str, ...] = ()
    discover_exclude: tuple[str, ...] = ()
    static_analysis: "StaticAnalysisCommand | None" = None
    single_shot_template: str | None = None

    def __post_init__(self) -> None:
        names = [c.name for c in self.checkpoints]
        duplicates = {n for n in names if names.count(n) > 1}
        if duplicates:
            raise ValueError(f"Duplicate checkpoint names in '{self.name}': {sorted(duplicates)}")
        unknown = set(self.payload_builders) - set(names)
        if unknown:
            raise ValueError(f"Payload builders for unknown checkpoints in '{self.name}': {sorted(unknown)}")

    def ordered(self) -> list[Checkpoint]:
        """Checkpoints in execution order (ascending ``order``)."""
        return sorted(self.checkpoints, key=lambda c: c.order)

    @property
    def weights(self) -> dict[str, float]:
        return {c.name: c.weight for c in self.checkpoints}

    def template_dir(self, templates_root: Path) -> Path:
        return templates_root / self.template_subdir

    def build_payload(
        self, checkpoint: Checkpoint, inputs: ReviewInput, visible_context: dict[str, Any]
    ) -> dict[str, Any]:
        """Dispatch to the payload strategy registered for this checkpoint."""
        builder = self.payload_builders.get(checkpoint.name, self.default_payload)
        if builder is None:
            raise ValueError(f"No payload builder for checkpoint '{checkpoint.name}'")
        return builder(checkpoint, inputs, visible_context)
