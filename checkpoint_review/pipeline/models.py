# checkpoint_review/pipeline/models.py
"""
Shared data model for checkpoint reviews.

Violation and CheckpointResult are parsed from engine output, so they accept
the field-name variations models tend to produce. AggregatedReport is the
read-only structure handed to the renderer and persisted as JSON.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

logger = logging.getLogger(__name__)


class Priority(str, Enum):
    """Checkpoint priority tier."""

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


Severity = Literal["critical", "high", "medium", "low"]
CheckpointStatus = Literal["pass", "fail", "warning", "error"]

_SEVERITY_ALIASES = {
    "blocker": "critical",
    "error": "high",
    "major": "high",
    "severe": "high",
    "serious": "high",
    "warning": "medium",
    "moderate": "medium",
    "normal": "medium",
    "minor": "low",
    "info": "low",
    "trivial": "low",
}


@dataclass(frozen=True)
class Checkpoint:
    """
    Static definition of one checkpoint.

    Attributes:
        name: Unique identifier, also the instruction template file stem
        priority: Priority tier
        order: Execution position (ascending)
        weight: Base confidence weight used by the aggregator
        consumes: Shared-context fragment kinds this checkpoint reads
        produces: Shared-context fragment kinds this checkpoint writes
    """

    name: str
    priority: Priority
    order: int
    weight: float = 0.5
    consumes: tuple[str, ...] = field(default_factory=tuple)
    produces: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Artifact:
    """
    One input artifact handed to checkpoints.

    Attributes:
        path: Identifier shown to the engine (usually a repo-relative path)
        content: Artifact text, or a placeholder note when unreadable
        role: What the artifact is for (e.g. "source", "prompt_template", "test_suite")
        readable: False when content is a placeholder
    """

    path: str
    content: str
    role: str = "source"
    readable: bool = True


@dataclass
class ReviewInput:
    """Everything a run reviews: artifacts plus the optional static-analysis report."""

    artifacts: list[Artifact]
    static_report: Any | None = None

    def by_role(self, role: str) -> list[Artifact]:
        return [a for a in self.artifacts if a.role == role]


class Violation(BaseModel):
    """A single finding emitted by a checkpoint."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    category: str = Field(default="Uncategorized", description="Finding category, optionally 'Source:Rule'")
    issue: str = Field(default="", description="Human description of the problem")
    severity: Severity = Field(default="medium")
    confidence: float = Field(default=0.5, description="Higher means more certain")
    file: str | None = None
    line: int | None = None
    evidence: str | None = None
    fix_guidance: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _normalize_field_names(cls, data: Any) -> Any:
        """Handle LLM field name variations."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for alias in ("description", "message"):
            if alias in data and "issue" not in data:
                data["issue"] = data.pop(alias)
        for alias in ("fix", "recommendation"):
            if alias in data and "fix_guidance" not in data:
                data["fix_guidance"] = data.pop(alias)
        if "file_path" in data and "file" not in data:
            data["file"] = data.pop("file_path")
        return data

    @field_validator("severity", mode="before")
    @classmethod
    def _lower_severity(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = _SEVERITY_ALIASES.get(value.strip().lower(), value.strip().lower())
        if value not in ("critical", "high", "medium", "low"):
            logger.warning(f"Unknown violation severity {value!r}, treating as medium")
            return "medium"
        return value

    @field_validator("line", mode="before")
    @classmethod
    def _coerce_line(cls, value: Any) -> Any:
        # "N/A", "" and ranges like "12-14" show up in practice
        if isinstance(value, str):
            head = value.strip().split("-")[0]
            return int(head) if head.isdigit() else None
        return value


class CheckpointResult(BaseModel):
    """
    Outcome of one checkpoint in one run.

    Extra fields returned by the engine (e.g. alignment_score) are kept so
    pass/fail criteria can read them.
    """

    model_config = ConfigDict(extra="allow")

    checkpoint_name: str
    checkpoint_priority: Priority
    status: CheckpointStatus = "warning"
    violations: list[Violation] = Field(default_factory=list)
    summary: dict[str, Any] = Field(default_factory=dict)
    error: str | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _lower_status(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("summary", mode="before")
    @classmethod
    def _summary_as_mapping(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, str):
            return {"text": value}
        return value

    @property
    def is_blocker(self) -> bool:
        return self.summary.get("production_blocker") is True

    @classmethod
    def from_error(cls, checkpoint: Checkpoint, message: str) -> "CheckpointResult":
        """Build the error result recorded for a checkpoint that failed to run."""
        return cls(
            checkpoint_name=checkpoint.name,
            checkpoint_priority=checkpoint.priority,
            status="error",
            error=message,
            violations=[],
            summary={"execution_error": True},
        )


class CheckpointSummary(BaseModel):
    """Condensed per-checkpoint entry shown in the report."""

    checkpoint: str
    priority: Priority
    status: CheckpointStatus
    violation_count: int
    summary: dict[str, Any] = Field(default_factory=dict)


class ReportMetadata(BaseModel):
    review_type: str
    timestamp: str
    checkpoints_executed: int
    checkpoints_total: int
    total_violations: int


class OverallAssessment(BaseModel):
    production_readiness: Literal[
        "critical-issues", "needs-fixes", "ready-with-improvements", "production-ready"
    ]
    confidence_score: float
    confidence_rationale: str
    has_production_blockers: bool
    pass_fail_status: Literal["PASS", "FAIL"] | None = None
    pass_criteria: dict[str, bool] | None = None


class ViolationsBySeverity(BaseModel):
    critical: list[Violation] = Field(default_factory=list)
    high: list[Violation] = Field(default_factory=list)
    medium: list[Violation] = Field(default_factory=list)
    low: list[Violation] = Field(default_factory=list)


class AggregatedReport(BaseModel):
    """Merged result of a full pipeline run."""

    metadata: ReportMetadata
    overall_assessment: OverallAssessment
    checkpoint_results: list[CheckpointSummary] = Field(default_factory=list)
    violations_by_severity: ViolationsBySeverity = Field(default_factory=ViolationsBySeverity)
    all_violations: list[Violation] = Field(default_factory=list)
    raw_checkpoint_results: list[CheckpointResult] = Field(default_factory=list)
