# checkpoint_review/pipeline/__init__.py
"""
Checkpoint pipeline: definitions, execution, shared context and aggregation.

Exports:
    - CheckpointPipeline: Sequential orchestrator
    - CheckpointExecutor: Runs one checkpoint
    - ReviewVariant: Checkpoint table plus per-checkpoint strategies
    - aggregate: Merge results into an AggregatedReport
"""

from checkpoint_review.pipeline.aggregator import aggregate
from checkpoint_review.pipeline.checkpoints import PassCriterion, ReviewVariant
from checkpoint_review.pipeline.context import SharedContext
from checkpoint_review.pipeline.executor import (
    CheckpointExecutor,
    CheckpointFailure,
    CheckpointSuccess,
)
from checkpoint_review.pipeline.models import (
    AggregatedReport,
    Artifact,
    Checkpoint,
    CheckpointResult,
    Priority,
    ReviewInput,
    Violation,
)
from checkpoint_review.pipeline.orchestrator import CheckpointPipeline, PipelineState

__all__ = [
    "AggregatedReport",
    "Artifact",
    "Checkpoint",
    "CheckpointExecutor",
    "CheckpointFailure",
    "CheckpointPipeline",
    "CheckpointResult",
    "CheckpointSuccess",
    "PassCriterion",
    "PipelineState",
    "Priority",
    "ReviewInput",
    "ReviewVariant",
    "SharedContext",
    "Violation",
    "aggregate",
]
