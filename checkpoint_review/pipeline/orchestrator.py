# checkpoint_review/pipeline/orchestrator.py
"""
Checkpoint pipeline orchestrator.

Executes checkpoints sequentially in ascending order, isolates per-checkpoint
failures, owns the shared context of the run and hands every result to the
aggregator.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from checkpoint_review.errors import ConfigurationError, MissingReferenceDocuments, PipelineStopped
from checkpoint_review.pipeline.aggregator import aggregate
from checkpoint_review.pipeline.checkpoints import ReviewVariant
from checkpoint_review.pipeline.context import SharedContext
from checkpoint_review.pipeline.executor import CheckpointExecutor, CheckpointFailure, ExecutionOutcome
from checkpoint_review.pipeline.models import AggregatedReport, CheckpointResult, ReviewInput

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float, str], Any]


class PipelineState(str, Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"


class CheckpointPipeline:
    """
    Runs a review variant's checkpoint table once.

    Workflow:
    1. Pre-flight: every reference document must exist
    2. Execute each checkpoint in ascending ``order``
    3. Convert failures into error results and keep going
    4. Aggregate all results into one report

    A pipeline instance is single-use. A failed or completed run cannot be
    restarted; build a new pipeline instead.

    Example:
        executor = CheckpointExecutor(variant, engine, Path("exec"))
        pipeline = CheckpointPipeline(variant, executor)
        report = await pipeline.execute(ReviewInput(artifacts, static_report))
    """

    def __init__(
        self,
        variant: ReviewVariant,
        executor: CheckpointExecutor,
        project_root: Path = Path("."),
        exists: Callable[[Path], bool] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        Args:
            variant: Checkpoint table and strategies to run
            executor: Executor bound to the same variant
            project_root: Base directory for relative reference document paths
            exists: File-existence predicate used by pre-flight (defaults to Path.exists)
            clock: Timestamp source for report metadata
        """
        self._variant = variant
        self._executor = executor
        self._project_root = project_root
        self._exists = exists or (lambda path: path.exists())
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._state = PipelineState.NOT_STARTED
        self._results: list[CheckpointResult] = []
        self._stop_requested = False
        logger.info(
            f"Created CheckpointPipeline '{variant.name}' with {len(variant.checkpoints)} checkpoints"
        )

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def results(self) -> tuple[CheckpointResult, ...]:
        return tuple(self._results)

    def request_stop(self) -> None:
        """Finish the current checkpoint, then stop before starting the next one."""
        self._stop_requested = True

    def validate_dependencies(self) -> None:
        """
        Check that every reference document exists.

        Raises:
            MissingReferenceDocuments: Listing every missing path
        """
        missing = [
            doc
            for doc in self._variant.reference_documents
            if not self._exists(self._project_root / doc)
        ]
        if missing:
            raise MissingReferenceDocuments(missing)
        logger.info(f"All {len(self._variant.reference_documents)} reference documents present")

    async def execute(
        self,
        inputs: ReviewInput,
        progress_callback: ProgressCallback | None = None,
    ) -> AggregatedReport:
        """
        Execute the full checkpoint pipeline.

        Args:
            inputs: Artifacts and optional static-analysis report
            progress_callback: Optional callback(progress, phase), sync or async

        Returns:
            AggregatedReport over one result per checkpoint

        Raises:
            ConfigurationError: Missing reference documents or checkpoint templates
            PipelineStopped: If request_stop() was called before the last checkpoint
        """
        if self._state is not PipelineState.NOT_STARTED:
            raise RuntimeError(f"Pipeline already {self._state.value}; create a new one to re-run")

        self._state = PipelineState.RUNNING
        context = SharedContext()
        checkpoints = self._variant.ordered()
        total = len(checkpoints)

        try:
            self.validate_dependencies()

            for index, checkpoint in enumerate(checkpoints):
                if self._stop_requested:
                    logger.warning(f"Stop requested; skipping {total - index} remaining checkpoint(s)")
                    raise PipelineStopped(completed=index, total=total)

                await self._notify(progress_callback, index / total, checkpoint.name)
                logger.info(f"Executing checkpoint {checkpoint.name} ({checkpoint.priority.value})")

                outcome = await self._run_one(checkpoint, inputs, context)
                if isinstance(outcome, CheckpointFailure):
                    logger.error(f"[{checkpoint.name}] Checkpoint failed: {outcome.error}")
                    result = outcome.to_result()
                else:
                    result = outcome.result

                self._results.append(result)
                await self._notify(progress_callback, (index + 1) / total, f"{checkpoint.name}_complete")
                logger.info(
                    f"[{checkpoint.name}] status={result.status}, violations={len(result.violations)}"
                )

            await self._notify(progress_callback, 1.0, "aggregating")
            report = aggregate(self._results, self._variant, timestamp=self._clock())
            logger.info(
                f"Pipeline '{self._variant.name}' completed: "
                f"{report.metadata.total_violations} unique violation(s), "
                f"readiness={report.overall_assessment.production_readiness}"
            )
            return report
        finally:
            context.clear()
            self._state = PipelineState.COMPLETED

    async def _run_one(
        self, checkpoint, inputs: ReviewInput, context: SharedContext
    ) -> ExecutionOutcome:
        """Run one checkpoint, converting unexpected exceptions into a failure."""
        try:
            return await self._executor.execute(checkpoint, inputs, context)
        except ConfigurationError:
            raise
        except Exception as e:
            logger.exception(f"[{checkpoint.name}] Unexpected error during checkpoint")
            return CheckpointFailure(checkpoint=checkpoint, error=str(e) or type(e).__name__)

    @staticmethod
    async def _notify(callback: ProgressCallback | None, progress: float, phase: str) -> None:
        if callback is None:
            return
        result_or_coro = callback(progress, phase)
        if hasattr(result_or_coro, "__await__"):
            await result_or_coro
