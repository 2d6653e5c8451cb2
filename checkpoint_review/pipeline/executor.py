# checkpoint_review/pipeline/executor.py
"""
Runs exactly one checkpoint.

Loads the checkpoint's instruction template, builds its input payload (with
shared context only for consumers), calls the analysis engine, parses the
response and publishes any fragments the checkpoint produces.
"""

import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from checkpoint_review.errors import EngineError, ResponseParseError
from checkpoint_review.pipeline.checkpoints import ReviewVariant
from checkpoint_review.pipeline.context import SharedContext
from checkpoint_review.pipeline.models import Checkpoint, CheckpointResult, ReviewInput
from checkpoint_review.pipeline.parsing import extract_json
from checkpoint_review.pipeline.templates import load_template

logger = logging.getLogger(__name__)

TASK_INSTRUCTION = (
    "Execute the checkpoint analysis as defined above. Return ONLY valid JSON "
    "matching the output format specified in the checkpoint prompt."
)


class AnalysisEngine(Protocol):
    """Anything that turns chat messages into a response string."""

    async def generate(self, messages: list[dict]) -> str: ...


@dataclass
class CheckpointSuccess:
    """Checkpoint ran and its response parsed."""

    result: CheckpointResult
    raw_output: str


@dataclass
class CheckpointFailure:
    """Checkpoint could not produce a parsed result."""

    checkpoint: Checkpoint
    error: str
    raw_output: str = ""

    def to_result(self) -> CheckpointResult:
        return CheckpointResult.from_error(self.checkpoint, self.error)


ExecutionOutcome = CheckpointSuccess | CheckpointFailure


def compose_instruction(template: str, payload: dict[str, Any]) -> str:
    """Append the JSON input block and task line to a checkpoint template."""
    input_json = json.dumps(payload, indent=2, default=str)
    return (
        f"{template}\n\n"
        "## Input Data\n\n"
        f"```json\n{input_json}\n```\n\n"
        "## Task\n\n"
        f"{TASK_INSTRUCTION}"
    )


class CheckpointExecutor:
    """
    Executes single checkpoints of one review variant.

    Configuration errors (a missing template) raise; everything that can go
    wrong with the engine or its response comes back as a CheckpointFailure.
    """

    def __init__(
        self, variant: ReviewVariant, engine: AnalysisEngine, templates_root: Path
    ) -> None:
        """
        Args:
            variant: Review variant owning the checkpoint table and payload strategies
            engine: Analysis engine used for every checkpoint
            templates_root: Root under which the variant's template directory lives
        """
        self._variant = variant
        self._engine = engine
        self._template_dir = variant.template_dir(templates_root)

    @property
    def template_dir(self) -> Path:
        return self._template_dir

    def build_instruction(
        self, checkpoint: Checkpoint, inputs: ReviewInput, context: SharedContext
    ) -> str:
        """
        Build the full instruction text for a checkpoint.

        Raises:
            MissingCheckpointDefinition: If the checkpoint's template is absent
        """
        template = load_template(self._template_dir, checkpoint.name)
        visible = {kind: fragment.model_dump() for kind, fragment in context.view(checkpoint).items()}
        payload = self._variant.build_payload(checkpoint, inputs, visible)
        return compose_instruction(template, payload)

    async def execute(
        self, checkpoint: Checkpoint, inputs: ReviewInput, context: SharedContext
    ) -> ExecutionOutcome:
        """
        Run one checkpoint end to end.

        Args:
            checkpoint: Checkpoint to run
            inputs: Artifacts and static report for this run
            context: Shared context of the current run

        Returns:
            CheckpointSuccess or CheckpointFailure

        Raises:
            MissingCheckpointDefinition: If the checkpoint's template is absent
        """
        instruction = self.build_instruction(checkpoint, inputs, context)
        logger.info(
            f"[{checkpoint.name}] Prompt length {len(instruction)} chars, "
            f"{len(inputs.artifacts)} artifact(s)"
        )

        try:
            t0 = time.monotonic()
            raw_output = await self._engine.generate([{"role": "user", "content": instruction}])
            logger.info(
                f"[{checkpoint.name}] Engine responded in {time.monotonic() - t0:.1f}s "
                f"({len(raw_output)} chars)"
            )
        except EngineError as e:
            logger.error(f"[{checkpoint.name}] Engine call failed: {e}")
            return CheckpointFailure(checkpoint=checkpoint, error=str(e))

        try:
            parsed = extract_json(raw_output)
            if not isinstance(parsed, dict):
                raise ResponseParseError(
                    f"Expected a JSON object, got {type(parsed).__name__}"
                )
            result = self._to_result(checkpoint, parsed)
        except (ResponseParseError, ValidationError) as e:
            logger.error(f"[{checkpoint.name}] Response could not be parsed: {e}")
            return CheckpointFailure(checkpoint=checkpoint, error=str(e), raw_output=raw_output)

        # A malformed fragment never costs the checkpoint its result
        try:
            context.publish(checkpoint, parsed)
        except (ValidationError, ValueError, TypeError) as e:
            logger.warning(f"[{checkpoint.name}] Could not publish context: {e}")

        logger.info(
            f"[{checkpoint.name}] Parsed: status={result.status}, "
            f"violations={len(result.violations)}"
        )
        return CheckpointSuccess(result=result, raw_output=raw_output)

    def _to_result(self, checkpoint: Checkpoint, parsed: dict[str, Any]) -> CheckpointResult:
        """Validate a parsed response, taking identity from the definition table."""
        data = dict(parsed)
        reported = data.get("checkpoint_name")
        if reported and reported != checkpoint.name:
            logger.debug(f"[{checkpoint.name}] Engine reported name '{reported}', overriding")
        data["checkpoint_name"] = checkpoint.name
        data["checkpoint_priority"] = checkpoint.priority
        if data.get("violations") is None:
            data["violations"] = []
        if not data.get("status"):
            data["status"] = "fail" if data.get("violations") else "pass"
        return CheckpointResult.model_validate(data)
