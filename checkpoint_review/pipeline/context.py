# checkpoint_review/pipeline/context.py
"""
Shared context passed from producer checkpoints to consumer checkpoints.

Each fragment is a small typed model tagged with a ``kind``. A checkpoint
declares the kinds it produces and consumes; the store refuses writes that
were not declared and only hands a checkpoint the kinds it consumes.
"""

import logging
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from checkpoint_review.pipeline.models import Checkpoint

logger = logging.getLogger(__name__)

STATIC_FINDINGS = "static_findings"
STRUCTURE = "structure"
DECISION_LOGIC = "decision_logic"
TEST_SUITE = "test_suite"


def _dig(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Walk nested dicts, returning default on any missing or non-dict step."""
    current: Any = data
    for key in keys:
        if not isinstance(current, dict) or key not in current:
            return default
        current = current[key]
    return current if current is not None else default


def _dig_list(data: dict[str, Any], *keys: str) -> list[Any]:
    value = _dig(data, *keys, default=[])
    if isinstance(value, list):
        return value
    logger.warning(f"Expected a list at '{'.'.join(keys)}', got {type(value).__name__}; using []")
    return []


def _dig_float(data: dict[str, Any], *keys: str, default: float = 0.0) -> float:
    """Numbers pass through; strings like "0.85" or "85%" are parsed."""
    value = _dig(data, *keys, default=default)
    if isinstance(value, bool):
        value = str(value)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        try:
            if text.endswith("%"):
                return float(text[:-1]) / 100
            return float(text)
        except ValueError:
            pass
    logger.warning(f"Expected a number at '{'.'.join(keys)}', got {value!r}; using {default}")
    return default


def _dig_str(data: dict[str, Any], *keys: str, default: str) -> str:
    value = _dig(data, *keys, default=default)
    if isinstance(value, str):
        return value
    logger.warning(f"Expected a string at '{'.'.join(keys)}', got {value!r}; using '{default}'")
    return default


class _Fragment(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    @classmethod
    def extract(cls, parsed: dict[str, Any]) -> "_Fragment":
        """Build the fragment, falling back to defaults for malformed fields."""
        raise NotImplementedError


class StaticFindings(_Fragment):
    """Violations found by the static-analysis checkpoint."""

    kind: Literal["static_findings"] = STATIC_FINDINGS
    violations: list[dict[str, Any]] = Field(default_factory=list)

    @classmethod
    def extract(cls, parsed: dict[str, Any]) -> "StaticFindings":
        return cls(violations=[v for v in _dig_list(parsed, "violations") if isinstance(v, dict)])


class StructureResults(_Fragment):
    """Which template sections exist and how compliant the structure is."""

    kind: Literal["structure"] = STRUCTURE
    sections_present: list[str] = Field(default_factory=list)
    compliance_score: float = 0.0

    @classmethod
    def extract(cls, parsed: dict[str, Any]) -> "StructureResults":
        return cls(
            sections_present=[str(s) for s in _dig_list(parsed, "sections_present")],
            compliance_score=_dig_float(parsed, "structure_compliance", "compliance_score"),
        )


class DecisionLogicResults(_Fragment):
    """Expected behaviours and decision-path completeness of a template."""

    kind: Literal["decision_logic"] = DECISION_LOGIC
    expected_behaviors: list[Any] = Field(default_factory=list)
    completeness: str = "minimal"
    validation_rules_count: int = 0

    @classmethod
    def extract(cls, parsed: dict[str, Any]) -> "DecisionLogicResults":
        return cls(
            expected_behaviors=_dig_list(parsed, "expected_behaviors"),
            completeness=_dig_str(parsed, "decision_paths", "completeness_assessment", default="minimal"),
            validation_rules_count=len(_dig_list(parsed, "validation_rules")),
        )


class TestSuiteResults(_Fragment):
    """Scenarios identified in a test suite and how well they read as a specification."""

    __test__ = False

    kind: Literal["test_suite"] = TEST_SUITE
    test_scenarios: list[Any] = Field(default_factory=list)
    tests_tell_stories: str = "no"
    tests_as_specification: str = "poor"

    @classmethod
    def extract(cls, parsed: dict[str, Any]) -> "TestSuiteResults":
        return cls(
            test_scenarios=_dig_list(parsed, "test_scenarios_identified"),
            tests_tell_stories=_dig_str(parsed, "kent_beck_assessment", "tests_tell_stories", default="no"),
            tests_as_specification=_dig_str(
                parsed, "kent_beck_assessment", "tests_as_specification", default="poor"
            ),
        )


FRAGMENT_TYPES: dict[str, type[_Fragment]] = {
    STATIC_FINDINGS: StaticFindings,
    STRUCTURE: StructureResults,
    DECISION_LOGIC: DecisionLogicResults,
    TEST_SUITE: TestSuiteResults,
}


class SharedContext:
    """
    Per-run store of tagged fragments.

    Created empty by the orchestrator at the start of a run and discarded at
    the end. Only the currently executing checkpoint writes to it, and only
    after its result has been parsed.
    """

    def __init__(self) -> None:
        self._fragments: dict[str, _Fragment] = {}

    def __len__(self) -> int:
        return len(self._fragments)

    def __contains__(self, kind: str) -> bool:
        return kind in self._fragments

    def get(self, kind: str) -> _Fragment | None:
        return self._fragments.get(kind)

    def put(self, checkpoint: Checkpoint, fragment: _Fragment) -> None:
        """Store a fragment on behalf of a checkpoint that declared it."""
        if fragment.kind not in checkpoint.produces:
            raise ValueError(
                f"Checkpoint '{checkpoint.name}' does not produce fragment '{fragment.kind}'"
            )
        self._fragments[fragment.kind] = fragment
        logger.debug(f"[{checkpoint.name}] Stored context fragment '{fragment.kind}'")

    def publish(self, checkpoint: Checkpoint, parsed: dict[str, Any]) -> list[str]:
        """
        Extract and store every fragment a producer checkpoint declares.

        Args:
            checkpoint: Checkpoint that just finished
            parsed: Its parsed engine response

        Returns:
            Kinds that were written
        """
        written = []
        for kind in checkpoint.produces:
            fragment_type = FRAGMENT_TYPES.get(kind)
            if fragment_type is None:
                raise ValueError(f"Unknown context fragment kind: {kind}")
            self.put(checkpoint, fragment_type.extract(parsed))
            written.append(kind)
        return written

    def view(self, checkpoint: Checkpoint) -> dict[str, _Fragment]:
        """Fragments visible to a checkpoint (only the kinds it consumes)."""
        return {
            kind: self._fragments[kind]
            for kind in checkpoint.consumes
            if kind in self._fragments
        }

    def clear(self) -> None:
        self._fragments.clear()
