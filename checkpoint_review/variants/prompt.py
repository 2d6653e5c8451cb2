# checkpoint_review/variants/prompt.py
"""
Prompt template and test suite review.

Three checkpoints read the template, three read its test suite. The shared
context carries the template's structure and expected behaviours plus the
scenarios found in the tests, and the run ends in a five-point PASS/FAIL
checklist.
"""

from pathlib import PurePath
from typing import Any

from checkpoint_review.pipeline.checkpoints import PassCriterion, ReviewVariant
from checkpoint_review.pipeline.context import DECISION_LOGIC, STRUCTURE, TEST_SUITE
from checkpoint_review.pipeline.models import (
    Checkpoint,
    CheckpointResult,
    Priority,
    ReviewInput,
    ViolationsBySeverity,
)

PROMPT_TEMPLATE_ROLE = "prompt_template"
TEST_SUITE_ROLE = "test_suite"

STRUCTURE_ANALYSIS = "01-structure-analysis"
DECISION_LOGIC_VALIDATION = "02-decision-logic-validation"
QUALITY_ASSESSMENT = "03-quality-assessment"
TEST_SUITE_ANALYSIS = "04-test-suite-analysis"
SPECIFICATION_ALIGNMENT = "05-specification-alignment"
TEST_SUITE_BEST_PRACTICES = "06-test-suite-best-practices"

ALIGNMENT_THRESHOLD = 0.7
ACCEPTABLE_SPECIFICATION_RATINGS = ("excellent", "good")

CHECKPOINTS = (
    Checkpoint(STRUCTURE_ANALYSIS, Priority.CRITICAL, 1, 0.9, produces=(STRUCTURE,)),
    Checkpoint(
        DECISION_LOGIC_VALIDATION, Priority.CRITICAL, 2, 0.7,
        consumes=(STRUCTURE,), produces=(DECISION_LOGIC,),
    ),
    Checkpoint(QUALITY_ASSESSMENT, Priority.HIGH, 3, 0.6, consumes=(STRUCTURE, DECISION_LOGIC)),
    Checkpoint(TEST_SUITE_ANALYSIS, Priority.CRITICAL, 4, 0.7, produces=(TEST_SUITE,)),
    Checkpoint(
        SPECIFICATION_ALIGNMENT, Priority.CRITICAL, 5, 0.8,
        consumes=(DECISION_LOGIC, TEST_SUITE),
    ),
    Checkpoint(TEST_SUITE_BEST_PRACTICES, Priority.MEDIUM, 6, 0.8, consumes=(TEST_SUITE,)),
)


def _content(inputs: ReviewInput, role: str) -> str:
    artifacts = inputs.by_role(role)
    return artifacts[0].content if artifacts else ""


def _structure(visible: dict[str, Any], default: dict[str, Any]) -> dict[str, Any]:
    if STRUCTURE not in visible:
        return default
    fragment = visible[STRUCTURE]
    return {
        "sections_present": fragment["sections_present"],
        "compliance_score": fragment["compliance_score"],
    }


def _structure_payload(checkpoint: Checkpoint, inputs: ReviewInput, visible: dict[str, Any]) -> dict[str, Any]:
    return {"prompt_template_content": _content(inputs, PROMPT_TEMPLATE_ROLE)}


def _decision_logic_payload(checkpoint: Checkpoint, inputs: ReviewInput, visible: dict[str, Any]) -> dict[str, Any]:
    return {
        "prompt_template_content": _content(inputs, PROMPT_TEMPLATE_ROLE),
        "structure_results": _structure(visible, {"sections_present": [], "compliance_score": 0.0}),
    }


def _quality_payload(checkpoint: Checkpoint, inputs: ReviewInput, visible: dict[str, Any]) -> dict[str, Any]:
    decision = visible.get(DECISION_LOGIC)
    return {
        "prompt_template_content": _content(inputs, PROMPT_TEMPLATE_ROLE),
        "structure_results": _structure(visible, {}),
        "decision_logic_results": (
            {
                "completeness": decision["completeness"],
                "validation_rules_count": decision["validation_rules_count"],
            }
            if decision
            else {}
        ),
    }


def _test_suite_payload(checkpoint: Checkpoint, inputs: ReviewInput, visible: dict[str, Any]) -> dict[str, Any]:
    tests = inputs.by_role(TEST_SUITE_ROLE)
    return {
        "test_suite_content": tests[0].content if tests else "",
        "test_file_name": PurePath(tests[0].path).name if tests else "test.ts",
    }


def _alignment_payload(checkpoint: Checkpoint, inputs: ReviewInput, visible: dict[str, Any]) -> dict[str, Any]:
    decision = visible.get(DECISION_LOGIC) or {}
    suite = visible.get(TEST_SUITE) or {}
    return {
        "expected_behaviors": decision.get("expected_behaviors", []),
        "test_scenarios": suite.get("test_scenarios", []),
        "tests_tell_stories_rating": suite.get("tests_tell_stories", "no"),
        "tests_as_specification_rating": suite.get("tests_as_specification", "poor"),
    }


def _best_practices_payload(checkpoint: Checkpoint, inputs: ReviewInput, visible: dict[str, Any]) -> dict[str, Any]:
    suite = visible.get(TEST_SUITE) or {}
    return {
        "test_suite_content": _content(inputs, TEST_SUITE_ROLE),
        "test_scenarios": suite.get("test_scenarios", []),
    }


def _field(result: CheckpointResult | None, *keys: str) -> Any:
    """Read a nested engine-supplied field of a result, None when absent."""
    if result is None:
        return None
    current: Any = result.model_dump()
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def _all_behaviors_tested(results: dict[str, CheckpointResult], buckets: ViolationsBySeverity) -> bool:
    return _field(results.get(SPECIFICATION_ALIGNMENT), "summary", "behaviors_without_tests_count") == 0


def _no_generic_test_names(results: dict[str, CheckpointResult], buckets: ViolationsBySeverity) -> bool:
    return _field(results.get(TEST_SUITE_ANALYSIS), "kent_beck_assessment", "tests_tell_stories") == "yes"


def _no_critical_violations(results: dict[str, CheckpointResult], buckets: ViolationsBySeverity) -> bool:
    return not buckets.critical


def _alignment_score_acceptable(results: dict[str, CheckpointResult], buckets: ViolationsBySeverity) -> bool:
    score = _field(results.get(SPECIFICATION_ALIGNMENT), "alignment_score")
    return isinstance(score, (int, float)) and score >= ALIGNMENT_THRESHOLD


def _specification_quality_acceptable(results: dict[str, CheckpointResult], buckets: ViolationsBySeverity) -> bool:
    rating = _field(results.get(TEST_SUITE_ANALYSIS), "kent_beck_assessment", "tests_as_specification")
    return rating in ACCEPTABLE_SPECIFICATION_RATINGS


CRITERIA = (
    PassCriterion("all_behaviors_tested", "All behaviors tested", _all_behaviors_tested),
    PassCriterion("no_generic_test_names", "No generic test names", _no_generic_test_names),
    PassCriterion("no_critical_violations", "No critical violations", _no_critical_violations),
    PassCriterion(
        "alignment_score_acceptable",
        f"Alignment score >= {ALIGNMENT_THRESHOLD}",
        _alignment_score_acceptable,
    ),
    PassCriterion(
        "kent_beck_quality_acceptable",
        "Kent Beck quality good/excellent",
        _specification_quality_acceptable,
    ),
)

PROMPT = ReviewVariant(
    name="prompt",
    title="Prompt Template & Test Suite Review - Modular Checkpoint Analysis",
    review_type="modular-checkpoint-prompt-review",
    checkpoints=CHECKPOINTS,
    template_subdir="prompt-template-review-checkpoints",
    reference_documents=("development/prompt_development_and_testing/guide/prompt-guide.md",),
    payload_builders={
        STRUCTURE_ANALYSIS: _structure_payload,
        DECISION_LOGIC_VALIDATION: _decision_logic_payload,
        QUALITY_ASSESSMENT: _quality_payload,
        TEST_SUITE_ANALYSIS: _test_suite_payload,
        SPECIFICATION_ALIGNMENT: _alignment_payload,
        TEST_SUITE_BEST_PRACTICES: _best_practices_payload,
    },
    criteria=CRITERIA,
    rationale_note=(
        "Higher confidence in structure analysis (0.9) and alignment checks (0.8), "
        "moderate confidence in test analysis (0.7-0.8), lower confidence in "
        "subjective quality assessments (0.6-0.7)."
    ),
    artifact_label="prompt",
)
