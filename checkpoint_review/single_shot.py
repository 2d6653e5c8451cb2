# checkpoint_review/single_shot.py
"""
Single-shot (monolithic) review.

One prompt template covers the whole review: the static report and the file
list are substituted into it and the engine is called once. Unlike the
checkpoint pipeline there is nothing to isolate a failure into, so engine
errors propagate to the caller.
"""

import json
import logging
import re
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from checkpoint_review.errors import ConfigurationError, ResponseParseError
from checkpoint_review.pipeline.executor import AnalysisEngine
from checkpoint_review.pipeline.parsing import extract_json

logger = logging.getLogger(__name__)

STATIC_REPORT_PLACEHOLDER = "{!$Input:pmd_report_json}"
FILE_PATHS_PLACEHOLDER = "{!$Input:file_paths}"
UNREPLACED_PATTERN = re.compile(r"\{!\$Input:[^}]+\}")
PREVIEW_CHARS = 500


def prepare_prompt(template_path: Path, static_report: Any, file_paths: Sequence[str]) -> str:
    """
    Load the monolithic template and fill in its inputs.

    Args:
        template_path: Prompt template file
        static_report: Parsed static-analysis report (or its raw JSON text)
        file_paths: Files under review, joined with commas

    Raises:
        ConfigurationError: Template missing or placeholders left unreplaced
    """
    if not template_path.is_file():
        raise ConfigurationError(f"Prompt template not found: {template_path}")

    report_text = static_report if isinstance(static_report, str) else json.dumps(static_report, indent=2)
    prompt = template_path.read_text(encoding="utf-8")
    prompt = prompt.replace(STATIC_REPORT_PLACEHOLDER, report_text)
    prompt = prompt.replace(FILE_PATHS_PLACEHOLDER, ",".join(file_paths))

    logger.debug(f"Template loaded: {template_path} ({len(prompt)} chars)")
    unreplaced = UNREPLACED_PATTERN.findall(prompt)
    if unreplaced:
        raise ConfigurationError(f"Template contains unreplaced variables: {', '.join(unreplaced)}")
    return prompt


async def execute_review(engine: AnalysisEngine, prompt: str) -> str:
    """Send the prepared prompt; EngineError subclasses propagate."""
    logger.info(f"Sending single-shot review request ({len(prompt)} chars)")
    review_text = await engine.generate([{"role": "user", "content": prompt}])
    logger.info(f"Review completed ({len(review_text)} chars)")
    return review_text


def summarize_review(review_text: str) -> list[str]:
    """
    Summary lines for a single-shot review.

    Structured responses yield readiness, compliance, confidence and counts;
    anything else yields its length and a preview.
    """
    try:
        review = extract_json(review_text)
    except ResponseParseError:
        review = None

    if not isinstance(review, dict):
        logger.debug("Response is not JSON format")
        return [
            f"Review length: {len(review_text)} characters",
            f"Preview: {review_text[:PREVIEW_CHARS]}...",
        ]

    lines = []
    assessment = review.get("overall_assessment")
    if isinstance(assessment, dict):
        lines.append(f"Production Readiness: {assessment.get('production_readiness') or 'N/A'}")
        lines.append(f"RFC Compliance: {assessment.get('rfc_compliance_status') or 'N/A'}")
        lines.append(f"Confidence Score: {assessment.get('confidence_score') or 'N/A'}")
    if isinstance(review.get("critical_violations"), list):
        lines.append(f"Critical Violations: {len(review['critical_violations'])}")
    if isinstance(review.get("high_priority_issues"), list):
        lines.append(f"High Priority Issues: {len(review['high_priority_issues'])}")
    static_methods = review.get("static_method_analysis")
    if isinstance(static_methods, dict) and static_methods.get("summary"):
        lines.append(f"Static Method Analysis: {static_methods['summary']}")
    return lines
