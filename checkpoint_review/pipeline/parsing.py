# checkpoint_review/pipeline/parsing.py
"""
Structured-payload extraction from engine responses.

Engines frequently wrap JSON in markdown fences or surround it with prose, and
long answers can be cut off mid-object. extract_json() looks inside the usual
wrappers first, then falls back to the raw text, then to a brace scan with
truncation repair.
"""

import json
import logging
import re
from typing import Any

from checkpoint_review.errors import ResponseParseError

logger = logging.getLogger(__name__)

_JSON_FENCE = re.compile(r"```json\s*\n(.+?)\n\s*```", re.DOTALL | re.IGNORECASE)
_BARE_FENCE = re.compile(r"```[a-zA-Z0-9_-]*\s*\n(.+?)\n\s*```", re.DOTALL)
_OUTER_BLOCK = re.compile(r"(\{.*\}|\[.*\])", re.DOTALL)

_MAX_REPAIR_STEPS = 200


def _scan_delimiters(text: str) -> tuple[str, bool]:
    """Find the containers left open outside of JSON strings.

    Returns (closing_suffix, ends_inside_string), where closing_suffix closes
    every open container innermost first.
    """
    stack: list[str] = []
    in_string = escaped = False
    for ch in text:
        if escaped:
            escaped = False
        elif ch == "\\" and in_string:
            escaped = True
        elif ch == '"':
            in_string = not in_string
        elif in_string:
            continue
        elif ch == "{":
            stack.append("}")
        elif ch == "[":
            stack.append("]")
        elif ch in "}]" and stack and stack[-1] == ch:
            stack.pop()
    return "".join(reversed(stack)), in_string


def _repair_truncated(candidate: str) -> Any | None:
    """Trim a truncated JSON document back to a valid prefix and close it.

    Handles an unterminated string, dangling keys, trailing commas and
    unclosed containers.
    """
    text = candidate
    closers, in_string = _scan_delimiters(text)
    if in_string:
        text += '"'

    for _ in range(_MAX_REPAIR_STEPS):
        try:
            return json.loads(text + closers)
        except json.JSONDecodeError:
            pass

        text = text.rstrip()
        if not text:
            return None
        if text[-1] in ",:":
            text = text[:-1]
            continue
        if text.endswith('"'):
            # Dangling key or partial value: drop the whole string token
            start = text.rfind('"', 0, len(text) - 1)
            if start >= 0:
                before = text[:start].rstrip()
                if before and before[-1] in ",:[{":
                    text = before.rstrip(",")
                    closers, _ = _scan_delimiters(text)
                    continue
        text = text[:-1]
        closers, in_string = _scan_delimiters(text)
        if in_string:
            text += '"'
            closers, in_string = _scan_delimiters(text)
    return None


def _try_load(text: str) -> tuple[bool, Any]:
    try:
        return True, json.loads(text.strip())
    except json.JSONDecodeError:
        return False, None


def extract_json(response_text: str) -> Any:
    """
    Extract a JSON value from an engine response.

    Strategies, in order:
    1. ```json fenced block
    2. Bare ``` fenced block
    3. The whole response
    4. Outermost {...} or [...] span
    5. Truncation repair starting at the first { or [

    Args:
        response_text: Raw engine response

    Returns:
        Parsed JSON value

    Raises:
        ResponseParseError: If no strategy yields valid JSON
    """
    for pattern in (_JSON_FENCE, _BARE_FENCE):
        match = pattern.search(response_text)
        if match:
            ok, value = _try_load(match.group(1))
            if ok:
                return value

    ok, value = _try_load(response_text)
    if ok:
        return value

    match = _OUTER_BLOCK.search(response_text)
    if match:
        ok, value = _try_load(match.group(1))
        if ok:
            return value

    starts = [i for i in (response_text.find("{"), response_text.find("[")) if i != -1]
    if starts:
        repaired = _repair_truncated(response_text[min(starts):])
        if repaired is not None:
            logger.warning(f"Recovered truncated JSON response ({len(response_text)} chars)")
            return repaired

    preview = response_text[:500].replace("\n", "\\n")
    raise ResponseParseError(
        f"Could not extract valid JSON from response ({len(response_text)} chars). "
        f"Preview: {preview}"
    )
