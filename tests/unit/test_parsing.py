# tests/unit/test_parsing.py
"""Tests for JSON extraction from engine responses."""

import pytest

from checkpoint_review.errors import ResponseParseError
from checkpoint_review.pipeline.parsing import extract_json


class TestExtractJson:
    """Extraction strategies in priority order."""

    def test_json_fence(self):
        text = 'Here you go:\n```json\n{"status": "pass"}\n```\nDone.'
        assert extract_json(text) == {"status": "pass"}

    def test_bare_fence(self):
        text = 'Result:\n```\n{"status": "fail"}\n```'
        assert extract_json(text) == {"status": "fail"}

    def test_json_fence_preferred_over_bare_fence(self):
        text = '```\n{"which": "bare"}\n```\n```json\n{"which": "json"}\n```'
        assert extract_json(text) == {"which": "json"}

    def test_raw_json(self):
        assert extract_json('  {"violations": []}  ') == {"violations": []}

    def test_prose_around_object(self):
        text = 'The analysis is complete. {"status": "warning", "violations": []} Thanks!'
        assert extract_json(text) == {"status": "warning", "violations": []}

    def test_raw_array(self):
        assert extract_json("[1, 2, 3]") == [1, 2, 3]

    def test_truncated_object_keeps_complete_items(self):
        text = (
            '{"status": "fail", "violations": [{"category": "A", "issue": "x"}, '
            '{"category": "B", "iss'
        )
        result = extract_json(text)
        assert result["status"] == "fail"
        assert result["violations"][0] == {"category": "A", "issue": "x"}
        assert result["violations"][1] == {"category": "B"}

    def test_truncated_inside_value(self):
        result = extract_json('{"status": "pass", "summary": {"text": "all go')
        assert result == {"status": "pass", "summary": {"text": "all go"}}

    def test_trailing_comma_after_truncation(self):
        assert extract_json('{"a": 1, "b": [1, 2,') == {"a": 1, "b": [1, 2]}

    def test_no_json_raises(self):
        with pytest.raises(ResponseParseError, match="Could not extract valid JSON"):
            extract_json("I could not complete the analysis.")

    def test_error_includes_preview(self):
        with pytest.raises(ResponseParseError) as exc_info:
            extract_json("no json here")
        assert "no json here" in str(exc_info.value)
