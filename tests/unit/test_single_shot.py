# tests/unit/test_single_shot.py
"""Tests for the single-shot (monolithic) review mode."""

import json
from unittest.mock import AsyncMock

import pytest

from checkpoint_review.errors import ConfigurationError, EngineError
from checkpoint_review.single_shot import execute_review, prepare_prompt, summarize_review


@pytest.fixture
def template(tmp_path):
    path = tmp_path / "APEX_CODE_REVIEW.md"
    path.write_text("Files: {!$Input:file_paths}\nReport:\n{!$Input:pmd_report_json}\n")
    return path


class TestPreparePrompt:
    def test_substitutes_inputs(self, template):
        prompt = prepare_prompt(template, {"files": []}, ["A.cls", "B.cls"])
        assert "Files: A.cls,B.cls" in prompt
        assert json.dumps({"files": []}, indent=2) in prompt

    def test_raw_report_text_kept(self, template):
        prompt = prepare_prompt(template, '{"raw": true}', ["A.cls"])
        assert '{"raw": true}' in prompt

    def test_missing_template(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Prompt template not found"):
            prepare_prompt(tmp_path / "nope.md", {}, [])

    def test_unreplaced_placeholder(self, tmp_path):
        path = tmp_path / "t.md"
        path.write_text("{!$Input:file_paths} {!$Input:ticket_id}")
        with pytest.raises(ConfigurationError, match=r"unreplaced variables: \{!\$Input:ticket_id\}"):
            prepare_prompt(path, {}, ["A.cls"])


class TestExecuteReview:
    @pytest.mark.asyncio
    async def test_sends_one_message(self):
        engine = AsyncMock()
        engine.generate.return_value = "review"

        assert await execute_review(engine, "prompt") == "review"
        engine.generate.assert_awaited_once_with([{"role": "user", "content": "prompt"}])

    @pytest.mark.asyncio
    async def test_engine_errors_propagate(self):
        engine = AsyncMock()
        engine.generate.side_effect = EngineError("Claude API error: overloaded")

        with pytest.raises(EngineError):
            await execute_review(engine, "prompt")


class TestSummarizeReview:
    def test_structured(self):
        review = {
            "overall_assessment": {
                "production_readiness": "needs-fixes",
                "rfc_compliance_status": "partial",
                "confidence_score": 0.8,
            },
            "critical_violations": [{}, {}],
            "high_priority_issues": [],
            "static_method_analysis": {"summary": "3 static methods"},
        }
        lines = summarize_review("```json\n" + json.dumps(review) + "\n```")
        assert lines == [
            "Production Readiness: needs-fixes",
            "RFC Compliance: partial",
            "Confidence Score: 0.8",
            "Critical Violations: 2",
            "High Priority Issues: 0",
            "Static Method Analysis: 3 static methods",
        ]

    def test_missing_fields(self):
        lines = summarize_review('{"overall_assessment": {}}')
        assert lines == ["Production Readiness: N/A", "RFC Compliance: N/A", "Confidence Score: N/A"]

    def test_free_text(self):
        text = "The code looks fine. " * 40
        lines = summarize_review(text)
        assert lines[0] == f"Review length: {len(text)} characters"
        assert lines[1] == f"Preview: {text[:500]}..."
