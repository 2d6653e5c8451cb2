# checkpoint_review/variants/common.py
"""Payload strategy shared by source-code variants with a static-analysis first pass."""

from typing import Any

from checkpoint_review.pipeline.checkpoints import PayloadFn
from checkpoint_review.pipeline.context import STATIC_FINDINGS
from checkpoint_review.pipeline.models import Checkpoint, ReviewInput


def static_source_payload(first_checkpoint: str, report_key: str, context_key: str) -> PayloadFn:
    """
    Build a payload strategy for "static analysis, then source checkpoints".

    Every checkpoint receives the file paths and contents. The first checkpoint
    also receives the raw static report under report_key; later checkpoints get
    the static findings published by the first one under context_key, omitted
    when the first checkpoint produced none.
    """

    def build(checkpoint: Checkpoint, inputs: ReviewInput, visible: dict[str, Any]) -> dict[str, Any]:
        sources = inputs.by_role("source")
        payload: dict[str, Any] = {
            "files": [a.path for a in sources],
            "file_contents": [a.content for a in sources],
        }
        if checkpoint.name == first_checkpoint:
            payload[report_key] = inputs.static_report
        elif STATIC_FINDINGS in visible:
            payload[context_key] = visible[STATIC_FINDINGS]["violations"]
        return payload

    return build
