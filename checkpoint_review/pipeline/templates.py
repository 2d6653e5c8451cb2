# checkpoint_review/pipeline/templates.py
"""Instruction template loading for checkpoints."""

from pathlib import Path

from checkpoint_review.errors import MissingCheckpointDefinition


def template_path(template_dir: Path, checkpoint_name: str) -> Path:
    return template_dir / f"{checkpoint_name}.md"


def load_template(template_dir: Path, checkpoint_name: str) -> str:
    """Load a checkpoint's instruction template by name.

    Args:
        template_dir: Directory holding one <checkpoint>.md per checkpoint
        checkpoint_name: Checkpoint identifier (e.g. '01-pmd-static-analysis')

    Returns:
        Template text

    Raises:
        MissingCheckpointDefinition: If the template file doesn't exist
    """
    path = template_path(template_dir, checkpoint_name)
    if not path.is_file():
        raise MissingCheckpointDefinition(checkpoint_name, str(path))

    return path.read_text(encoding="utf-8")


__all__ = ["load_template", "template_path"]
