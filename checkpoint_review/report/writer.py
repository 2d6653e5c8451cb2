# checkpoint_review/report/writer.py
"""Persists rendered reports under the output directory."""

import logging
import re
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)


def filesystem_timestamp(moment: datetime | None = None) -> str:
    """ISO-8601 timestamp (millisecond precision, Z suffix) with ':' and '.' replaced by '-'."""
    moment = (moment or datetime.now(timezone.utc)).astimezone(timezone.utc)
    iso = moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return re.sub(r"[:.]", "-", iso)


def report_filename(
    variant: str,
    label: str | None = None,
    modular: bool = True,
    moment: datetime | None = None,
    extension: str = "md",
) -> str:
    """
    Build a report file name.

    Example:
        report_filename("apex", "JIRA-12") ->
        "JIRA-12-apex-code-review-modular-2025-01-01T12-00-00-000Z.md"
    """
    prefix = f"{label}-" if label else ""
    mode = "-modular" if modular else ""
    return f"{prefix}{variant}-code-review{mode}-{filesystem_timestamp(moment)}.{extension}"


class ReportWriter:
    """Writes report files into one output directory, creating it on demand."""

    def __init__(self, output_dir: Path):
        self.output_dir = output_dir

    def write(self, name: str, content: str) -> Path:
        """
        Write content to output_dir/name.

        Returns:
            Path of the written file
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / name
        path.write_text(content, encoding="utf-8")
        logger.info(f"Report saved to {path}")
        return path
