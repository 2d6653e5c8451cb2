# checkpoint_review/static_analysis.py
"""
Static-analysis report provider.

Runs a linter (PMD, ESLint, ...) that writes a JSON report, or loads an
existing report. The report is handed verbatim to the first checkpoint; the
only validation is that it parses as JSON.
"""

import json
import logging
import os
import subprocess
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from checkpoint_review.errors import StaticAnalysisError

logger = logging.getLogger(__name__)

REPORT_PLACEHOLDER = "{report}"


@dataclass(frozen=True)
class StaticAnalysisCommand:
    """
    How to produce a static-analysis report.

    Attributes:
        tool: Display name (e.g. "PMD")
        args: Command line; "{report}" is replaced with the absolute report path
        working_dir: Directory (relative to the project root) to run in
        report_prefix: File name prefix of the timestamped report
        install_hint: Message shown when the executable is missing
        env: Extra environment variables; "{cwd}" expands to the absolute working dir
    """

    tool: str
    args: tuple[str, ...]
    working_dir: str = "."
    report_prefix: str = "static_report"
    install_hint: str = ""
    env: dict[str, str] = field(default_factory=dict)


def load_report(path: Path) -> Any:
    """
    Load an existing JSON report.

    Raises:
        StaticAnalysisError: If the file is missing or not valid JSON
    """
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise StaticAnalysisError(f"Static analysis report not found: {path}")
    except json.JSONDecodeError as e:
        raise StaticAnalysisError(f"Static analysis report is not valid JSON ({path}): {e}")


class StaticAnalysisRunner:
    """Runs a StaticAnalysisCommand and returns its parsed JSON report."""

    def __init__(
        self,
        project_root: Path,
        tmp_dir: Path | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._project_root = project_root
        self._tmp_dir = tmp_dir or project_root / "tmp"
        self._clock = clock or datetime.now

    def report_path(self, command: StaticAnalysisCommand) -> Path:
        """Timestamped report location, e.g. tmp/pmd_apex_report_20250101_120000.json."""
        timestamp = self._clock().strftime("%Y%m%d_%H%M%S")
        return self._tmp_dir / f"{command.report_prefix}_{timestamp}.json"

    def run(self, command: StaticAnalysisCommand) -> Any:
        """
        Run the tool and parse its report.

        A non-zero exit status is expected when the tool finds violations, so
        the report file decides success, not the exit code.

        Raises:
            StaticAnalysisError: Tool missing, no report written, or invalid JSON
        """
        report = self.report_path(command).resolve()
        report.parent.mkdir(parents=True, exist_ok=True)
        cwd = (self._project_root / command.working_dir).resolve()

        args = [arg.replace(REPORT_PLACEHOLDER, str(report)) for arg in command.args]
        env = {**os.environ, **{k: v.replace("{cwd}", str(cwd)) for k, v in command.env.items()}}
        logger.info(f"[{command.tool}] Running: {' '.join(args)} (cwd={cwd})")

        try:
            completed = subprocess.run(
                args, cwd=cwd, env=env, capture_output=True, text=True, check=False
            )
        except FileNotFoundError:
            hint = command.install_hint or f"Please ensure {command.tool} is installed and in your PATH"
            raise StaticAnalysisError(f"{command.tool} not found. {hint}")

        if not report.exists():
            stderr = (completed.stderr or "").strip()[:500]
            raise StaticAnalysisError(
                f"{command.tool} execution failed (exit code {completed.returncode}): {stderr}"
            )

        if completed.returncode != 0:
            logger.info(f"[{command.tool}] Report generated with violations (exit code {completed.returncode})")

        try:
            data = json.loads(report.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise StaticAnalysisError(f"{command.tool} generated invalid JSON: {e}")

        logger.info(f"[{command.tool}] Report written to {report}")
        return data
