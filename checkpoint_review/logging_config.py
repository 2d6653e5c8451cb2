# checkpoint_review/logging_config.py
"""
Stderr-only logging configuration.

stdout carries the rendered report, so ALL logging goes to stderr.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

HUMAN_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

LEVELS = {
    "quiet": logging.WARNING,
    "normal": logging.INFO,
    "verbose": logging.DEBUG,
}


class JsonFormatter(logging.Formatter):
    """Formats log records as JSON for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON line."""
        log_data: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        if record.exc_info:
            log_data["exc"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def configure_logging(verbosity: str = "normal", json_output: bool = False) -> None:
    """
    Install a single stderr handler on the root logger.

    Args:
        verbosity: "quiet", "normal" or "verbose"
        json_output: JSON lines instead of the human-readable format
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter() if json_output else logging.Formatter(HUMAN_FORMAT))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(LEVELS.get(verbosity, logging.INFO))

    # SDK request logging is noise unless debugging
    for logger_name in ["httpx", "httpcore", "anthropic"]:
        logging.getLogger(logger_name).setLevel(
            logging.DEBUG if verbosity == "verbose" else logging.WARNING
        )
