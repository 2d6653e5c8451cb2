# checkpoint_review/report/__init__.py
"""Report rendering and persistence."""

from .renderer import ReportRenderer
from .writer import ReportWriter, report_filename

__all__ = ["ReportRenderer", "ReportWriter", "report_filename"]
