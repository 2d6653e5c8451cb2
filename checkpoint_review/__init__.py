# checkpoint_review/__init__.py
"""
checkpoint-review: sequential multi-checkpoint reviews with one aggregated report.

Runs an ordered table of analysis checkpoints against code or prompt
artifacts, threads findings from earlier checkpoints into later ones and
merges everything into a de-duplicated, confidence-scored report.
"""

__version__ = "0.1.0"
