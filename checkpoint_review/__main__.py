# checkpoint_review/__main__.py
"""Entry point for `python -m checkpoint_review`."""

from checkpoint_review.cli import app

if __name__ == "__main__":
    app()
