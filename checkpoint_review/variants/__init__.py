# checkpoint_review/variants/__init__.py
"""Registry of review variants."""

from checkpoint_review.pipeline.checkpoints import ReviewVariant

from .apex import APEX
from .lwc import LWC
from .prompt import PROMPT

VARIANTS: dict[str, ReviewVariant] = {v.name: v for v in (APEX, LWC, PROMPT)}


def get_variant(name: str) -> ReviewVariant:
    """
    Look up a variant by name.

    Raises:
        KeyError: With the list of known variants
    """
    try:
        return VARIANTS[name]
    except KeyError:
        raise KeyError(f"Unknown review variant '{name}'. Known: {', '.join(sorted(VARIANTS))}") from None


__all__ = ["APEX", "LWC", "PROMPT", "VARIANTS", "get_variant"]
