# checkpoint_review/sources/__init__.py
"""Artifact sources: explicit paths, glob discovery and pull requests."""

import logging
from pathlib import Path

from checkpoint_review.errors import InputError
from checkpoint_review.pipeline.checkpoints import ReviewVariant

from .files import discover, existing_paths, read_artifacts, read_required, split_paths
from .github import GitHubPullRequestSource, parse_pr_url

logger = logging.getLogger(__name__)


async def resolve_paths(
    variant: ReviewVariant,
    root: Path,
    files: str | None = None,
    pr_url: str | None = None,
    all_files: bool = False,
    github: GitHubPullRequestSource | None = None,
) -> list[str]:
    """
    Pick the files to review from exactly one source, in the order
    --files, --pr, --all, then keep the ones that exist.

    Raises:
        InputError: No source given, or no existing files left
    """
    if files:
        paths = split_paths(files)
        logger.info(f"Using {len(paths)} manually specified file(s)")
    elif pr_url:
        github = github or GitHubPullRequestSource()
        changed = await github.list_files(pr_url)
        paths = [p for p in changed if variant.file_filter is None or variant.file_filter(p)]
        logger.info(f"PR has {len(changed)} changed file(s), {len(paths)} {variant.artifact_label} file(s)")
    elif all_files:
        if not variant.discover_globs:
            raise InputError(f"--all is not supported for '{variant.name}' reviews")
        paths = discover(root, variant.discover_globs, variant.discover_exclude)
    else:
        raise InputError("No file detection method specified. Use --files, --pr, or --all")

    return existing_paths(paths, root, variant.artifact_label)


__all__ = [
    "GitHubPullRequestSource",
    "discover",
    "existing_paths",
    "parse_pr_url",
    "read_artifacts",
    "read_required",
    "resolve_paths",
    "split_paths",
]
