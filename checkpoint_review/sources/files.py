# checkpoint_review/sources/files.py
"""
Local artifact sources: explicit path lists and glob discovery.

Paths stay exactly as given (usually project-relative) because they are what
the engine sees and what reports cite; they are resolved against the project
root only for existence checks and reading.
"""

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from checkpoint_review.errors import InputError
from checkpoint_review.pipeline.models import Artifact

logger = logging.getLogger(__name__)


def split_paths(value: str) -> list[str]:
    """Split a comma-separated path list, dropping blanks."""
    return [part.strip() for part in value.split(",") if part.strip()]


def _resolve(path: str, root: Path) -> Path:
    candidate = Path(path)
    return candidate if candidate.is_absolute() else root / candidate


def discover(root: Path, patterns: Sequence[str], exclude: Sequence[str] = ()) -> list[str]:
    """
    Find files under root matching any glob pattern.

    Args:
        root: Project root
        patterns: Globs relative to root (e.g. "force-app/**/*.cls")
        exclude: Path fragments; any path containing one is skipped

    Returns:
        Sorted, de-duplicated POSIX paths relative to root
    """
    found: set[str] = set()
    for pattern in patterns:
        for path in root.glob(pattern):
            if not path.is_file():
                continue
            relative = path.relative_to(root).as_posix()
            if any(fragment in relative for fragment in exclude):
                continue
            found.add(relative)
    logger.info(f"Discovered {len(found)} file(s) matching {list(patterns)}")
    return sorted(found)


def existing_paths(paths: Iterable[str], root: Path, label: str = "source") -> list[str]:
    """
    Keep the paths that exist, warning about the rest.

    Raises:
        InputError: If none of the paths exist
    """
    present: list[str] = []
    missing: list[str] = []
    for path in paths:
        (present if _resolve(path, root).exists() else missing).append(path)

    if missing:
        logger.warning(f"{len(missing)} file(s) not found: {', '.join(missing)}")
    if not present:
        raise InputError(f"No valid {label} files found to review")

    logger.info(f"{len(present)} file(s) will be reviewed")
    return present


def read_artifact(path: str, root: Path, role: str = "source") -> Artifact:
    """Read one artifact; unreadable files become a placeholder note."""
    try:
        content = _resolve(path, root).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not read {path}: {e}")
        return Artifact(path=path, content=f"// Error reading file: {e}", role=role, readable=False)
    return Artifact(path=path, content=content, role=role)


def read_artifacts(paths: Iterable[str], root: Path, role: str = "source") -> list[Artifact]:
    return [read_artifact(path, root, role) for path in paths]


def read_required(path: str, root: Path, role: str, description: str) -> Artifact:
    """
    Read an artifact that must exist (e.g. the prompt template under review).

    Raises:
        InputError: If the file is missing or unreadable
    """
    resolved = _resolve(path, root)
    if not resolved.is_file():
        raise InputError(f"{description} not found: {path}")
    artifact = read_artifact(path, root, role)
    if not artifact.readable:
        raise InputError(f"{description} could not be read: {path}")
    return artifact
