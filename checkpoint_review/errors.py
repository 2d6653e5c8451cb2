# checkpoint_review/errors.py
"""
Exception taxonomy for checkpoint reviews.

Configuration and input errors abort a run before any checkpoint executes.
Engine and parse errors raised inside a checkpoint are converted into an
error result by the executor; outside a checkpoint loop they are fatal.
"""


class ReviewError(Exception):
    """Base class for all errors surfaced to the CLI."""


class ConfigurationError(ReviewError):
    """Setup problem that must be fixed before a review can run."""


class MissingCheckpointDefinition(ConfigurationError):
    """A checkpoint's instruction template could not be found."""

    def __init__(self, checkpoint_name: str, path: str):
        self.checkpoint_name = checkpoint_name
        self.path = path
        super().__init__(f"Checkpoint prompt not found: {path}")


class MissingReferenceDocuments(ConfigurationError):
    """One or more reference documents required by the checkpoint set are missing."""

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        listing = "\n".join(f"  - {path}" for path in self.missing)
        super().__init__(
            f"Missing required dependency files:\n{listing}\n\n"
            "These files are required for checkpoint cross-references. "
            "Please ensure they exist before running the review."
        )


class MissingCredentials(ConfigurationError):
    """Credentials for the analysis engine are not configured."""


class EngineError(ReviewError):
    """Generic failure talking to the analysis engine."""


class EngineAuthenticationError(EngineError):
    """The engine rejected our credentials."""


class EngineRateLimitError(EngineError):
    """The engine refused the request because of quota or rate limits."""


class EngineConnectionError(EngineError):
    """The engine could not be reached."""


class ResponseParseError(ReviewError):
    """The engine response did not contain valid structured data."""


class InputError(ReviewError):
    """No usable artifacts, or an invalid artifact specifier."""


class StaticAnalysisError(ReviewError):
    """The static-analysis tool failed or produced an unreadable report."""


class PipelineStopped(ReviewError):
    """A stop was requested between checkpoints."""

    def __init__(self, completed: int, total: int):
        self.completed = completed
        self.total = total
        super().__init__(f"Pipeline stopped after {completed}/{total} checkpoints")
