# checkpoint_review/config/__init__.py
"""Configuration system for checkpoint-review."""

from .loader import apply_env_overrides, get_config_path, load_config
from .schema import (
    AnthropicConfig,
    GitHubConfig,
    OllamaConfig,
    OutputConfig,
    PathsConfig,
    ReviewConfig,
)

__all__ = [
    "ReviewConfig",
    "AnthropicConfig",
    "OllamaConfig",
    "GitHubConfig",
    "PathsConfig",
    "OutputConfig",
    "load_config",
    "get_config_path",
    "apply_env_overrides",
]
