# checkpoint_review/config/schema.py
"""
Pydantic configuration models for checkpoint-review.

All models use extra="ignore" to allow unknown YAML keys without crashing.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class AnthropicConfig(BaseModel):
    """Anthropic API configuration."""

    model_config = ConfigDict(extra="ignore")

    api_key: str | None = Field(
        default=None,
        description="Anthropic API key (ANTHROPIC_API_KEY overrides this)",
    )
    model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Model used for every checkpoint",
    )
    max_tokens: int = Field(
        default=16000,
        ge=1,
        description="Maximum output tokens per checkpoint call",
    )
    timeout: float = Field(default=600.0, gt=0, description="Request timeout in seconds")


class OllamaConfig(BaseModel):
    """Ollama server configuration."""

    model_config = ConfigDict(extra="ignore")

    base_url: str = Field(
        default="http://localhost:11434", description="Ollama API base URL"
    )
    model: str = Field(
        default="qwen2.5-coder:32b-instruct",
        description="Ollama model used for every checkpoint",
    )
    timeout: int = Field(
        default=300, description="Request timeout in seconds (generous for model loading)"
    )


class GitHubConfig(BaseModel):
    """GitHub access for pull-request artifact sources."""

    model_config = ConfigDict(extra="ignore")

    token: str | None = Field(
        default=None, description="GitHub token (GITHUB_TOKEN overrides this)"
    )
    api_url: str = Field(default="https://api.github.com", description="GitHub REST API base URL")


class PathsConfig(BaseModel):
    """Where checkpoint templates and reference documents live."""

    model_config = ConfigDict(extra="ignore")

    templates_root: str = Field(
        default="exec",
        description="Directory holding one template subdirectory per review variant",
    )
    project_root: str = Field(
        default=".",
        description="Base directory for reference documents, static analysis and discovery",
    )


class OutputConfig(BaseModel):
    """Output and file path configuration."""

    model_config = ConfigDict(extra="ignore")

    output_dir: str = Field(
        default="docs/analysis",
        description="Directory for generated reports (relative to project root)",
    )
    verbosity: Literal["quiet", "normal", "verbose"] = Field(
        default="normal", description="Logging verbosity level"
    )
    json_logs: bool = Field(default=False, description="Emit log records as JSON lines on stderr")


class ReviewConfig(BaseModel):
    """Root configuration for checkpoint-review."""

    model_config = ConfigDict(extra="ignore")

    provider: Literal["anthropic", "ollama"] = Field(
        default="anthropic", description="Analysis engine to use"
    )
    anthropic: AnthropicConfig = Field(default_factory=AnthropicConfig)
    ollama: OllamaConfig = Field(default_factory=OllamaConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
