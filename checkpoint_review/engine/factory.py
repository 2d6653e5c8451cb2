# checkpoint_review/engine/factory.py
"""Factory for creating the configured analysis engine."""

from checkpoint_review.config.schema import ReviewConfig
from checkpoint_review.errors import MissingCredentials

from .anthropic_client import AnthropicEngine
from .ollama_client import OllamaEngine


def create_engine(config: ReviewConfig) -> AnthropicEngine | OllamaEngine:
    """
    Create the engine selected by config.provider.

    Raises:
        MissingCredentials: provider="anthropic" without an API key
    """
    if config.provider == "ollama":
        return OllamaEngine(
            base_url=config.ollama.base_url,
            model=config.ollama.model,
            timeout=config.ollama.timeout,
        )
    if not config.anthropic.api_key:
        raise MissingCredentials(
            "ANTHROPIC_API_KEY environment variable is not set. "
            "Please set it with: export ANTHROPIC_API_KEY=your-api-key"
        )
    return AnthropicEngine(
        api_key=config.anthropic.api_key,
        model=config.anthropic.model,
        max_tokens=config.anthropic.max_tokens,
        timeout=config.anthropic.timeout,
    )
