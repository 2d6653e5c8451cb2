# checkpoint_review/engine/__init__.py
"""Analysis engine adapters."""

from .anthropic_client import AnthropicEngine
from .factory import create_engine
from .ollama_client import OllamaEngine

__all__ = ["AnthropicEngine", "OllamaEngine", "create_engine"]
