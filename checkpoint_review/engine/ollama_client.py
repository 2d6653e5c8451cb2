# checkpoint_review/engine/ollama_client.py
"""Local analysis engine backed by an Ollama server."""

import logging

import httpx
from ollama import AsyncClient, ResponseError

from checkpoint_review.errors import (
    EngineAuthenticationError,
    EngineConnectionError,
    EngineError,
    EngineRateLimitError,
)

from .retry import engine_retry

logger = logging.getLogger(__name__)


class OllamaEngine:
    """
    Async Ollama engine with streaming generation.

    Transient failures are retried (see retry.engine_retry); whatever is left
    is translated into the EngineError hierarchy.
    """

    def __init__(self, base_url: str, model: str, timeout: int = 300):
        """
        Args:
            base_url: Ollama API base URL (e.g., "http://localhost:11434")
            model: Model name
            timeout: Request timeout in seconds (generous for model loading)
        """
        self.base_url = base_url
        self.model = model
        self.client = AsyncClient(host=base_url, timeout=httpx.Timeout(timeout))

    async def generate(self, messages: list[dict]) -> str:
        """
        Generate a response, mapping client failures to engine errors.

        Raises:
            EngineAuthenticationError: Server rejected the request (401/403)
            EngineRateLimitError: Server still throttling after retries (429)
            EngineConnectionError: Server unreachable
            EngineError: Any other API error
        """
        try:
            return await self._stream(messages)
        except ResponseError as e:
            if e.status_code in (401, 403):
                raise EngineAuthenticationError(f"Authentication failed for Ollama at {self.base_url}") from e
            if e.status_code == 429:
                raise EngineRateLimitError("Rate limit exceeded. Please try again later") from e
            raise EngineError(f"Ollama error: {e}") from e
        except (ConnectionError, httpx.TransportError) as e:
            raise EngineConnectionError(f"Network error: {e}") from e

    @engine_retry
    async def _stream(self, messages: list[dict]) -> str:
        logger.info(f"Generating with model={self.model}, messages={len(messages)}")

        accumulated = []
        async for chunk in await self.client.chat(model=self.model, messages=messages, stream=True):
            if content := chunk.get("message", {}).get("content"):
                accumulated.append(content)

        result = "".join(accumulated)
        logger.info(f"Generated {len(result)} chars")
        return result
