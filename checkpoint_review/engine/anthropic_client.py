# checkpoint_review/engine/anthropic_client.py
"""
Anthropic analysis engine.

Uses AsyncAnthropic; the SDK client is created on first use so importing this
module (or building the engine) never requires credentials.
"""

import logging
from typing import TYPE_CHECKING

from checkpoint_review.errors import (
    EngineAuthenticationError,
    EngineConnectionError,
    EngineError,
    EngineRateLimitError,
)

if TYPE_CHECKING:
    import anthropic

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-20250514"
DEFAULT_MAX_TOKENS = 16000


class AnthropicEngine:
    """Async engine calling the Anthropic Messages API."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        timeout: float = 600.0,
    ):
        """
        Args:
            api_key: Anthropic API key
            model: Model used for every checkpoint
            max_tokens: Output token cap per call
            timeout: Request timeout in seconds
        """
        self._api_key = api_key
        self._model = model
        self._max_tokens = max_tokens
        self._timeout = timeout
        self._client: "anthropic.AsyncAnthropic | None" = None

    @property
    def model(self) -> str:
        return self._model

    @property
    def client(self) -> "anthropic.AsyncAnthropic":
        """Lazy-loaded Anthropic client."""
        if self._client is None:
            import anthropic

            self._client = anthropic.AsyncAnthropic(api_key=self._api_key, timeout=self._timeout)
        return self._client

    async def generate(self, messages: list[dict]) -> str:
        """
        Send messages and return the concatenated text blocks of the reply.

        Raises:
            EngineAuthenticationError: 401 from the API
            EngineRateLimitError: 429 from the API
            EngineConnectionError: Network failure or timeout
            EngineError: Any other API error
        """
        import anthropic

        logger.info(f"Calling Anthropic model={self._model}, messages={len(messages)}")
        try:
            response = await self.client.messages.create(
                model=self._model,
                max_tokens=self._max_tokens,
                messages=messages,
            )
        except anthropic.AuthenticationError as e:
            raise EngineAuthenticationError(
                "Authentication failed. Please check your ANTHROPIC_API_KEY"
            ) from e
        except anthropic.RateLimitError as e:
            raise EngineRateLimitError("Rate limit exceeded. Please try again later") from e
        except anthropic.APIConnectionError as e:
            # APITimeoutError is a subclass
            raise EngineConnectionError(f"Network error: {e}") from e
        except anthropic.APIError as e:
            raise EngineError(f"Claude API error: {e}") from e

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        logger.info(
            f"Anthropic responded: {len(text)} chars, "
            f"tokens in={response.usage.input_tokens} out={response.usage.output_tokens}"
        )
        return text

    async def close(self) -> None:
        """Close the async client if initialized."""
        if self._client is not None:
            await self._client.close()
            self._client = None
