# checkpoint_review/engine/retry.py
"""Retry policy for local engine calls with exponential backoff."""

import logging

import httpx
from ollama import ResponseError
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

RETRYABLE_STATUSES = frozenset({408, 429, 500, 502, 503, 504})


def is_retryable(exception: BaseException) -> bool:
    """
    Returns True if the exception should be retried.

    Retryable conditions:
    - ConnectionError or httpx transport errors (server unavailable)
    - ResponseError with status in (408, 429, 500, 502, 503, 504),
      except a 500 reporting the model does not fit in memory
    """
    if isinstance(exception, (ConnectionError, httpx.TransportError)):
        return True

    if isinstance(exception, ResponseError):
        if exception.status_code not in RETRYABLE_STATUSES:
            return False
        if exception.status_code == 500 and "requires more system memory" in str(exception).lower():
            return False
        return True

    return False


engine_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=4, max=60),
    retry=retry_if_exception(is_retryable),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
