"""Exponential backoff for rate-limited model calls."""
import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

import httpx

from backend.ai.errors import LLMError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_RETRIES = 3
DEFAULT_DELAY = 3.0


def _is_retryable(error: Exception) -> bool:
    if isinstance(error, LLMError):
        return error.is_retryable
    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        return status == 429 or status >= 500
    message = str(error).lower()
    return "429" in message or "quota" in message


async def retry_with_backoff(
    fn: Callable[[], Awaitable[T]],
    retries: int = DEFAULT_RETRIES,
    delay: float = DEFAULT_DELAY,
) -> T:
    """Await ``fn`` and retry on rate limits or server errors, doubling the delay.

    Anything else, including malformed responses, propagates immediately.
    """
    attempt = 0
    while True:
        try:
            return await fn()
        except Exception as e:
            if attempt >= retries or not _is_retryable(e):
                raise
            attempt += 1
            status = getattr(e, "status_code", None) or "Unknown"
            logger.warning(
                "API error (%s). Retrying in %.1fs... (%d left)",
                status, delay, retries - attempt + 1,
            )
            await asyncio.sleep(delay)
            delay *= 2
