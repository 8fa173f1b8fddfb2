"""Errors raised by the LLM layer."""
from typing import Optional


class LLMError(Exception):
    """Raised when the model backend fails or returns an error status."""

    def __init__(self, message: str, status_code: Optional[int] = None, retryable: Optional[bool] = None):
        super().__init__(message)
        self.status_code = status_code
        self._retryable = retryable

    @property
    def is_retryable(self) -> bool:
        """Rate limits, server errors and connection failures are worth another attempt."""
        if self._retryable is not None:
            return self._retryable
        if self.status_code is not None:
            return self.status_code == 429 or self.status_code >= 500
        message = str(self).lower()
        return "429" in message or "quota" in message or "rate limit" in message


class MalformedResponseError(LLMError):
    """Raised when a response cannot be parsed into the expected shape."""

    def __init__(self, message: str):
        super().__init__(message, retryable=False)
