"""
Error types and handling utilities for chain access.

This module provides the exception hierarchy shared by the monitor and the
error classification used to decide which RPC failures are worth retrying.
"""

from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

# Error categories returned by ErrorHandler.classify_error
CONTRACT = "contract"
RATE_LIMIT = "rate_limit"
NETWORK = "network"
VALIDATION = "validation"
UNKNOWN = "unknown"

RETRYABLE = (NETWORK, RATE_LIMIT, UNKNOWN)

MAX_RETRY_DELAY = 60.0


class MonitorError(Exception):
    """Base exception for the monitor."""
    pass


class InitializationError(MonitorError):
    """Raised when required configuration is missing or a handler runs before initialize()."""
    pass


class ChainClientError(MonitorError):
    """Raised when the chain cannot be queried."""
    pass


class RateLimitError(ChainClientError):
    """Raised when rate limit is hit."""

    def __init__(self, message: str, retry_after: Optional[float] = None):
        super().__init__(message)
        self.retry_after = retry_after


class NetworkError(ChainClientError):
    """Raised when network-related errors occur."""
    pass


class CallReverted(ChainClientError):
    """Raised when a view call reverts, usually meaning the callee is not the expected contract."""

    def __init__(self, message: str, address: Optional[str] = None, function: Optional[str] = None):
        super().__init__(message)
        self.address = address
        self.function = function


def _http_status(error: Exception) -> Optional[int]:
    """Status code of an HTTP error raised by the provider, if any."""
    response = getattr(error, "response", None)
    return getattr(response, "status_code", None)


def _retry_after(error: Exception) -> Optional[float]:
    """Retry-After header of a 429 response, in seconds."""
    response = getattr(error, "response", None)
    headers = getattr(response, "headers", None) or {}
    try:
        return float(headers.get("Retry-After"))
    except (TypeError, ValueError):
        return None


class ErrorHandler:
    """
    Classifies errors raised by web3 providers and decides how to retry them.

    Exception types and HTTP status codes are checked first; the message is
    only inspected for providers that report failures as plain text.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def classify_error(self, error: Exception) -> str:
        """
        Classify an error into a category for appropriate handling.

        Args:
            error: Exception to classify

        Returns:
            One of CONTRACT, RATE_LIMIT, NETWORK, VALIDATION or UNKNOWN
        """
        if isinstance(error, CallReverted):
            return CONTRACT
        if isinstance(error, RateLimitError):
            return RATE_LIMIT
        if isinstance(error, (NetworkError, ConnectionError, TimeoutError)):
            return NETWORK

        status = _http_status(error)
        if status == 429:
            return RATE_LIMIT
        if status is not None and status >= 500:
            return NETWORK
        if status is not None and status >= 400:
            return VALIDATION

        message = str(error).lower()
        if any(keyword in message for keyword in ("rate limit", "too many requests", "429")):
            return RATE_LIMIT
        if any(keyword in message for keyword in ("connection", "timeout", "timed out", "network", "dns")):
            return NETWORK
        if any(keyword in message for keyword in ("revert", "out of gas", "invalid opcode")):
            return CONTRACT
        if any(keyword in message for keyword in ("invalid", "bad request", "block range")):
            return VALIDATION
        return UNKNOWN

    def should_retry(self, error: Exception, attempt: int, max_retries: int) -> bool:
        """
        Determine if an error should trigger a retry.

        Args:
            error: Exception that occurred
            attempt: Current attempt number (0-based)
            max_retries: Maximum number of attempts allowed

        Returns:
            True if operation should be retried
        """
        if attempt >= max_retries - 1:
            return False
        # Reverts and bad requests give the same answer every time
        return self.classify_error(error) in RETRYABLE

    def get_retry_delay(self, error: Exception, attempt: int, base: float = 1.0) -> float:
        """
        Seconds to wait before the next attempt.

        Uses the provider's Retry-After when it sent one, otherwise
        exponential backoff capped at MAX_RETRY_DELAY; rate limits wait twice
        as long and unknown errors one and a half times as long.

        Args:
            error: Exception that occurred
            attempt: Current attempt number (0-based)
            base: Delay of the first retry in seconds
        """
        retry_after = error.retry_after if isinstance(error, RateLimitError) else _retry_after(error)
        if retry_after is not None:
            return retry_after

        delay = min(base * 2 ** attempt, MAX_RETRY_DELAY)
        category = self.classify_error(error)
        if category == RATE_LIMIT:
            return delay * 2
        if category == NETWORK:
            return delay
        return delay * 1.5

    def log_error(self, error: Exception, context: Dict[str, Any]):
        """
        Log an RPC error at a level matching its category.

        Args:
            error: Exception to log
            context: Operation and attempt details, passed as log extras
        """
        category = self.classify_error(error)
        extra = {
            "error_type": type(error).__name__,
            "error_category": category,
            "error_message": str(error),
            **context,
        }

        if category == CONTRACT:
            self.logger.debug(f"{context.get('operation', 'RPC call')} reverted: {error}", extra=extra)
        elif category == RATE_LIMIT:
            self.logger.info(f"Rate limited during {context.get('operation', 'RPC call')}", extra=extra)
        else:
            self.logger.warning(
                f"{context.get('operation', 'RPC call')} failed ({category}): {error}", extra=extra
            )
