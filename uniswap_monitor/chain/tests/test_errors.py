"""
Tests for chain error classification.
"""

from types import SimpleNamespace

import pytest

from ..errors import CallReverted, ErrorHandler, NetworkError, RateLimitError


class HTTPError(Exception):
    """Provider error carrying an HTTP response, like requests raises."""

    def __init__(self, status_code, headers=None):
        super().__init__(f"{status_code} error")
        self.response = SimpleNamespace(status_code=status_code, headers=headers or {})


class TestErrorHandler:
    """Test cases for ErrorHandler."""

    def setup_method(self):
        self.handler = ErrorHandler()

    @pytest.mark.parametrize(
        "error, category",
        [
            (CallReverted("reverted"), "contract"),
            (RateLimitError("slow down"), "rate_limit"),
            (NetworkError("down"), "network"),
            (Exception("429 Too Many Requests"), "rate_limit"),
            (Exception("Connection refused"), "network"),
            (Exception("execution reverted"), "contract"),
            (Exception("invalid argument"), "validation"),
            (Exception("something odd"), "unknown"),
            (TimeoutError(), "network"),
            (HTTPError(429), "rate_limit"),
            (HTTPError(503), "network"),
            (HTTPError(400), "validation"),
        ],
    )
    def test_classify_error(self, error, category):
        assert self.handler.classify_error(error) == category

    def test_should_retry(self):
        assert self.handler.should_retry(Exception("timeout"), 0, 3) is True
        assert self.handler.should_retry(Exception("timeout"), 2, 3) is False
        assert self.handler.should_retry(Exception("execution reverted"), 0, 3) is False
        assert self.handler.should_retry(Exception("invalid params"), 0, 3) is False

    def test_retry_delay(self):
        assert self.handler.get_retry_delay(Exception("timeout"), 0) == 1.0
        assert self.handler.get_retry_delay(Exception("timeout"), 2) == 4.0
        assert self.handler.get_retry_delay(Exception("rate limit"), 1) == 4.0
        assert self.handler.get_retry_delay(RateLimitError("slow", retry_after=7), 0) == 7
        assert self.handler.get_retry_delay(Exception("timeout"), 10) == 60
        assert self.handler.get_retry_delay(HTTPError(429, {"Retry-After": "3"}), 0) == 3.0
        assert self.handler.get_retry_delay(HTTPError(429, {"Retry-After": "soon"}), 0) == 2.0

    def test_call_reverted_keeps_context(self):
        error = CallReverted("slot0() reverted", "0xpool", "slot0")
        assert (error.address, error.function) == ("0xpool", "slot0")
