"""Package-specific exceptions."""

from __future__ import annotations

import httpx

TransportError = httpx.TransportError


class HttpcError(Exception):
    """Base exception for all httpc failures."""

    def __init__(
        self,
        message: str,
        *,
        request_id: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.request_id = request_id
        self.cause = cause

    def __str__(self) -> str:  # pragma: no cover - simple formatting
        return f"httpc: {self.args[0]}"


class UsageError(HttpcError, ValueError):
    """Raised when an option is constructed with invalid arguments."""


class MissingContextError(HttpcError):
    """Raised when a dispatch is attempted without a context."""


class EncodingError(HttpcError):
    """Raised when a request body cannot be encoded for its content type."""

    def __init__(
        self,
        message: str,
        *,
        content_type: str | None = None,
        request_id: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, request_id=request_id, cause=cause)
        self.content_type = content_type


class DecodingError(HttpcError):
    """Raised when a response body cannot be parsed into the requested type."""


class ContextError(HttpcError):
    """Raised when the dispatch context is done before the call completes."""


class DeadlineExceededError(ContextError, httpx.TimeoutException):
    """Raised when the context deadline elapsed.

    Also an ``httpx.TimeoutException``, so it is caught by handlers written
    for ``TransportError`` like any other transport timeout.
    """

    def __init__(
        self,
        message: str,
        *,
        request: httpx.Request | None = None,
        request_id: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, request_id=request_id, cause=cause)
        if request is not None:
            self.request = request


class ContextCancelledError(ContextError):
    """Raised when the context was cancelled."""
