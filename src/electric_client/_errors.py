"""
Exception hierarchy for the Electric shape client.

This module defines all exceptions that can be raised by the library.
"""

from typing import Any


class ShapeStreamError(Exception):
    """
    Base exception for all shape stream errors.

    Attributes:
        message: Human-readable error message
        status: HTTP status code (if applicable)
        code: Error code for programmatic handling
        details: Additional error details
    """

    def __init__(
        self,
        message: str,
        status: int | None = None,
        code: str | None = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code
        self.details = details

    def __str__(self) -> str:
        parts = [self.message]
        if self.status is not None:
            parts.append(f"(status={self.status})")
        if self.code is not None:
            parts.append(f"[{self.code}]")
        return " ".join(parts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"status={self.status!r}, "
            f"code={self.code!r})"
        )


class TransportError(ShapeStreamError):
    """
    Exception for network/transport/timeout errors.

    Raised when the HTTP call itself failed and no response was received.
    The underlying httpx exception is available as ``__cause__``.

    Attributes:
        url: The URL that was being fetched
    """

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message, code="TRANSPORT_ERROR")
        self.url = url

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.url:
            parts.append(f"at {self.url}")
        return " ".join(parts)


class UnsuccessfulResponseError(ShapeStreamError):
    """
    Exception raised when the server answers with a non-2xx status.

    The stream is not retried; the caller decides whether to build a new one.

    Attributes:
        url: The URL that was requested
        body: The response body (if it could be read)
    """

    def __init__(
        self,
        message: str,
        status: int,
        code: str = "HTTP_ERROR",
        url: str | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message, status=status, code=code, details=body)
        self.url = url
        self.body = body


class ProtocolViolationError(ShapeStreamError):
    """
    Exception raised when a response breaks the shape protocol contract.

    This happens when the server reports up-to-date without an offset or
    handle, or when a protocol header value is not plain ASCII text.

    Attributes:
        header: The offending header name (if a single header is at fault)
    """

    def __init__(self, message: str, header: str | None = None) -> None:
        super().__init__(message, code="PROTOCOL_VIOLATION")
        self.header = header


class StreamConsumedError(ShapeStreamError):
    """
    Exception raised when attempting to iterate a shape stream twice.

    A shape stream is a one-shot feed; to resume, create a new stream
    seeded with the last known offset.
    """

    def __init__(
        self,
        message: str = "Shape stream has already been consumed",
        attempted_method: str | None = None,
        consumed_by: str | None = None,
    ) -> None:
        if attempted_method and consumed_by:
            message = (
                f"Cannot call {attempted_method}() - stream was already consumed "
                f"via {consumed_by}()"
            )
        super().__init__(message, code="ALREADY_CONSUMED")
        self.attempted_method = attempted_method
        self.consumed_by = consumed_by


class StreamClosedError(ShapeStreamError):
    """Exception raised when fetching from a closed shape stream."""

    def __init__(self, message: str = "Shape stream is closed") -> None:
        super().__init__(message, code="CLOSED")


class WrongPhaseError(ShapeStreamError):
    """
    Exception raised when catch_up() or tail() is called in the wrong phase.

    catch_up() is only valid before the stream is up to date, tail() only
    after.
    """

    def __init__(self, method: str, phase: str) -> None:
        super().__init__(
            f"Cannot call {method}() while the stream is {phase}",
            code="WRONG_PHASE",
        )
        self.method = method
        self.phase = phase


def error_from_status(
    status: int,
    url: str,
    body: str | None = None,
) -> UnsuccessfulResponseError:
    """
    Create an UnsuccessfulResponseError from an HTTP status code.

    Args:
        status: The HTTP status code
        url: The URL that was requested
        body: The response body (if available)

    Returns:
        An UnsuccessfulResponseError with a code matching the status
    """
    if status == 400:
        return UnsuccessfulResponseError(
            f"Bad request: {url}", status, "BAD_REQUEST", url=url, body=body
        )

    if status == 401:
        return UnsuccessfulResponseError(
            f"Unauthorized: {url}", status, "UNAUTHORIZED", url=url, body=body
        )

    if status == 403:
        return UnsuccessfulResponseError(
            f"Forbidden: {url}", status, "FORBIDDEN", url=url, body=body
        )

    if status == 404:
        return UnsuccessfulResponseError(
            f"Shape not found: {url}", status, "NOT_FOUND", url=url, body=body
        )

    if status == 409:
        return UnsuccessfulResponseError(
            f"Shape handle is no longer valid: {url}",
            status,
            "CONFLICT",
            url=url,
            body=body,
        )

    if status == 429:
        return UnsuccessfulResponseError(
            f"Rate limited: {url}", status, "RATE_LIMITED", url=url, body=body
        )

    if status == 503:
        return UnsuccessfulResponseError(
            f"Service unavailable: {url}", status, "BUSY", url=url, body=body
        )

    if 500 <= status < 600:
        return UnsuccessfulResponseError(
            f"Server error {status} at {url}",
            status,
            "SERVER_ERROR",
            url=url,
            body=body,
        )

    # Anything else outside 2xx (including 1xx/3xx the client did not follow)
    return UnsuccessfulResponseError(
        f"HTTP error {status} at {url}", status, "HTTP_ERROR", url=url, body=body
    )
