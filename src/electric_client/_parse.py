"""
Parsing utilities for the Electric shape protocol.

This module handles parsing of response headers into protocol signals.
"""

from collections.abc import Mapping
from typing import Any

from electric_client._errors import ProtocolViolationError
from electric_client._types import (
    ELECTRIC_CURSOR_HEADER,
    ELECTRIC_HANDLE_HEADER,
    ELECTRIC_OFFSET_HEADER,
    ELECTRIC_UP_TO_DATE_HEADER,
    Handle,
    Offset,
)


class ResponseMetadata:
    """
    Parsed protocol signals from a shape response.

    Attributes:
        offset: The offset to send on the next request (if provided)
        handle: The shape handle assigned by the server (if provided)
        cursor: Optional cursor hint for the next live request
        up_to_date: Whether the response marks the end of the backlog
    """

    __slots__ = ("offset", "handle", "cursor", "up_to_date")

    def __init__(
        self,
        offset: Offset | None = None,
        handle: Handle | None = None,
        cursor: str | None = None,
        up_to_date: bool = False,
    ) -> None:
        self.offset = offset
        self.handle = handle
        self.cursor = cursor
        self.up_to_date = up_to_date

    def __repr__(self) -> str:
        return (
            f"ResponseMetadata(offset={self.offset!r}, handle={self.handle!r}, "
            f"cursor={self.cursor!r}, up_to_date={self.up_to_date!r})"
        )


def _header_text(lower_headers: Mapping[str, str], name: str) -> str | None:
    value = lower_headers.get(name)
    if value is None:
        return None
    if not value.isascii():
        raise ProtocolViolationError(
            f"Header {name} contains non-ASCII characters", header=name
        )
    # Field values may contain tabs but no other control characters
    if any(ch != "\t" and (ch < " " or ch == "\x7f") for ch in value):
        raise ProtocolViolationError(
            f"Header {name} contains control characters", header=name
        )
    return value


def parse_response_headers(headers: Mapping[str, str]) -> ResponseMetadata:
    """
    Parse shape protocol signals from response headers.

    Args:
        headers: Response headers mapping (case-insensitive keys)

    Returns:
        Parsed ResponseMetadata

    Raises:
        ProtocolViolationError: If a protocol header value is not ASCII text
    """
    # Headers may have different casing, so normalize to lowercase for lookup
    lower_headers = {k.lower(): v for k, v in headers.items()}

    return ResponseMetadata(
        offset=_header_text(lower_headers, ELECTRIC_OFFSET_HEADER),
        handle=_header_text(lower_headers, ELECTRIC_HANDLE_HEADER),
        cursor=_header_text(lower_headers, ELECTRIC_CURSOR_HEADER),
        # Presence-only flag, the value is ignored
        up_to_date=ELECTRIC_UP_TO_DATE_HEADER in lower_headers,
    )


def parse_httpx_headers(headers: Any) -> dict[str, str]:
    """
    Convert httpx Headers object to a plain dict.

    Args:
        headers: httpx Headers object

    Returns:
        Plain dict of headers
    """
    return dict(headers.items())
