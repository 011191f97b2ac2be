"""
Core types for the Electric shape client.

This module defines the fundamental types and protocol constants used
throughout the library.
"""

from collections.abc import Awaitable, Callable
from typing import Literal

# Type alias for shape log offsets - opaque strings
Offset = str

# Type alias for server-assigned shape handles
Handle = str

# Stream phases
Phase = Literal["catching-up", "tailing"]

# Type for headers - can be static strings or callables
HeadersLike = dict[str, str | Callable[[], str] | Callable[[], Awaitable[str]]]

# Type for params - can be static strings or callables
ParamsLike = dict[
    str, str | Callable[[], str] | Callable[[], Awaitable[str]] | None
]


# Offset meaning "from the start of the shape log"
OFFSET_BEFORE_START: Offset = "-1"

SHAPE_ENDPOINT = "/v1/shape"

# Protocol constants
ELECTRIC_OFFSET_HEADER = "electric-offset"
ELECTRIC_HANDLE_HEADER = "electric-handle"
ELECTRIC_CURSOR_HEADER = "electric-cursor"
ELECTRIC_UP_TO_DATE_HEADER = "electric-up-to-date"

TABLE_QUERY_PARAM = "table"
OFFSET_QUERY_PARAM = "offset"
HANDLE_QUERY_PARAM = "handle"
CURSOR_QUERY_PARAM = "cursor"
LIVE_QUERY_PARAM = "live"
