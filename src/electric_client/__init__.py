"""
Electric Shape Python Client

A Python client for following Electric shapes over HTTP.

A shape stream first catches up on the shape log, then long-polls for new
data. Response bodies are handed to the caller unparsed.

Example usage:
    >>> from electric_client import ShapeStream
    >>>
    >>> with ShapeStream("http://localhost:3000", "items") as shape:
    ...     for text in shape:
    ...         print(text)
    >>>
    >>> # One batch at a time
    >>> shape = ShapeStream("http://localhost:3000", "items", offset="0_0")
    >>> backlog = shape.fetch_next_batch()
    >>> changes = shape.fetch_next_batch()
"""

from importlib.metadata import PackageNotFoundError, version

from electric_client._errors import (
    ProtocolViolationError,
    ShapeStreamError,
    StreamClosedError,
    StreamConsumedError,
    TransportError,
    UnsuccessfulResponseError,
    WrongPhaseError,
)
from electric_client._parse import ResponseMetadata
from electric_client._state import CatchingUp, ShapeState, Tailing
from electric_client._types import (
    OFFSET_BEFORE_START,
    Handle,
    HeadersLike,
    Offset,
    ParamsLike,
    Phase,
)
from electric_client.astream import AsyncShapeStream
from electric_client.stream import ShapeStream

__all__ = [
    # Types
    "Offset",
    "Handle",
    "Phase",
    "HeadersLike",
    "ParamsLike",
    "OFFSET_BEFORE_START",
    "ResponseMetadata",
    # State
    "CatchingUp",
    "Tailing",
    "ShapeState",
    # Errors
    "ShapeStreamError",
    "TransportError",
    "UnsuccessfulResponseError",
    "ProtocolViolationError",
    "StreamConsumedError",
    "StreamClosedError",
    "WrongPhaseError",
    # Stream classes
    "ShapeStream",
    "AsyncShapeStream",
]

# Use importlib.metadata for version (works with installed package)
# Fall back to hard-coded version for editable installs
try:
    __version__ = version("electric-client")
except PackageNotFoundError:
    __version__ = "0.1.0"
