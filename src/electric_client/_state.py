"""
Continuation state for a shape stream.

A stream is always in exactly one of two phases:

- ``CatchingUp``: the initial sync, fetching the backlog until the server
  reports up-to-date. The offset may be unknown (start of the log) and the
  handle is unknown until the server assigns one.
- ``Tailing``: the steady state after catching up, long-polling for new
  data. Offset and handle are always known here; the cursor is an optional
  server hint.

States are immutable. ``advance()`` returns the next state for a response
and never modifies the current one, so the driver can swap it in only once
a response has been accepted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

import structlog

from electric_client._errors import ProtocolViolationError
from electric_client._parse import ResponseMetadata
from electric_client._types import (
    ELECTRIC_HANDLE_HEADER,
    ELECTRIC_OFFSET_HEADER,
    OFFSET_BEFORE_START,
    Handle,
    Offset,
)

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CatchingUp:
    """
    Initial sync phase.

    Attributes:
        offset: Last offset received, or None to start from the beginning
        handle: Shape handle, None until the server assigns one
    """

    offset: Offset | None = None
    handle: Handle | None = None

    @property
    def phase(self) -> Literal["catching-up"]:
        return "catching-up"

    @property
    def live(self) -> Literal[False]:
        return False

    @property
    def cursor(self) -> None:
        """Cursors are only tracked while tailing."""
        return None

    @property
    def offset_param(self) -> Offset:
        """The offset to send, using the sentinel when none is known yet."""
        return self.offset if self.offset is not None else OFFSET_BEFORE_START

    def advance(self, meta: ResponseMetadata) -> ShapeState:
        """
        Return the state that follows a response received while catching up.

        Empty header values count as missing.

        Args:
            meta: Protocol signals parsed from the response headers

        Returns:
            ``Tailing`` if the response is up-to-date, else a refreshed
            ``CatchingUp``

        Raises:
            ProtocolViolationError: If the response is up-to-date but lacks
                an offset or a handle
        """
        if not meta.up_to_date:
            return CatchingUp(
                offset=meta.offset or self.offset,
                handle=meta.handle or self.handle,
            )

        if not meta.offset:
            raise ProtocolViolationError(
                "Up-to-date response is missing the offset header",
                header=ELECTRIC_OFFSET_HEADER,
            )
        if not meta.handle:
            raise ProtocolViolationError(
                "Up-to-date response is missing the handle header",
                header=ELECTRIC_HANDLE_HEADER,
            )

        logger.info(
            "Shape caught up, switching to live mode",
            offset=meta.offset,
            handle=meta.handle,
        )
        return Tailing(
            offset=meta.offset, handle=meta.handle, cursor=meta.cursor or None
        )


@dataclass(frozen=True, slots=True)
class Tailing:
    """
    Live phase, long-polling for changes after the initial sync.

    Attributes:
        offset: Last offset received
        handle: Shape handle, echoed on every request
        cursor: Optional cursor hint for the next live request
    """

    offset: Offset
    handle: Handle
    cursor: str | None = None

    def __post_init__(self) -> None:
        if not self.offset:
            raise ProtocolViolationError(
                "Live mode requires an offset", header=ELECTRIC_OFFSET_HEADER
            )
        if not self.handle:
            raise ProtocolViolationError(
                "Live mode requires a handle", header=ELECTRIC_HANDLE_HEADER
            )

    @property
    def phase(self) -> Literal["tailing"]:
        return "tailing"

    @property
    def live(self) -> Literal[True]:
        return True

    @property
    def offset_param(self) -> Offset:
        return self.offset

    def advance(self, meta: ResponseMetadata) -> ShapeState:
        """
        Return the state that follows a response received while tailing.

        The phase never goes back to catching up. Tokens missing from the
        response, or sent empty, keep their previous values. A different handle means the
        server reset the shape subscription, and the new one is used from now on.

        Args:
            meta: Protocol signals parsed from the response headers

        Returns:
            A refreshed ``Tailing`` state
        """
        if meta.handle and meta.handle != self.handle:
            logger.info(
                "Shape handle changed by server",
                previous_handle=self.handle,
                handle=meta.handle,
            )

        return Tailing(
            offset=meta.offset or self.offset,
            handle=meta.handle or self.handle,
            cursor=meta.cursor or self.cursor,
        )


ShapeState = CatchingUp | Tailing
