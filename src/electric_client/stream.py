"""
ShapeStream - synchronous client for following an Electric shape.

This is the primary API for consuming a shape log over HTTP.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import httpx
import structlog

from electric_client._errors import (
    StreamClosedError,
    StreamConsumedError,
    TransportError,
    WrongPhaseError,
    error_from_status,
)
from electric_client._parse import (
    ResponseMetadata,
    parse_httpx_headers,
    parse_response_headers,
)
from electric_client._state import CatchingUp, ShapeState, Tailing
from electric_client._types import Handle, HeadersLike, Offset, ParamsLike, Phase
from electric_client._util import (
    build_shape_url,
    resolve_headers_sync,
    resolve_params_sync,
    static_params,
)

logger = structlog.get_logger(__name__)


def join_bodies(bodies: list[str]) -> str:
    """Join response bodies into one text unit, one body per line."""
    return "".join(f"{body}\n" for body in bodies)


class ShapeStream:
    """
    A synchronous follower of a single shape.

    The stream first catches up on the shape log, then long-polls for new
    data forever. Each fetch resumes from where the previous one stopped.
    The response bodies are returned as-is, without parsing.

    Example:
        >>> with ShapeStream("http://localhost:3000", "items") as shape:
        ...     for text in shape:
        ...         print(text)

    A stream is a one-shot feed: it can be iterated once. To resume after
    a restart, create a new stream with the last offset you processed.
    """

    def __init__(
        self,
        host: str,
        table: str,
        offset: Offset | None = None,
        *,
        headers: HeadersLike | None = None,
        params: ParamsLike | None = None,
        client: httpx.Client | None = None,
        timeout: float | httpx.Timeout | None = None,
        **kwargs: Any,
    ) -> None:
        """
        Create a stream for a shape. No network IO is performed here.

        Args:
            host: Base URL of the Electric server
            table: The table the shape is defined on
            offset: Offset to resume from (None means start of the log)
            headers: HTTP headers (static strings or callables)
            params: Extra query parameters (static strings or callables)
            client: Optional httpx.Client to use (will not be closed)
            timeout: Request timeout. None leaves the long-poll hold time
                up to the server.
            **kwargs: Additional arguments passed to httpx
        """
        self._host = host
        self._table = table
        self._headers = headers
        self._params = params
        self._timeout = timeout
        self._kwargs = kwargs

        self._own_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

        self._state: ShapeState = CatchingUp(offset=offset)
        self._consumed_by: str | None = None
        self._closed = False

    @property
    def host(self) -> str:
        return self._host

    @property
    def table(self) -> str:
        return self._table

    @property
    def state(self) -> ShapeState:
        """The current continuation state."""
        return self._state

    @property
    def phase(self) -> Phase:
        return self._state.phase

    @property
    def offset(self) -> Offset | None:
        """Last offset received, None if nothing has been fetched yet."""
        return self._state.offset

    @property
    def handle(self) -> Handle | None:
        return self._state.handle

    @property
    def cursor(self) -> str | None:
        return self._state.cursor

    @property
    def up_to_date(self) -> bool:
        """Whether the initial sync has completed."""
        return isinstance(self._state, Tailing)

    @property
    def next_url(self) -> str:
        """
        The URL the next request will be sent to.

        Callable params are left out: they are only called when a request
        is actually sent.
        """
        return build_shape_url(
            self._host, self._table, self._state, static_params(self._params)
        )

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Close the stream and release resources."""
        if not self._closed:
            self._closed = True
            # Close the client if we created it internally
            if self._own_client:
                self._client.close()

    def __enter__(self) -> ShapeStream:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"ShapeStream(host={self._host!r}, table={self._table!r}, "
            f"state={self._state!r})"
        )

    # === Request/advance cycle ===

    def _fetch_once(self) -> tuple[int, ResponseMetadata, str | None]:
        """
        Issue one request for the current state and advance it.

        The state is only replaced once the response has been fully accepted,
        so any error leaves it as it was.

        Returns:
            Status code, parsed protocol signals, and the body (None for 204)
        """
        if self._closed:
            raise StreamClosedError()

        url = build_shape_url(
            self._host, self._table, self._state, resolve_params_sync(self._params)
        )
        request_kwargs = dict(self._kwargs)
        if self._timeout is not None:
            request_kwargs["timeout"] = self._timeout

        logger.debug("Shape request", url=url, phase=self._state.phase)
        try:
            request = self._client.build_request(
                "GET",
                url,
                headers=resolve_headers_sync(self._headers),
                **request_kwargs,
            )
            response = self._client.send(request)
        except httpx.RequestError as e:
            raise TransportError(f"Shape request failed: {e}", url=url) from e

        try:
            if not response.is_success:
                body = response.text
                raise error_from_status(response.status_code, url, body=body)

            meta = parse_response_headers(parse_httpx_headers(response.headers))
            body = None if response.status_code == 204 else response.text
        finally:
            response.close()

        self._state = self._state.advance(meta)
        logger.debug(
            "Shape response",
            status=response.status_code,
            offset=meta.offset,
            handle=meta.handle,
            up_to_date=meta.up_to_date,
        )
        return response.status_code, meta, body

    # === Fetch operations ===

    def catch_up(self) -> list[str]:
        """
        Fetch the backlog until the server reports up-to-date.

        There is no limit on the number of requests: catching up only ends
        once the stream is consistent with the server, or on error.

        Returns:
            The bodies of every response, in order, including the
            up-to-date one

        Raises:
            WrongPhaseError: If the stream has already caught up
        """
        if isinstance(self._state, Tailing):
            raise WrongPhaseError("catch_up", self._state.phase)

        bodies: list[str] = []
        while True:
            _, meta, body = self._fetch_once()
            if body is not None:
                bodies.append(body)
            if meta.up_to_date:
                return bodies

    def tail(self) -> list[str]:
        """
        Long-poll for new data until the server reports up-to-date.

        A 204 No Content means the long-poll timed out on the server without
        new data; it is re-polled right away and never ends the call, even
        when it carries the up-to-date header.

        Returns:
            The bodies received, in order, ending with the up-to-date one

        Raises:
            WrongPhaseError: If the stream has not caught up yet
        """
        if isinstance(self._state, CatchingUp):
            raise WrongPhaseError("tail", self._state.phase)

        bodies: list[str] = []
        while True:
            status, meta, body = self._fetch_once()
            if status == 204:
                logger.debug("Shape long-poll returned no content, re-polling")
                continue
            bodies.append(body)  # type: ignore[arg-type]
            if meta.up_to_date:
                return bodies

    def fetch_next_batch(self) -> list[str]:
        """
        Fetch the bodies gathered since the previous call.

        Catches up on the first call, tails on every call after that.
        """
        if isinstance(self._state, CatchingUp):
            return self.catch_up()
        return self.tail()

    # === Lazy iteration ===

    def _ensure_not_consumed(self, method: str) -> None:
        """Raise if already consumed."""
        if self._consumed_by is not None:
            raise StreamConsumedError(
                attempted_method=method,
                consumed_by=self._consumed_by,
            )

    def _mark_consumed(self, method: str) -> None:
        self._consumed_by = method

    def iter_batches(self) -> Iterator[list[str]]:
        """
        Iterate over batches of response bodies, forever.

        The first batch is the catch-up, every following one a tail.
        Iteration stops only if the stream is closed or a fetch fails.
        """
        self._ensure_not_consumed("iter_batches")
        self._mark_consumed("iter_batches")
        return self._iter_batches_internal()

    def _iter_batches_internal(self) -> Iterator[list[str]]:
        while not self._closed:
            yield self.fetch_next_batch()

    def iter_text(self) -> Iterator[str]:
        """
        Iterate over text units, forever.

        Each unit holds every body of one batch, each followed by a newline.
        """
        self._ensure_not_consumed("iter_text")
        self._mark_consumed("iter_text")
        return self._iter_text_internal()

    def _iter_text_internal(self) -> Iterator[str]:
        for bodies in self._iter_batches_internal():
            yield join_bodies(bodies)

    def __iter__(self) -> Iterator[str]:
        self._ensure_not_consumed("__iter__")
        self._mark_consumed("__iter__")
        return self._iter_text_internal()
