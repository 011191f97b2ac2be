"""
AsyncShapeStream - asynchronous client for following an Electric shape.

This is the async counterpart of ShapeStream with the same protocol handling.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
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
    resolve_headers_async,
    resolve_params_async,
    static_params,
)
from electric_client.stream import join_bodies

logger = structlog.get_logger(__name__)


class AsyncShapeStream:
    """
    An asynchronous follower of a single shape.

    Usage as an async context manager is recommended:

        async with AsyncShapeStream("http://localhost:3000", "items") as shape:
            async for text in shape:
                print(text)

    Each instance holds its own continuation state; separate instances can
    run concurrently, optionally sharing one httpx.AsyncClient.
    """

    def __init__(
        self,
        host: str,
        table: str,
        offset: Offset | None = None,
        *,
        headers: HeadersLike | None = None,
        params: ParamsLike | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float | httpx.Timeout | None = None,
        **kwargs: Any,
    ) -> None:
        """
        Create an async stream for a shape. No network IO is performed here.

        Args:
            host: Base URL of the Electric server
            table: The table the shape is defined on
            offset: Offset to resume from (None means start of the log)
            headers: HTTP headers (static strings, callables or async callables)
            params: Extra query parameters (static strings, callables or
                async callables)
            client: Optional httpx.AsyncClient to use (will not be closed)
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
        self._client = client or httpx.AsyncClient(timeout=timeout)

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
        return self._state

    @property
    def phase(self) -> Phase:
        return self._state.phase

    @property
    def offset(self) -> Offset | None:
        return self._state.offset

    @property
    def handle(self) -> Handle | None:
        return self._state.handle

    @property
    def cursor(self) -> str | None:
        return self._state.cursor

    @property
    def up_to_date(self) -> bool:
        return isinstance(self._state, Tailing)

    @property
    def next_url(self) -> str:
        """
        The URL the next request will be sent to.

        Callable params, sync or async, are left out: they are only called
        when a request is actually sent.
        """
        return build_shape_url(
            self._host, self._table, self._state, static_params(self._params)
        )

    @property
    def closed(self) -> bool:
        return self._closed

    async def aclose(self) -> None:
        """Close the stream and release resources."""
        if not self._closed:
            self._closed = True
            if self._own_client:
                await self._client.aclose()

    async def __aenter__(self) -> AsyncShapeStream:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return (
            f"AsyncShapeStream(host={self._host!r}, table={self._table!r}, "
            f"state={self._state!r})"
        )

    async def _fetch_once(self) -> tuple[int, ResponseMetadata, str | None]:
        """Issue one request for the current state and advance it."""
        if self._closed:
            raise StreamClosedError()

        url = build_shape_url(
            self._host,
            self._table,
            self._state,
            await resolve_params_async(self._params),
        )
        request_kwargs = dict(self._kwargs)
        if self._timeout is not None:
            request_kwargs["timeout"] = self._timeout

        logger.debug("Shape request", url=url, phase=self._state.phase)
        try:
            request = self._client.build_request(
                "GET",
                url,
                headers=await resolve_headers_async(self._headers),
                **request_kwargs,
            )
            response = await self._client.send(request)
        except httpx.RequestError as e:
            raise TransportError(f"Shape request failed: {e}", url=url) from e

        try:
            if not response.is_success:
                body = response.text
                raise error_from_status(response.status_code, url, body=body)

            meta = parse_response_headers(parse_httpx_headers(response.headers))
            body = None if response.status_code == 204 else response.text
        finally:
            await response.aclose()

        self._state = self._state.advance(meta)
        logger.debug(
            "Shape response",
            status=response.status_code,
            offset=meta.offset,
            handle=meta.handle,
            up_to_date=meta.up_to_date,
        )
        return response.status_code, meta, body

    async def catch_up(self) -> list[str]:
        """Fetch the backlog until the server reports up-to-date."""
        if isinstance(self._state, Tailing):
            raise WrongPhaseError("catch_up", self._state.phase)

        bodies: list[str] = []
        while True:
            _, meta, body = await self._fetch_once()
            if body is not None:
                bodies.append(body)
            if meta.up_to_date:
                return bodies

    async def tail(self) -> list[str]:
        """Long-poll for new data until the server reports up-to-date."""
        if isinstance(self._state, CatchingUp):
            raise WrongPhaseError("tail", self._state.phase)

        bodies: list[str] = []
        while True:
            status, meta, body = await self._fetch_once()
            if status == 204:
                logger.debug("Shape long-poll returned no content, re-polling")
                continue
            bodies.append(body)  # type: ignore[arg-type]
            if meta.up_to_date:
                return bodies

    async def fetch_next_batch(self) -> list[str]:
        if isinstance(self._state, CatchingUp):
            return await self.catch_up()
        return await self.tail()

    def _ensure_not_consumed(self, method: str) -> None:
        """Raise if already consumed."""
        if self._consumed_by is not None:
            raise StreamConsumedError(
                attempted_method=method,
                consumed_by=self._consumed_by,
            )

    def _mark_consumed(self, method: str) -> None:
        self._consumed_by = method

    def iter_batches(self) -> AsyncIterator[list[str]]:
        """Iterate over batches of response bodies, forever."""
        self._ensure_not_consumed("iter_batches")
        self._mark_consumed("iter_batches")
        return self._aiter_batches_internal()

    async def _aiter_batches_internal(self) -> AsyncIterator[list[str]]:
        while not self._closed:
            yield await self.fetch_next_batch()

    def iter_text(self) -> AsyncIterator[str]:
        """Iterate over text units, one per batch, forever."""
        self._ensure_not_consumed("iter_text")
        self._mark_consumed("iter_text")
        return self._aiter_text_internal()

    async def _aiter_text_internal(self) -> AsyncIterator[str]:
        async for bodies in self._aiter_batches_internal():
            yield join_bodies(bodies)

    def __aiter__(self) -> AsyncIterator[str]:
        self._ensure_not_consumed("__aiter__")
        self._mark_consumed("__aiter__")
        return self._aiter_text_internal()
