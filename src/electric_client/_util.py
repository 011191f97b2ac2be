"""
Shared utility functions for the Electric shape client.

This module provides request building helpers used by both the sync and
async drivers.
"""

from typing import Any
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from electric_client._state import ShapeState
from electric_client._types import (
    CURSOR_QUERY_PARAM,
    HANDLE_QUERY_PARAM,
    LIVE_QUERY_PARAM,
    OFFSET_QUERY_PARAM,
    SHAPE_ENDPOINT,
    TABLE_QUERY_PARAM,
    HeadersLike,
    ParamsLike,
)


def resolve_headers_sync(headers: HeadersLike | None) -> dict[str, str]:
    """
    Resolve headers from HeadersLike to a plain dict.

    Supports static string values or callable functions that return strings.

    Args:
        headers: Headers dict with static or callable values

    Returns:
        Resolved headers dict with all string values
    """
    if headers is None:
        return {}

    resolved: dict[str, str] = {}
    for key, value in headers.items():
        if callable(value):
            resolved[key] = value()  # type: ignore[assignment]
        else:
            resolved[key] = value
    return resolved


async def resolve_headers_async(headers: HeadersLike | None) -> dict[str, str]:
    """
    Async version of resolve_headers_sync.

    Supports static string values, sync callables, or async callables.
    """
    if headers is None:
        return {}

    resolved: dict[str, str] = {}
    for key, value in headers.items():
        if callable(value):
            result: Any = value()
            # Check if result is awaitable
            if hasattr(result, "__await__"):
                resolved[key] = await result
            else:
                resolved[key] = result
        else:
            resolved[key] = value
    return resolved


def resolve_params_sync(params: ParamsLike | None) -> dict[str, str]:
    """
    Resolve params from ParamsLike to a plain dict.

    None values are omitted from the result.
    """
    if params is None:
        return {}

    resolved: dict[str, str] = {}
    for key, value in params.items():
        if value is None:
            continue
        if callable(value):
            resolved[key] = value()  # type: ignore[assignment]
        else:
            resolved[key] = value
    return resolved


async def resolve_params_async(params: ParamsLike | None) -> dict[str, str]:
    if params is None:
        return {}

    resolved: dict[str, str] = {}
    for key, value in params.items():
        if value is None:
            continue
        if callable(value):
            result: Any = value()
            if hasattr(result, "__await__"):
                resolved[key] = await result
            else:
                resolved[key] = result
        else:
            resolved[key] = value
    return resolved


def static_params(params: ParamsLike | None) -> dict[str, str]:
    """
    Return only the static string params, skipping None and callables.

    Used where params must not be resolved, e.g. to preview a URL.
    """
    if params is None:
        return {}
    return {
        key: value
        for key, value in params.items()
        if isinstance(value, str)
    }


def shape_query_params(table: str, state: ShapeState) -> dict[str, str]:
    """
    Build the protocol query parameters for the next request.

    Args:
        table: The table the shape is defined on
        state: The current continuation state

    Returns:
        Ordered dict of query parameters
    """
    query: dict[str, str] = {
        TABLE_QUERY_PARAM: table,
        OFFSET_QUERY_PARAM: state.offset_param,
    }
    if state.handle is not None:
        query[HANDLE_QUERY_PARAM] = state.handle
    if state.cursor is not None:
        query[CURSOR_QUERY_PARAM] = state.cursor
    if state.live:
        # Ask the server to hold the request open until there is new data
        query[LIVE_QUERY_PARAM] = "true"
    return query


def build_shape_url(
    host: str,
    table: str,
    state: ShapeState,
    params: dict[str, str] | None = None,
) -> str:
    """
    Build the shape request URL for the given state.

    A query string already on the host comes first, then extra params, then
    protocol params; later ones win on conflict, so protocol params cannot
    be overridden. A path already present on the host (e.g. behind a proxy)
    is kept.

    Args:
        host: Base URL of the Electric server
        table: The table the shape is defined on
        state: The current continuation state
        params: Additional query parameters (e.g. ``where``, ``columns``)

    Returns:
        The full request URL
    """
    parsed = urlparse(host)
    path = parsed.path.rstrip("/") + SHAPE_ENDPOINT

    protocol_params = shape_query_params(table, state)
    merged = dict(parse_qsl(parsed.query, keep_blank_values=True))
    merged.update(params or {})
    for key in protocol_params:
        merged.pop(key, None)
    merged.update(protocol_params)

    return urlunparse(parsed._replace(path=path, query=urlencode(merged)))
