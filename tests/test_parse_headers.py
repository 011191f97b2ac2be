"""Tests for response header parsing."""

import httpx
import pytest

from electric_client import ProtocolViolationError
from electric_client._parse import parse_httpx_headers, parse_response_headers


class TestParseResponseHeaders:
    def test_parses_all_protocol_headers(self) -> None:
        meta = parse_response_headers(
            {
                "electric-offset": "20_3",
                "electric-handle": "3833821-1721812114261",
                "electric-cursor": "1674",
                "electric-up-to-date": "",
            }
        )
        assert meta.offset == "20_3"
        assert meta.handle == "3833821-1721812114261"
        assert meta.cursor == "1674"
        assert meta.up_to_date is True

    def test_missing_headers_are_none(self) -> None:
        meta = parse_response_headers({"content-type": "application/json"})
        assert meta.offset is None
        assert meta.handle is None
        assert meta.cursor is None
        assert meta.up_to_date is False

    def test_case_insensitive(self) -> None:
        meta = parse_response_headers(
            {"Electric-Offset": "5", "ELECTRIC-HANDLE": "h1", "Electric-Up-To-Date": "x"}
        )
        assert meta.offset == "5"
        assert meta.handle == "h1"
        assert meta.up_to_date is True

    def test_up_to_date_ignores_value(self) -> None:
        meta = parse_response_headers({"electric-up-to-date": "false"})
        assert meta.up_to_date is True

    def test_non_ascii_value_is_a_protocol_violation(self) -> None:
        with pytest.raises(ProtocolViolationError) as exc_info:
            parse_response_headers({"electric-handle": "hé"})
        assert exc_info.value.header == "electric-handle"

    def test_tab_is_allowed(self) -> None:
        meta = parse_response_headers({"electric-cursor": "a\tb"})
        assert meta.cursor == "a\tb"

    def test_control_character_is_a_protocol_violation(self) -> None:
        with pytest.raises(ProtocolViolationError) as exc_info:
            parse_response_headers({"electric-offset": "1\x00"})
        assert "control characters" in str(exc_info.value)

    def test_non_ascii_in_unrelated_header_is_ignored(self) -> None:
        meta = parse_response_headers({"x-note": "café", "electric-offset": "1"})
        assert meta.offset == "1"


class TestParseHttpxHeaders:
    def test_converts_to_plain_dict(self) -> None:
        headers = httpx.Headers({"Electric-Offset": "1", "Electric-Handle": "h1"})
        result = parse_httpx_headers(headers)
        assert isinstance(result, dict)
        assert parse_response_headers(result).handle == "h1"

    def test_latin1_bytes_are_rejected(self) -> None:
        headers = httpx.Headers([(b"electric-offset", "café".encode("latin-1"))])
        with pytest.raises(ProtocolViolationError):
            parse_response_headers(parse_httpx_headers(headers))
