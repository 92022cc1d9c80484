"""Pytest configuration and fixtures for transmission_transport tests."""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from multidict import CIMultiDict, CIMultiDictProxy

RPC_URL = "http://127.0.0.1:9091/transmission/rpc"


@pytest.fixture
def mock_session() -> MagicMock:
    """Create a mock aiohttp ClientSession."""
    import aiohttp

    return MagicMock(spec=aiohttp.ClientSession)


def create_mock_response(
    status: int = 200,
    json_data: dict[str, Any] | None = None,
    read_data: bytes | None = None,
    headers: dict[str, str] | None = None,
) -> AsyncMock:
    """Create a configured mock response.

    Args:
        status: HTTP status code
        json_data: Data to return, JSON encoded, from read() call
        read_data: Raw bytes to return from read() call
        headers: Response headers (case-insensitive like aiohttp's)

    Returns:
        Configured AsyncMock response
    """
    response = AsyncMock()
    response.status = status
    response.headers = CIMultiDictProxy(CIMultiDict(headers or {}))

    if json_data is not None:
        response.read.return_value = json.dumps(json_data).encode("utf-8")
    elif read_data is not None:
        response.read.return_value = read_data
    else:
        response.read.return_value = b""

    response.__aenter__.return_value = response
    response.__aexit__.return_value = None

    return response


def conflict_response(session_id: str | None) -> AsyncMock:
    """Create a 409 handshake response disclosing ``session_id``."""
    headers = {"X-Transmission-Session-Id": session_id} if session_id else {}
    return create_mock_response(status=409, headers=headers)


def success_response(arguments: dict[str, Any], result: str = "success") -> AsyncMock:
    """Create a 200 response carrying an RPC envelope."""
    return create_mock_response(
        status=200, json_data={"arguments": arguments, "result": result}
    )


def sent_body(call: Any) -> dict[str, Any]:
    """Decode the JSON body of a recorded session.post call."""
    return json.loads(call.kwargs["data"])


def sent_session_id(call: Any) -> str | None:
    """Return the session id header of a recorded session.post call."""
    return call.kwargs["headers"].get("X-Transmission-Session-Id")
