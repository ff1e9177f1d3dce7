"""
Shared HTTP client utilities for the JSON-RPC collaborators.

Centralizes httpx client creation with sensible defaults, connection pooling,
timeouts, and a consistent User-Agent. Use these helpers instead of creating
ad-hoc clients across the codebase.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Optional, Tuple

import httpx

DEFAULT_TIMEOUT = float(os.getenv("PEGIN_HTTP_TIMEOUT", "15"))
DEFAULT_CONNECT_TIMEOUT = float(os.getenv("PEGIN_HTTP_CONNECT_TIMEOUT", "5"))
USER_AGENT = os.getenv("PEGIN_HTTP_UA", "pegin-toolkit/0.x")

JSON_HEADERS = {"Content-Type": "application/json"}


def _build_limits() -> httpx.Limits:
    return httpx.Limits(max_keepalive_connections=20, max_connections=100)


def _build_timeout() -> httpx.Timeout:
    return httpx.Timeout(DEFAULT_TIMEOUT, connect=DEFAULT_CONNECT_TIMEOUT)


def _default_headers() -> dict:
    return {"User-Agent": USER_AGENT, **JSON_HEADERS}


def build_async_client(
    auth: Optional[Tuple[str, str]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """
    Build an asynchronous httpx client for a JSON-RPC endpoint.

    Args:
        auth: Optional (username, password) basic auth pair
        transport: Optional transport override (used by tests)
    """
    kwargs: Dict[str, Any] = {
        "timeout": _build_timeout(),
        "limits": _build_limits(),
        "headers": _default_headers(),
    }
    if auth is not None:
        kwargs["auth"] = auth
    if transport is not None:
        kwargs["transport"] = transport
    return httpx.AsyncClient(**kwargs)


def build_jsonrpc_payload(method: str, params: list, request_id: int = 1) -> dict:
    """Build a JSON-RPC 2.0 request body."""
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "method": method,
        "params": params,
    }
