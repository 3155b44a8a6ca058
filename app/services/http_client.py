from __future__ import annotations

from typing import Any

import httpx

HUBSPOT_BASE_URL = "https://api.hubapi.com"
HTTP_TIMEOUT = 8


def create_client() -> httpx.AsyncClient:
    """Client used for every outbound HubSpot call."""
    return httpx.AsyncClient(timeout=HTTP_TIMEOUT)


def upstream_error(exc: Exception) -> Any:
    """Best available description of a failure: upstream JSON, upstream text, or the message."""
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            return exc.response.json()
        except ValueError:
            return exc.response.text or str(exc)
    return str(exc)
