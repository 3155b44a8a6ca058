from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

from app.config import Settings
from app.schemas.token import TokenRecord
from app.services import http_client
from app.services.token_store import TokenStore

HUBSPOT_TOKEN_URL = f"{http_client.HUBSPOT_BASE_URL}/oauth/v1/token"

# Refresh when the access token expires within this window
REFRESH_MARGIN_MS = 120 * 1000

logger = logging.getLogger(__name__)


class MissingConnectionError(LookupError):
    """No stored HubSpot connection for the requested org."""

    def __init__(self, org_id: str) -> None:
        super().__init__(f"No connection for org {org_id}")
        self.org_id = org_id


def _now_ms() -> int:
    return int(time.time() * 1000)


async def _post_token_form(data: Dict[str, str]) -> Dict[str, Any]:
    async with http_client.create_client() as client:
        resp = await client.post(
            HUBSPOT_TOKEN_URL,
            data=data,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        resp.raise_for_status()
        return resp.json()


# ---------------------------------------------------------------------------
# HubSpot OAuth helpers
# ---------------------------------------------------------------------------


async def exchange_code(
    store: TokenStore,
    org_id: str,
    code: str,
    settings: Settings,
    now_ms: Optional[int] = None,
) -> TokenRecord:
    """Exchange a temporary OAuth `code` for tokens and persist them under *org_id*."""
    payload = await _post_token_form(
        {
            "grant_type": "authorization_code",
            "code": code,
            "client_id": settings.hubspot_client_id,
            "client_secret": settings.hubspot_client_secret,
            "redirect_uri": settings.hubspot_redirect_uri,
        }
    )

    now = _now_ms() if now_ms is None else now_ms
    record = TokenRecord(
        hub_id=payload.get("hub_id"),
        access_token=payload["access_token"],
        refresh_token=payload["refresh_token"],
        access_expires_at=now + payload["expires_in"] * 1000,
    )
    store.put(org_id, record)
    await store.save()
    logger.info(f"Stored HubSpot tokens for org {org_id} (hub {record.hub_id})")
    return record


async def ensure_token(
    store: TokenStore,
    org_id: str,
    settings: Settings,
    now_ms: Optional[int] = None,
) -> str:
    """Return a usable access token for *org_id*, refreshing it if it expires soon."""
    record = store.get(org_id)
    if record is None:
        raise MissingConnectionError(org_id)

    now = _now_ms() if now_ms is None else now_ms
    if now <= record.access_expires_at - REFRESH_MARGIN_MS:
        return record.access_token

    logger.info(f"Access token for org {org_id} expires soon, refreshing")
    payload = await _post_token_form(
        {
            "grant_type": "refresh_token",
            "refresh_token": record.refresh_token,
            "client_id": settings.hubspot_client_id,
            "client_secret": settings.hubspot_client_secret,
        }
    )

    record.access_token = payload["access_token"]
    record.refresh_token = payload.get("refresh_token", record.refresh_token)
    record.access_expires_at = now + payload["expires_in"] * 1000
    await store.save()
    return record.access_token
