from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

import httpx

from app.config import Settings
from app.services import http_client
from app.services.token_service import ensure_token
from app.services.token_store import TokenStore

CONTACTS_URL = f"{http_client.HUBSPOT_BASE_URL}/crm/v3/objects/contacts"

logger = logging.getLogger(__name__)


def _test_email() -> str:
    return f"buyerlink-test-{int(time.time() * 1000)}@example.com"


async def _post_contact(access_token: str, properties: Dict[str, str]) -> Dict[str, Any]:
    async with http_client.create_client() as client:
        resp = await client.post(
            CONTACTS_URL,
            json={"properties": properties},
            headers={"Authorization": f"Bearer {access_token}"},
        )
        resp.raise_for_status()
        return resp.json()


async def create_test_contact(
    store: TokenStore, org_id: str, settings: Settings
) -> Dict[str, Any]:
    """Create a throwaway lead in the org's portal to prove the connection works.

    A 401 gets exactly one retry after re-ensuring the token. If the retry
    fails too, the original error is raised.
    """
    try:
        access_token = await ensure_token(store, org_id, settings)
        email = _test_email()
        contact = await _post_contact(
            access_token,
            {
                "email": email,
                "firstname": "Buyerlink",
                "lastname": "Test",
                "lifecyclestage": "lead",
                "lead_source": "buyerlink_local_dev",
            },
        )
        return _result(store, org_id, contact, email)
    except httpx.HTTPStatusError as exc:
        if exc.response.status_code != 401:
            raise
        logger.warning(f"HubSpot rejected token for org {org_id}, retrying once: {http_client.upstream_error(exc)}")
        original = exc

    try:
        access_token = await ensure_token(store, org_id, settings)
        email = _test_email()
        contact = await _post_contact(
            access_token,
            {
                "email": email,
                "firstname": "Buyerlink",
                "lastname": "Retry",
                "lifecyclestage": "lead",
            },
        )
    except httpx.HTTPError as retry_exc:
        logger.error(f"Retry failed: {http_client.upstream_error(retry_exc)}")
        raise original from retry_exc

    result = _result(store, org_id, contact, email)
    result["retried"] = True
    return result


def _result(
    store: TokenStore, org_id: str, contact: Dict[str, Any], email: str
) -> Dict[str, Any]:
    record = store.get(org_id)
    portal: Optional[Any] = record.hub_id if record else None
    return {"ok": True, "id": contact.get("id"), "portal": portal, "email": email}
