from __future__ import annotations

import logging
import urllib.parse as up
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse, Response

from app.config import Settings, get_settings
from app.services import http_client
from app.services.hubspot_service import create_test_contact
from app.services.state_service import new_state, verify_state
from app.services.token_service import exchange_code
from app.services.token_store import TokenStore, get_token_store

HUBSPOT_AUTHORIZE_URL = "https://app.hubspot.com/oauth/authorize"
SCOPES = "crm.objects.contacts.read crm.objects.contacts.write"
DEFAULT_ORG_ID = "demo-org"

router = APIRouter(prefix="/hubspot", tags=["HubSpot"])
logger = logging.getLogger(__name__)


def build_authorize_url(settings: Settings, state: str) -> str:
    qs = up.urlencode(
        {
            "client_id": settings.hubspot_client_id,
            "redirect_uri": settings.hubspot_redirect_uri,
            "scope": SCOPES,
            "state": state,
        },
        quote_via=up.quote,
    )
    return f"{HUBSPOT_AUTHORIZE_URL}?{qs}"


@router.get("/authorize")
async def hubspot_authorize(
    org_id: str = DEFAULT_ORG_ID,
    settings: Settings = Depends(get_settings),
) -> Response:
    """Redirect the browser to HubSpot's consent screen for *org_id*."""
    org_id = org_id or DEFAULT_ORG_ID
    state = new_state(org_id, settings.state_hmac_secret)
    return RedirectResponse(build_authorize_url(settings, state), status_code=302)


@router.get("/callback")
async def hubspot_oauth_callback(
    code: Optional[str] = None,
    state: Optional[str] = None,
    settings: Settings = Depends(get_settings),
    store: TokenStore = Depends(get_token_store),
) -> Response:
    """Handle OAuth callback and exchange code for access token."""
    parsed = verify_state(state, settings.state_hmac_secret)
    if not code or parsed is None:
        return PlainTextResponse("Invalid or expired state/code", status_code=400)

    org_id = parsed["org_id"]
    try:
        await exchange_code(store, org_id, code, settings)
    except Exception as e:
        logger.error(f"OAuth callback failed for org {org_id}: {http_client.upstream_error(e)}")
        return PlainTextResponse("OAuth callback failed", status_code=500)

    org = up.quote(org_id, safe="")
    return RedirectResponse(
        f"{settings.app_base_url}/ok?connected=hubspot&org={org}", status_code=302
    )


@router.post("/test")
async def hubspot_test(
    org_id: str = DEFAULT_ORG_ID,
    settings: Settings = Depends(get_settings),
    store: TokenStore = Depends(get_token_store),
) -> Response:
    """Create a test contact in the connected portal."""
    org_id = org_id or DEFAULT_ORG_ID
    try:
        result = await create_test_contact(store, org_id, settings)
    except Exception as e:
        error = http_client.upstream_error(e)
        logger.error(f"HubSpot test call failed for org {org_id}: {error}")
        return JSONResponse(content={"ok": False, "error": error}, status_code=500)
    return JSONResponse(content=result)
