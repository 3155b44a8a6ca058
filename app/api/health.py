from __future__ import annotations

from typing import Dict

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> Dict[str, bool]:
    """Basic health check endpoint."""
    return {"ok": True}


@router.get("/ok", response_class=PlainTextResponse)
async def connected_page() -> str:
    """Landing page after a successful OAuth callback."""
    return "HubSpot connected. You can close this tab."
