from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel


class TokenRecord(BaseModel):
    """OAuth tokens for one organization's HubSpot connection."""

    provider: str = "hubspot"
    hub_id: Optional[Union[int, str]] = None
    access_token: str
    refresh_token: str
    # epoch milliseconds
    access_expires_at: int
