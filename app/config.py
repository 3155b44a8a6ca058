from __future__ import annotations

import logging
import os
import sys
from functools import lru_cache
from typing import Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

logger = logging.getLogger(__name__)

REQUIRED_ENV_VARS = (
    "APP_BASE_URL",
    "HUBSPOT_CLIENT_ID",
    "HUBSPOT_CLIENT_SECRET",
    "HUBSPOT_REDIRECT_URI",
    "STATE_HMAC_SECRET",
)


class Settings(BaseModel):
    app_base_url: str
    hubspot_client_id: str
    hubspot_client_secret: str
    hubspot_redirect_uri: str
    state_hmac_secret: str
    port: int = 3000
    tokens_file: str = "tokens.dev.json"
    log_level: str = "INFO"


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build settings from the environment, exiting if anything required is missing."""
    if environ is None:
        load_dotenv()
        environ = os.environ

    missing = [name for name in REQUIRED_ENV_VARS if not environ.get(name)]
    if missing:
        logger.error("Missing required env vars: %s. Check .env", ", ".join(missing))
        sys.exit(1)

    return Settings(
        app_base_url=environ["APP_BASE_URL"].rstrip("/"),
        hubspot_client_id=environ["HUBSPOT_CLIENT_ID"],
        hubspot_client_secret=environ["HUBSPOT_CLIENT_SECRET"],
        hubspot_redirect_uri=environ["HUBSPOT_REDIRECT_URI"],
        state_hmac_secret=environ["STATE_HMAC_SECRET"],
        port=int(environ.get("PORT") or 3000),
        tokens_file=environ.get("TOKENS_FILE") or "tokens.dev.json",
        log_level=environ.get("LOG_LEVEL") or "INFO",
    )


@lru_cache
def get_settings() -> Settings:
    """FastAPI dependency returning the process-wide settings."""
    return load_settings()
