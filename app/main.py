from __future__ import annotations

import logging

from fastapi import FastAPI

from app.config import get_settings

# Exits the process before anything listens if configuration is incomplete
settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

from app.api import health, hubspot  # noqa: E402
from app.services.token_store import get_token_store  # noqa: E402

app = FastAPI(title="HubSpot OAuth Bridge")

# ---------------------------------------------------------------------------
# Startup hooks
# ---------------------------------------------------------------------------


@app.on_event("startup")
async def startup_event():
    """Startup event handler."""
    # Token file is read once, here, so a corrupt file stops the boot
    get_token_store()
    logger.info(f"Server running on http://localhost:{settings.port}")
    logger.info(
        f"Authorize URL: http://localhost:{settings.port}/hubspot/authorize?org_id={hubspot.DEFAULT_ORG_ID}"
    )


# Include API routers
app.include_router(health.router)
app.include_router(hubspot.router)


if __name__ == "__main__":  # pragma: no cover
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.port)
