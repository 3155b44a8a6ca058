from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Dict, Optional

from app.config import get_settings
from app.schemas.token import TokenRecord

logger = logging.getLogger(__name__)


class TokenStore:
    """Org id -> TokenRecord map backed by a single JSON file.

    The file is read once on construction and rewritten in full by ``save``.
    There is no locking, so only one process may own a given file.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._records: Dict[str, TokenRecord] = {}
        if self.path.exists():
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            self._records = {
                org_id: TokenRecord.model_validate(record) for org_id, record in raw.items()
            }
            logger.info(f"Loaded {len(self._records)} token record(s) from {self.path}")

    def get(self, org_id: str) -> Optional[TokenRecord]:
        return self._records.get(org_id)

    def put(self, org_id: str, record: TokenRecord) -> None:
        self._records[org_id] = record

    def __contains__(self, org_id: object) -> bool:
        return org_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def dumps(self) -> str:
        return json.dumps(
            {org_id: record.model_dump() for org_id, record in self._records.items()},
            indent=2,
        )

    async def save(self) -> None:
        """Rewrite the whole token file."""
        await asyncio.to_thread(self.path.write_text, self.dumps(), encoding="utf-8")


_store: Optional[TokenStore] = None


def get_token_store() -> TokenStore:
    """FastAPI dependency returning the process-wide token store."""
    global _store
    if _store is None:
        _store = TokenStore(get_settings().tokens_file)
    return _store
