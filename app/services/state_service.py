"""Signed, time-boxed OAuth ``state`` values.

A state is ``<payload>.<signature>``: the payload is unpadded base64url JSON
and the signature is the hex HMAC-SHA256 of the payload string. Nothing is
stored server side; the signature and the embedded timestamp are enough to
reject forged or replayed callbacks.
"""
from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import secrets
import time
from typing import Any, Dict, Optional

STATE_TTL_MS = 10 * 60 * 1000


def _now_ms() -> int:
    return int(time.time() * 1000)


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _b64url_decode(data: str) -> bytes:
    return base64.urlsafe_b64decode(data + "=" * (-len(data) % 4))


def _signature(payload: str, secret: str) -> str:
    return hmac.new(secret.encode(), payload.encode(), hashlib.sha256).hexdigest()


def sign_state(payload: Dict[str, Any], secret: str) -> str:
    encoded = _b64url_encode(json.dumps(payload, separators=(",", ":")).encode())
    return f"{encoded}.{_signature(encoded, secret)}"


def new_state(org_id: str, secret: str, now_ms: Optional[int] = None) -> str:
    """Return a fresh state for *org_id* carrying a timestamp and random nonce."""
    return sign_state(
        {
            "org_id": org_id,
            "ts": _now_ms() if now_ms is None else now_ms,
            "nonce": secrets.token_hex(8),
        },
        secret,
    )


def verify_state(
    state: Optional[str], secret: str, now_ms: Optional[int] = None
) -> Optional[Dict[str, Any]]:
    """Return the decoded payload, or ``None`` if the state is forged, malformed or expired."""
    payload, _, sig = (state or "").partition(".")
    if not payload or not sig:
        return None

    if not hmac.compare_digest(sig.encode(), _signature(payload, secret).encode()):
        return None

    try:
        data = json.loads(_b64url_decode(payload))
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None
    if not isinstance(data, dict) or not isinstance(data.get("ts"), int):
        return None
    if not isinstance(data.get("org_id"), str):
        return None

    now = _now_ms() if now_ms is None else now_ms
    if now - data["ts"] > STATE_TTL_MS:
        return None
    return data
