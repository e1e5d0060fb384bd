"""
Auth — API Key Check for Administrative Routes

Humanizing text is open. Swapping the catalog changes results for every
caller, so /catalog/reload requires a key once keys are configured.

Keys come from LIQUIDLENS_API_KEYS (comma-separated) and are held only
as SHA-256 hashes. With no keys configured, auth is disabled (dev mode).
"""

from __future__ import annotations

import hashlib
import os
from typing import Optional

from fastapi import HTTPException, Security
from fastapi.security import APIKeyHeader

API_KEY_HEADER = APIKeyHeader(name="X-API-Key", auto_error=False)

_VALID_KEY_HASHES: set[str] = {
    hashlib.sha256(key.strip().encode()).hexdigest()
    for key in os.getenv("LIQUIDLENS_API_KEYS", "").split(",")
    if key.strip()
}


def _hash(api_key: str) -> str:
    return hashlib.sha256(api_key.encode()).hexdigest()


def auth_enabled() -> bool:
    return bool(_VALID_KEY_HASHES)


def _verify_key(api_key: str) -> bool:
    return bool(api_key) and _hash(api_key) in _VALID_KEY_HASHES


async def require_api_key(
    api_key: Optional[str] = Security(API_KEY_HEADER),
) -> Optional[str]:
    """
    FastAPI dependency. Returns a short key id for logging, or None in
    dev mode. 401 when the header is missing, 403 when the key is unknown.
    """
    if not auth_enabled():
        return None

    if not api_key:
        raise HTTPException(
            status_code=401,
            detail="Missing API key. Include X-API-Key header.",
        )
    if not _verify_key(api_key):
        raise HTTPException(status_code=403, detail="Invalid API key.")

    return _hash(api_key)[:12]
