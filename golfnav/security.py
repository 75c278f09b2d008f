"""API key and admin token dependencies."""

from __future__ import annotations

import hmac
import os
from typing import FrozenSet, Optional

from fastapi import Header, HTTPException, Query, status

from golfnav.config import env_bool


def configured_api_keys() -> FrozenSet[str]:
    """Keys accepted from ``API_KEY`` plus the comma separated ``GOLFNAV_API_KEYS``."""

    raw = [os.getenv("API_KEY", "")] + os.getenv("GOLFNAV_API_KEYS", "").split(",")
    return frozenset(part.strip() for part in raw if part.strip())


def _matches(candidate: Optional[str], accepted: FrozenSet[str]) -> bool:
    if not candidate:
        return False
    return any(hmac.compare_digest(candidate, key) for key in accepted)


def require_api_key(
    x_api_key: Optional[str] = Header(default=None, alias="x-api-key"),
    api_key_query: Optional[str] = Query(default=None, alias="apiKey"),
) -> Optional[str]:
    """Return the caller's key, rejecting unknown keys when ``REQUIRE_API_KEY`` is on."""

    presented = x_api_key or api_key_query
    if not env_bool("REQUIRE_API_KEY", False):
        return presented
    if not _matches(presented, configured_api_keys()):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, detail="invalid api key")
    return presented


def require_admin_token(
    x_admin_token: Optional[str] = Header(default=None, alias="x-admin-token"),
) -> str:
    expected = os.getenv("ADMIN_TOKEN", "").strip()
    if not expected:
        raise HTTPException(
            status.HTTP_503_SERVICE_UNAVAILABLE, detail="admin token not configured"
        )
    if not _matches(x_admin_token, frozenset({expected})):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, detail="invalid admin token")
    return f"admin:{x_admin_token[-4:]}"


__all__ = ["configured_api_keys", "require_admin_token", "require_api_key"]
