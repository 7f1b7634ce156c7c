import hashlib
import time
from supabase import Client
from fastapi import HTTPException
from typing import Dict, Any, Optional

# Token -> identity cache so parallel requests carrying the same JWT resolve once.
# Only identity is cached; admin status and grants are read fresh on every check.
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500


def _cache_key(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def _cached_identity(key: str, now: float) -> Optional[Dict[str, Any]]:
    entry = _AUTH_USER_CACHE.get(key)
    if entry is None:
        return None
    identity, expiry = entry
    if now >= expiry:
        del _AUTH_USER_CACHE[key]
        return None
    return identity


def _remember_identity(key: str, identity: Dict[str, Any], now: float) -> None:
    if len(_AUTH_USER_CACHE) >= _AUTH_CACHE_MAX_SIZE:
        for stale in [k for k, (_, expiry) in _AUTH_USER_CACHE.items() if expiry <= now]:
            del _AUTH_USER_CACHE[stale]
    if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
        _AUTH_USER_CACHE[key] = (identity, now + _AUTH_CACHE_TTL_SEC)


class AuthService:
    """Resolves the caller behind a Supabase Auth bearer token"""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_current_user(self, token: str) -> Dict[str, Any]:
        key = _cache_key(token)
        now = time.monotonic()
        identity = _cached_identity(key, now)
        if identity is not None:
            return identity

        try:
            user_response = self.supabase.auth.get_user(jwt=token)
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")
        if not user_response or not user_response.user:
            raise HTTPException(status_code=401, detail="Invalid or expired token")

        user = user_response.user
        identity = {
            "id": str(user.id),
            "email": user.email,
            "user_metadata": user.user_metadata or {},
            "created_at": user.created_at,
        }
        _remember_identity(key, identity, now)
        return identity


def clear_auth_cache() -> None:
    _AUTH_USER_CACHE.clear()
