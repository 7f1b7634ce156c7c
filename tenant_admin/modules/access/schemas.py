from enum import Enum
from pydantic import BaseModel
from typing import Optional
from datetime import datetime, timezone


class AccessLevel(str, Enum):
    READ = "read"
    WRITE = "write"
    ADMIN = "admin"

    @property
    def rank(self) -> int:
        return _LEVEL_RANK[self]

    def satisfies(self, required: "AccessLevel") -> bool:
        """admin covers write covers read"""
        return self.rank >= AccessLevel(required).rank

    @classmethod
    def parse(cls, value: str) -> Optional["AccessLevel"]:
        try:
            return cls(value)
        except ValueError:
            return None


_LEVEL_RANK = {AccessLevel.READ: 1, AccessLevel.WRITE: 2, AccessLevel.ADMIN: 3}


class AccessGrant(BaseModel):
    id: Optional[str] = None
    user_id: str
    tenant_schema: str
    access_level: AccessLevel
    granted_by: Optional[str] = None
    granted_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return expires_at <= now


class GrantRequest(BaseModel):
    user_id: str
    tenant_schema: str
    access_level: str = AccessLevel.READ.value
    expires_at: Optional[datetime] = None


class RevokeRequest(BaseModel):
    user_id: str
    tenant_schema: str
