from enum import Enum
from pydantic import BaseModel
from typing import Optional


class DenyReason(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    SUSPENDED = "SUSPENDED"
    INSUFFICIENT_ACCESS = "INSUFFICIENT_ACCESS"


class Decision(BaseModel):
    allowed: bool
    reason: Optional[DenyReason] = None

    @classmethod
    def allow(cls) -> "Decision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenyReason) -> "Decision":
        return cls(allowed=False, reason=reason)


class AuthorizationResponse(BaseModel):
    principal_id: str
    schema_name: str
    required_level: str
    allowed: bool
    reason: Optional[DenyReason] = None
