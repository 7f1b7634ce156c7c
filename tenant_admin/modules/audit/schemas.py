from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
from datetime import datetime


class AuditAction(str, Enum):
    CREATE = "CREATE"
    INIT_EXISTING_EMPTY = "INIT_EXISTING_EMPTY"
    REGISTER_EXISTING = "REGISTER_EXISTING"
    SUSPEND = "SUSPEND"
    ACTIVATE = "ACTIVATE"
    DELETE = "DELETE"
    GRANT_ACCESS = "GRANT_ACCESS"
    REVOKE_ACCESS = "REVOKE_ACCESS"
    PROMOTE_ADMIN = "PROMOTE_ADMIN"
    REVOKE_ADMIN = "REVOKE_ADMIN"
    CREATE_BUCKET = "CREATE_BUCKET"
    LINK_BUCKET = "LINK_BUCKET"


class AuditEntryResponse(BaseModel):
    id: str
    user_id: Optional[str] = None
    action: str
    resource_type: str
    resource_id: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
