from enum import Enum
from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class AdminRole(str, Enum):
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    VIEWER = "viewer"


# Roles a super_admin may hand out through promotion
PROMOTABLE_ROLES = (AdminRole.ADMIN, AdminRole.VIEWER)


class AdminRecord(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    role: AdminRole
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class Principal(BaseModel):
    id: str
    email: Optional[str] = None
    created_at: Optional[datetime] = None


class PrincipalResponse(BaseModel):
    id: str
    email: Optional[str] = None
    created_at: Optional[datetime] = None
    is_admin: bool = False
    admin_role: Optional[AdminRole] = None


class PromoteRequest(BaseModel):
    user_id: str
    role: str = AdminRole.ADMIN.value


class AccessibleSchema(BaseModel):
    schema_name: str
    level: str


class CurrentUserInfo(BaseModel):
    user_id: str
    email: Optional[str] = None
    is_admin: bool
    is_super_admin: bool
    admin_role: Optional[AdminRole] = None
    accessible_schemas: List[AccessibleSchema] = []
