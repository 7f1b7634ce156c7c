from enum import Enum
from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class TenantStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


class StatusAction(str, Enum):
    SUSPEND = "suspend"
    ACTIVATE = "activate"

    @property
    def target_status(self) -> TenantStatus:
        return TenantStatus.SUSPENDED if self is StatusAction.SUSPEND else TenantStatus.ACTIVE


class Tenant(BaseModel):
    id: str
    schema_name: str
    display_name: Optional[str] = None
    status: TenantStatus = TenantStatus.ACTIVE
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TenantCreate(BaseModel):
    schema_name: str
    display_name: Optional[str] = None


class TenantStatusUpdate(BaseModel):
    action: StatusAction


class TenantInfo(BaseModel):
    """Tenant fields safe to expose to any authenticated caller"""
    schema_name: str
    display_name: Optional[str] = None
    status: TenantStatus
    created_at: Optional[datetime] = None


class ResourceFailure(BaseModel):
    resource_type: str
    resource_id: str
    error: str


class TenantCreateResult(BaseModel):
    tenant: Tenant
    provisioning: str
    buckets: List[str] = []
    failed_resources: List[ResourceFailure] = []


class TenantDeleteResult(BaseModel):
    schema_name: str
    deleted: bool = True
    grants_removed: int = 0
    buckets_deleted: List[str] = []
    failed_resources: List[ResourceFailure] = []

    @property
    def partial(self) -> bool:
        return bool(self.failed_resources)
