from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class BucketRequest(BaseModel):
    bucket_id: str


class TenantBucket(BaseModel):
    id: Optional[str] = None
    tenant_schema: str
    bucket_id: str
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TenantBucketList(BaseModel):
    schema_name: str
    buckets: List[TenantBucket]
