from supabase import Client
from tenant_admin.core.errors import (
    ConflictError, ExternalDependencyError, NotFoundError, is_unique_violation
)
from tenant_admin.database.supabase_client import TENANT_BUCKETS_TABLE
from tenant_admin.modules.access.schemas import AccessLevel
from tenant_admin.modules.audit.schemas import AuditAction
from tenant_admin.modules.authorization.engine import AuthorizationEngine
from tenant_admin.modules.buckets.schemas import TenantBucket
from tenant_admin.modules.buckets.storage import BucketStorage
from tenant_admin.modules.tenants.service import TenantRegistry
from tenant_admin.modules.tenants.validation import validate_bucket_id
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)


class BucketService:
    """Links between tenant schemas and storage buckets"""

    def __init__(
        self,
        supabase: Client,
        storage: BucketStorage,
        registry: Optional[TenantRegistry] = None,
        engine: Optional[AuthorizationEngine] = None,
    ):
        self.supabase = supabase
        self.storage = storage
        self.registry = registry or TenantRegistry(supabase)
        self.engine = engine or AuthorizationEngine(supabase, registry=self.registry)
        self.audit = self.registry.audit
        self.directory = self.registry.directory

    def linked(self, tenant_schema: str) -> List[TenantBucket]:
        result = self.supabase.table(TENANT_BUCKETS_TABLE)\
            .select("*")\
            .eq("tenant_schema", tenant_schema)\
            .order("created_at")\
            .execute()
        return [TenantBucket(**row) for row in result.data or []]

    def list_for_tenant(self, tenant_schema: str, actor_id: str) -> List[TenantBucket]:
        """Buckets of a tenant; needs read access to it"""
        self.engine.require(actor_id, tenant_schema, AccessLevel.READ.value)
        return self.linked(tenant_schema)

    def _link(self, tenant_schema: str, bucket_id: str, actor_id: Optional[str]) -> TenantBucket:
        try:
            result = self.supabase.table(TENANT_BUCKETS_TABLE).insert({
                "tenant_schema": tenant_schema,
                "bucket_id": bucket_id,
                "created_by": actor_id,
            }).execute()
        except Exception as e:
            if is_unique_violation(e):
                raise ConflictError("Bucket already linked")
            raise ExternalDependencyError(
                f"Failed to link bucket {bucket_id} to {tenant_schema}: {e}", operation="link_bucket"
            )
        return TenantBucket(**result.data[0])

    def provision_default(self, tenant_schema: str, actor_id: str) -> TenantBucket:
        """Create the private bucket named after a new schema and link it"""
        try:
            self.storage.ensure_bucket(tenant_schema)
        except Exception as e:
            raise ExternalDependencyError(
                f"Failed to create storage bucket {tenant_schema}: {e}", operation="create_bucket"
            )
        bucket = self._link(tenant_schema, tenant_schema, actor_id)
        self.audit.record(
            actor_id, AuditAction.CREATE_BUCKET, "bucket", tenant_schema, {"schema": tenant_schema}
        )
        return bucket

    def create_and_link(self, tenant_schema: str, bucket_id: str, actor_id: str) -> TenantBucket:
        """Create a private bucket if missing and link it (admins only)"""
        validate_bucket_id(bucket_id)
        self.directory.require_admin(actor_id, "manage buckets")
        self.registry.require(tenant_schema)
        try:
            self.storage.ensure_bucket(bucket_id)
        except Exception as e:
            raise ExternalDependencyError(
                f"Failed to create storage bucket {bucket_id}: {e}", operation="create_bucket"
            )
        bucket = self._link(tenant_schema, bucket_id, actor_id)
        self.audit.record(
            actor_id, AuditAction.CREATE_BUCKET, "bucket", bucket_id, {"schema": tenant_schema}
        )
        return bucket

    def link_existing(self, tenant_schema: str, bucket_id: str, actor_id: str) -> TenantBucket:
        """Link a bucket that already exists in storage (admins only)"""
        validate_bucket_id(bucket_id)
        self.directory.require_admin(actor_id, "manage buckets")
        self.registry.require(tenant_schema)
        if not self.storage.bucket_exists(bucket_id):
            raise NotFoundError("Bucket does not exist")
        bucket = self._link(tenant_schema, bucket_id, actor_id)
        self.audit.record(
            actor_id, AuditAction.LINK_BUCKET, "bucket", bucket_id, {"schema": tenant_schema}
        )
        return bucket

    def unlink_all(self, tenant_schema: str) -> int:
        result = self.supabase.table(TENANT_BUCKETS_TABLE)\
            .delete()\
            .eq("tenant_schema", tenant_schema)\
            .execute()
        return len(result.data or [])
