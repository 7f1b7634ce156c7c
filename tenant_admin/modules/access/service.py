from datetime import datetime, timezone
from supabase import Client
from tenant_admin.core.errors import NotFoundError, ValidationError
from tenant_admin.database.supabase_client import TENANTS_TABLE, USER_SCHEMA_ACCESS_TABLE
from tenant_admin.modules.access.schemas import AccessGrant, AccessLevel
from tenant_admin.modules.admins.schemas import AccessibleSchema
from tenant_admin.modules.admins.service import PrincipalDirectory
from tenant_admin.modules.audit.schemas import AuditAction
from tenant_admin.modules.audit.service import AuditRecorder
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)


class GrantStore:
    """Per-(principal, tenant) access grants"""

    def __init__(
        self,
        supabase: Client,
        directory: Optional[PrincipalDirectory] = None,
        audit: Optional[AuditRecorder] = None,
    ):
        self.supabase = supabase
        self.audit = audit or AuditRecorder(supabase)
        self.directory = directory or PrincipalDirectory(supabase, self.audit)

    def _find(self, principal_id: str, tenant_schema: str) -> Optional[AccessGrant]:
        result = self.supabase.table(USER_SCHEMA_ACCESS_TABLE)\
            .select("*")\
            .eq("user_id", principal_id)\
            .eq("tenant_schema", tenant_schema)\
            .limit(1)\
            .execute()
        if not result.data:
            return None
        return AccessGrant(**result.data[0])

    def _tenant_exists(self, tenant_schema: str) -> bool:
        result = self.supabase.table(TENANTS_TABLE)\
            .select("id")\
            .eq("schema_name", tenant_schema)\
            .limit(1)\
            .execute()
        return bool(result.data)

    def has_access(self, principal_id: str, tenant_schema: str, required_level: str = AccessLevel.READ.value) -> bool:
        """Admins pass outright; everyone else needs an unexpired grant at or above required_level"""
        required = AccessLevel.parse(required_level)
        if required is None:
            raise ValidationError("Invalid access level. Must be: read, write, or admin")
        if self.directory.is_admin(principal_id):
            return True
        grant = self._find(principal_id, tenant_schema)
        if grant is None or grant.is_expired():
            return False
        return grant.access_level.satisfies(required)

    def grant(
        self,
        principal_id: str,
        tenant_schema: str,
        level: str,
        actor_id: str,
        expires_at: Optional[datetime] = None,
    ) -> AccessGrant:
        """Create or overwrite the grant for (principal, tenant)"""
        self.directory.require_admin(actor_id, "grant schema access")
        access_level = AccessLevel.parse(level)
        if access_level is None:
            raise ValidationError("Invalid access level. Must be: read, write, or admin")
        if not self._tenant_exists(tenant_schema):
            raise NotFoundError(f'Schema "{tenant_schema}" not found')
        if not self.directory.principal_exists(principal_id):
            raise NotFoundError("User not found")

        previous = self._find(principal_id, tenant_schema)
        row = {
            "user_id": principal_id,
            "tenant_schema": tenant_schema,
            "access_level": access_level.value,
            "granted_by": actor_id,
            "granted_at": datetime.now(timezone.utc).isoformat(),
            "expires_at": expires_at.isoformat() if expires_at else None,
        }
        result = self.supabase.table(USER_SCHEMA_ACCESS_TABLE)\
            .upsert(row, on_conflict="user_id,tenant_schema")\
            .execute()
        saved = AccessGrant(**result.data[0])

        self.audit.record(
            actor_id, AuditAction.GRANT_ACCESS, "user_schema_access", saved.id,
            {
                "target_user": principal_id,
                "schema": tenant_schema,
                "previous_level": previous.access_level.value if previous else None,
                "level": access_level.value,
                "expires_at": row["expires_at"],
            },
        )
        logger.info(f"Granted {access_level.value} on {tenant_schema} to {principal_id}")
        return saved

    def revoke(self, principal_id: str, tenant_schema: str, actor_id: str) -> bool:
        """Delete the grant if present. Returns whether a row was removed; absent rows are not an error."""
        self.directory.require_admin(actor_id, "revoke schema access")
        result = self.supabase.table(USER_SCHEMA_ACCESS_TABLE)\
            .delete()\
            .eq("user_id", principal_id)\
            .eq("tenant_schema", tenant_schema)\
            .execute()
        removed = result.data or []
        previous_level = removed[0].get("access_level") if removed else None

        self.audit.record(
            actor_id, AuditAction.REVOKE_ACCESS, "user_schema_access", None,
            {
                "target_user": principal_id,
                "schema": tenant_schema,
                "previous_level": previous_level,
                "level": None,
            },
        )
        return bool(removed)

    def list_for_tenant(self, tenant_schema: str) -> List[AccessGrant]:
        result = self.supabase.table(USER_SCHEMA_ACCESS_TABLE)\
            .select("*")\
            .eq("tenant_schema", tenant_schema)\
            .order("granted_at", desc=True)\
            .execute()
        return [AccessGrant(**row) for row in result.data or []]

    def list_for_principal(self, principal_id: str) -> List[AccessGrant]:
        result = self.supabase.table(USER_SCHEMA_ACCESS_TABLE)\
            .select("*")\
            .eq("user_id", principal_id)\
            .order("granted_at", desc=True)\
            .execute()
        return [AccessGrant(**row) for row in result.data or []]

    def accessible_schemas(self, principal_id: str) -> List[AccessibleSchema]:
        """Admins see every tenant at admin level; others see their unexpired grants"""
        if self.directory.is_admin(principal_id):
            tenants = self.supabase.table(TENANTS_TABLE)\
                .select("schema_name")\
                .order("schema_name")\
                .execute()
            return [
                AccessibleSchema(schema_name=t["schema_name"], level=AccessLevel.ADMIN.value)
                for t in tenants.data or []
            ]
        now = datetime.now(timezone.utc)
        return [
            AccessibleSchema(schema_name=g.tenant_schema, level=g.access_level.value)
            for g in self.list_for_principal(principal_id)
            if not g.is_expired(now)
        ]

    def delete_for_tenant(self, tenant_schema: str) -> int:
        """Remove every grant on a tenant; the cascade step of tenant deletion"""
        result = self.supabase.table(USER_SCHEMA_ACCESS_TABLE)\
            .delete()\
            .eq("tenant_schema", tenant_schema)\
            .execute()
        return len(result.data or [])
