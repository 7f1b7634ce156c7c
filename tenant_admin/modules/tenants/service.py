from datetime import datetime, timezone
from supabase import Client
from tenant_admin.core.errors import ConflictError, NotFoundError, ValidationError, is_unique_violation
from tenant_admin.database.supabase_client import TENANTS_TABLE
from tenant_admin.modules.access.service import GrantStore
from tenant_admin.modules.admins.service import PrincipalDirectory
from tenant_admin.modules.audit.schemas import AuditAction
from tenant_admin.modules.audit.service import AuditRecorder
from tenant_admin.modules.tenants.schemas import Tenant, TenantInfo, TenantStatus
from tenant_admin.modules.tenants.validation import is_reserved_schema_name, validate_schema_name
from typing import List, Optional, Union
import logging

logger = logging.getLogger(__name__)

_STATUS_AUDIT_ACTIONS = {
    TenantStatus.SUSPENDED: AuditAction.SUSPEND,
    TenantStatus.ACTIVE: AuditAction.ACTIVATE,
}


def parse_status(status: Union[TenantStatus, str]) -> TenantStatus:
    try:
        return TenantStatus(status)
    except ValueError:
        raise ValidationError('Invalid status. Must be "active" or "suspended"')


class TenantRegistry:
    """Tenant records and their admin-gated state changes.

    ``register``/``transition``/``remove`` are the raw steps the lifecycle
    orchestrator sequences around external DDL; ``create``/``set_status``/
    ``delete`` are the complete single-store operations including audit.
    """

    def __init__(
        self,
        supabase: Client,
        directory: Optional[PrincipalDirectory] = None,
        grants: Optional[GrantStore] = None,
        audit: Optional[AuditRecorder] = None,
    ):
        self.supabase = supabase
        self.audit = audit or AuditRecorder(supabase)
        self.directory = directory or PrincipalDirectory(supabase, self.audit)
        self.grants = grants or GrantStore(supabase, self.directory, self.audit)

    # -- reads --------------------------------------------------------------

    def get(self, schema_name: str) -> Optional[Tenant]:
        result = self.supabase.table(TENANTS_TABLE)\
            .select("*")\
            .eq("schema_name", schema_name)\
            .limit(1)\
            .execute()
        if not result.data:
            return None
        return Tenant(**result.data[0])

    def require(self, schema_name: str) -> Tenant:
        tenant = self.get(schema_name)
        if tenant is None:
            raise NotFoundError(f'Schema "{schema_name}" not found')
        return tenant

    def list(self) -> List[Tenant]:
        result = self.supabase.table(TENANTS_TABLE)\
            .select("*")\
            .order("created_at", desc=True)\
            .execute()
        return [Tenant(**row) for row in result.data or []]

    def list_visible(self, principal_id: str) -> List[Tenant]:
        """Every tenant for admins; otherwise only tenants the principal holds an unexpired grant on"""
        tenants = self.list()
        if self.directory.is_admin(principal_id):
            return tenants
        visible = {s.schema_name for s in self.grants.accessible_schemas(principal_id)}
        return [t for t in tenants if t.schema_name in visible]

    def info(self, schema_name: str) -> TenantInfo:
        tenant = self.require(schema_name)
        return TenantInfo(
            schema_name=tenant.schema_name,
            display_name=tenant.display_name,
            status=tenant.status,
            created_at=tenant.created_at,
        )

    # -- raw steps ----------------------------------------------------------

    def register(self, schema_name: str, display_name: Optional[str], actor_id: str) -> Tenant:
        """Validate and insert the tenant row without auditing"""
        validate_schema_name(schema_name)
        self.directory.require_admin(actor_id, "create schemas")
        if self.get(schema_name) is not None:
            raise ConflictError("A schema with this name already exists")

        row = {
            "schema_name": schema_name,
            "display_name": display_name or schema_name,
            "status": TenantStatus.ACTIVE.value,
            "created_by": actor_id,
        }
        try:
            result = self.supabase.table(TENANTS_TABLE).insert(row).execute()
        except Exception as e:
            if is_unique_violation(e):
                raise ConflictError("A schema with this name already exists")
            raise
        return Tenant(**result.data[0])

    def transition(self, schema_name: str, status: Union[TenantStatus, str], actor_id: str) -> Tenant:
        """Conditionally move a tenant to ``status`` without auditing.

        The update only matches rows not already in the target status, so two
        concurrent callers cannot both succeed from the same prior state.
        """
        target = parse_status(status)
        self.directory.require_admin(
            actor_id, "suspend schemas" if target == TenantStatus.SUSPENDED else "activate schemas"
        )
        result = self.supabase.table(TENANTS_TABLE)\
            .update({"status": target.value, "updated_at": datetime.now(timezone.utc).isoformat()})\
            .eq("schema_name", schema_name)\
            .neq("status", target.value)\
            .execute()
        if not result.data:
            if self.get(schema_name) is None:
                raise NotFoundError(f'Schema "{schema_name}" not found')
            raise ConflictError(f'Schema "{schema_name}" is already {target.value}')
        return Tenant(**result.data[0])

    def remove(self, schema_name: str) -> bool:
        result = self.supabase.table(TENANTS_TABLE)\
            .delete()\
            .eq("schema_name", schema_name)\
            .execute()
        return bool(result.data)

    # -- complete operations ------------------------------------------------

    def create(self, schema_name: str, display_name: Optional[str], actor_id: str) -> Tenant:
        tenant = self.register(schema_name, display_name, actor_id)
        self.audit.record(
            actor_id, AuditAction.CREATE, "schema", schema_name,
            {"display_name": display_name},
        )
        logger.info(f"Registered tenant {schema_name}")
        return tenant

    def set_status(self, schema_name: str, status: Union[TenantStatus, str], actor_id: str) -> Tenant:
        """Suspend or activate. Raises ConflictError when already in that status."""
        tenant = self.transition(schema_name, status, actor_id)
        self.audit.record(actor_id, _STATUS_AUDIT_ACTIONS[tenant.status], "schema", schema_name)
        logger.info(f"Tenant {schema_name} is now {tenant.status.value}")
        return tenant

    def check_deletable(self, schema_name: str, actor_id: str) -> Tenant:
        self.directory.require_super_admin(actor_id, "delete schemas")
        if is_reserved_schema_name(schema_name):
            raise ValidationError(f"Cannot delete protected system schema: {schema_name}")
        return self.require(schema_name)

    def delete(self, schema_name: str, actor_id: str) -> int:
        """Audit, drop every grant, then remove the row. Returns the number of grants removed."""
        self.check_deletable(schema_name, actor_id)
        self.audit.record(actor_id, AuditAction.DELETE, "schema", schema_name)
        removed = self.grants.delete_for_tenant(schema_name)
        self.remove(schema_name)
        logger.info(f"Deleted tenant {schema_name} ({removed} grants removed)")
        return removed
