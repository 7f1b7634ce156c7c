"""
Multi-step tenant operations that cross into the schema executor and the
storage provider.

Tenant state machine: nonexistent -> active <-> suspended -> deleted.
Deleted is terminal. Steps against the database registry are individually
atomic; steps against the executor or storage are not, so each operation
either compensates (create, status change) or reports what was already done
(delete).
"""

from supabase import Client
from tenant_admin.config.settings import settings
from tenant_admin.core.errors import ExternalDependencyError, TenantAdminError
from tenant_admin.modules.audit.schemas import AuditAction
from tenant_admin.modules.buckets.service import BucketService
from tenant_admin.modules.provisioning.executor import ProvisionOutcome, SchemaExecutor
from tenant_admin.modules.tenants.schemas import (
    ResourceFailure, Tenant, TenantCreateResult, TenantDeleteResult, TenantStatus
)
from tenant_admin.modules.tenants.service import TenantRegistry, parse_status
from tenant_admin.modules.tenants.validation import validate_schema_name
from typing import Optional, Union
import logging

logger = logging.getLogger(__name__)

_PROVISION_AUDIT_ACTIONS = {
    ProvisionOutcome.CREATED: AuditAction.CREATE,
    ProvisionOutcome.INITIALIZED_EXISTING: AuditAction.INIT_EXISTING_EMPTY,
    ProvisionOutcome.REGISTERED_EXISTING: AuditAction.REGISTER_EXISTING,
}


class LifecycleOrchestrator:
    def __init__(
        self,
        supabase: Client,
        executor: SchemaExecutor,
        buckets: BucketService,
        registry: Optional[TenantRegistry] = None,
        create_default_bucket: Optional[bool] = None,
    ):
        self.supabase = supabase
        self.executor = executor
        self.buckets = buckets
        self.registry = registry or buckets.registry
        self.directory = self.registry.directory
        self.grants = self.registry.grants
        self.audit = self.registry.audit
        if create_default_bucket is None:
            create_default_bucket = settings.tenant_default_bucket
        self.create_default_bucket = create_default_bucket

    def create_tenant(self, schema_name: str, display_name: Optional[str], actor_id: str) -> TenantCreateResult:
        validate_schema_name(schema_name)
        self.directory.require_admin(actor_id, "create schemas")
        tenant = self.registry.register(schema_name, display_name, actor_id)

        try:
            outcome = self.executor.provision_schema(schema_name)
        except ExternalDependencyError as e:
            self._rollback_registration(schema_name, e)
            raise

        self.audit.record(
            actor_id, _PROVISION_AUDIT_ACTIONS[outcome], "schema", schema_name,
            {"display_name": display_name},
        )

        bucket_ids = []
        failures = []
        if self.create_default_bucket:
            try:
                bucket_ids.append(self.buckets.provision_default(schema_name, actor_id).bucket_id)
            except TenantAdminError as e:
                logger.error(f"Tenant {schema_name} created without its bucket: {e.message}")
                failures.append(ResourceFailure(resource_type="bucket", resource_id=schema_name, error=e.message))

        logger.info(f"Tenant {schema_name} provisioned ({outcome.value})")
        return TenantCreateResult(
            tenant=tenant,
            provisioning=outcome.value,
            buckets=bucket_ids,
            failed_resources=failures,
        )

    def _rollback_registration(self, schema_name: str, error: ExternalDependencyError) -> None:
        try:
            self.registry.remove(schema_name)
        except Exception:
            logger.exception(f"Could not roll back registry row for {schema_name}")
            error.completed_steps.append("register_tenant")
            error.details["rolled_back"] = False
            return
        error.details["rolled_back"] = True
        logger.warning(f"Rolled back registration of {schema_name} after provisioning failure")

    def set_tenant_status(self, schema_name: str, status: Union[TenantStatus, str], actor_id: str) -> Tenant:
        """Suspend or activate, moving schema privileges along with the status"""
        target = parse_status(status)
        tenant = self.registry.transition(schema_name, target, actor_id)

        try:
            if target == TenantStatus.SUSPENDED:
                self.executor.revoke_privileges(schema_name)
            else:
                self.executor.grant_privileges(schema_name)
        except ExternalDependencyError as e:
            previous = TenantStatus.ACTIVE if target == TenantStatus.SUSPENDED else TenantStatus.SUSPENDED
            try:
                self.registry.transition(schema_name, previous, actor_id)
                e.details["rolled_back"] = True
            except TenantAdminError:
                logger.exception(f"Could not restore status of {schema_name} to {previous.value}")
                e.completed_steps.append("update_status")
                e.details["rolled_back"] = False
            raise

        action = AuditAction.SUSPEND if target == TenantStatus.SUSPENDED else AuditAction.ACTIVATE
        self.audit.record(actor_id, action, "schema", schema_name)
        logger.info(f"Tenant {schema_name} is now {target.value}")
        return tenant

    def delete_tenant(self, schema_name: str, actor_id: str) -> TenantDeleteResult:
        """Irreversibly remove a tenant, its grants, schema and buckets (super admins only)"""
        self.registry.check_deletable(schema_name, actor_id)
        linked = [b.bucket_id for b in self.buckets.linked(schema_name)]

        self.audit.record(actor_id, AuditAction.DELETE, "schema", schema_name, {"buckets": linked})
        completed = ["audit"]
        grants_removed = self.grants.delete_for_tenant(schema_name)
        completed.append("revoke_grants")

        try:
            self.executor.drop_schema(schema_name)
        except ExternalDependencyError as e:
            e.completed_steps.extend(completed)
            raise
        completed.append("drop_schema")

        deleted = []
        failures = []
        for bucket_id in linked:
            try:
                self.buckets.storage.delete_bucket(bucket_id)
                deleted.append(bucket_id)
            except Exception as e:
                logger.error(f"Failed to delete bucket {bucket_id} of {schema_name}: {e}")
                failures.append(ResourceFailure(resource_type="bucket", resource_id=bucket_id, error=str(e)))

        completed.extend(f"delete_bucket:{bucket_id}" for bucket_id in deleted)
        progress = {
            "buckets_deleted": deleted,
            "failed_resources": [f.model_dump() for f in failures],
        }
        self._finish_step("unlink_buckets", self.buckets.unlink_all, schema_name, completed, progress)
        self._finish_step("remove_registry_row", self.registry.remove, schema_name, completed, progress)

        if failures:
            logger.warning(f"Tenant {schema_name} deleted with {len(failures)} resource failure(s)")
        else:
            logger.info(f"Tenant {schema_name} deleted")
        return TenantDeleteResult(
            schema_name=schema_name,
            grants_removed=grants_removed,
            buckets_deleted=deleted,
            failed_resources=failures,
        )

    def _finish_step(self, operation, step, schema_name, completed, progress) -> None:
        """Run a registry cleanup step after the schema is already gone"""
        try:
            step(schema_name)
        except Exception as e:
            logger.exception(f"Delete of {schema_name} stopped at {operation}")
            raise ExternalDependencyError(
                f"Tenant {schema_name} was partially deleted, {operation} failed: {e}",
                operation=operation,
                completed_steps=completed,
                details=progress,
            )
        completed.append(operation)
