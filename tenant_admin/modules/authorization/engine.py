"""
Data-access decisions for tenant schemas.

Order matters: an unknown tenant is NOT_FOUND, a suspended tenant is denied
before any privilege is consulted (platform admins included), and only then
does the grant store decide. Lifecycle operations such as reactivation are
gated by the tenant registry, not by this path.
"""

from supabase import Client
from tenant_admin.core.errors import NotFoundError, PermissionDeniedError, ValidationError
from tenant_admin.modules.access.schemas import AccessLevel
from tenant_admin.modules.access.service import GrantStore
from tenant_admin.modules.authorization.schemas import Decision, DenyReason
from tenant_admin.modules.tenants.schemas import TenantStatus
from tenant_admin.modules.tenants.service import TenantRegistry
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class AuthorizationEngine:
    def __init__(
        self,
        supabase: Client,
        registry: Optional[TenantRegistry] = None,
        grants: Optional[GrantStore] = None,
    ):
        self.registry = registry or TenantRegistry(supabase, grants=grants)
        self.grants = grants or self.registry.grants

    def authorize(
        self,
        principal_id: str,
        tenant_schema: str,
        required_level: str = AccessLevel.READ.value,
    ) -> Decision:
        if AccessLevel.parse(required_level) is None:
            raise ValidationError("Invalid access level. Must be: read, write, or admin")
        tenant = self.registry.get(tenant_schema)
        if tenant is None:
            return Decision.deny(DenyReason.NOT_FOUND)
        if tenant.status == TenantStatus.SUSPENDED:
            logger.debug(f"Denied {principal_id} on suspended tenant {tenant_schema}")
            return Decision.deny(DenyReason.SUSPENDED)
        if self.grants.has_access(principal_id, tenant_schema, required_level):
            return Decision.allow()
        return Decision.deny(DenyReason.INSUFFICIENT_ACCESS)

    def require(
        self,
        principal_id: str,
        tenant_schema: str,
        required_level: str = AccessLevel.READ.value,
    ) -> None:
        """authorize, raising the matching error on denial"""
        decision = self.authorize(principal_id, tenant_schema, required_level)
        if decision.allowed:
            return
        if decision.reason == DenyReason.NOT_FOUND:
            raise NotFoundError(f'Schema "{tenant_schema}" not found')
        if decision.reason == DenyReason.SUSPENDED:
            raise PermissionDeniedError(
                f'Schema "{tenant_schema}" is suspended', {"reason": decision.reason.value}
            )
        raise PermissionDeniedError(
            f'Access denied: {required_level} access to "{tenant_schema}" required',
            {"reason": decision.reason.value},
        )
