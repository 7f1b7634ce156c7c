"""
Core dependencies for route protection and service wiring
"""

from fastapi import Depends, Request, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from tenant_admin.database.supabase_client import get_supabase, get_service_supabase
from tenant_admin.modules.access.service import GrantStore
from tenant_admin.modules.admins.service import PrincipalDirectory
from tenant_admin.modules.audit.service import AuditRecorder
from tenant_admin.modules.auth.service import AuthService
from tenant_admin.modules.authorization.engine import AuthorizationEngine
from tenant_admin.modules.buckets.service import BucketService
from tenant_admin.modules.buckets.storage import BucketStorage, get_bucket_storage
from tenant_admin.modules.provisioning.executor import SchemaExecutor
from tenant_admin.modules.tenants.lifecycle import LifecycleOrchestrator
from tenant_admin.modules.tenants.service import TenantRegistry
from supabase import Client
from typing import Dict, Optional
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    token = credentials.credentials
    return auth_service.get_current_user(token)


def get_request_context(request: Request) -> Dict[str, Optional[str]]:
    """Client hints stamped on audit entries"""
    return {
        "ip_address": request.client.host if request.client else None,
        "user_agent": request.headers.get("user-agent"),
    }


def get_audit_recorder(
    context: Dict = Depends(get_request_context),
    supabase: Client = Depends(get_service_supabase)
) -> AuditRecorder:
    return AuditRecorder(supabase, context)


def get_principal_directory(
    supabase: Client = Depends(get_service_supabase),
    audit: AuditRecorder = Depends(get_audit_recorder)
) -> PrincipalDirectory:
    return PrincipalDirectory(supabase, audit)


def get_grant_store(
    supabase: Client = Depends(get_service_supabase),
    directory: PrincipalDirectory = Depends(get_principal_directory),
    audit: AuditRecorder = Depends(get_audit_recorder)
) -> GrantStore:
    return GrantStore(supabase, directory, audit)


def get_tenant_registry(
    supabase: Client = Depends(get_service_supabase),
    directory: PrincipalDirectory = Depends(get_principal_directory),
    grants: GrantStore = Depends(get_grant_store),
    audit: AuditRecorder = Depends(get_audit_recorder)
) -> TenantRegistry:
    return TenantRegistry(supabase, directory, grants, audit)


def get_authorization_engine(
    supabase: Client = Depends(get_service_supabase),
    registry: TenantRegistry = Depends(get_tenant_registry)
) -> AuthorizationEngine:
    return AuthorizationEngine(supabase, registry=registry, grants=registry.grants)


def get_storage(supabase: Client = Depends(get_service_supabase)) -> BucketStorage:
    return get_bucket_storage(supabase)


def get_bucket_service(
    supabase: Client = Depends(get_service_supabase),
    storage: BucketStorage = Depends(get_storage),
    registry: TenantRegistry = Depends(get_tenant_registry),
    engine: AuthorizationEngine = Depends(get_authorization_engine)
) -> BucketService:
    return BucketService(supabase, storage, registry, engine)


def get_schema_executor(supabase: Client = Depends(get_service_supabase)) -> SchemaExecutor:
    return SchemaExecutor(supabase)


def get_lifecycle_orchestrator(
    supabase: Client = Depends(get_service_supabase),
    executor: SchemaExecutor = Depends(get_schema_executor),
    buckets: BucketService = Depends(get_bucket_service)
) -> LifecycleOrchestrator:
    return LifecycleOrchestrator(supabase, executor, buckets)


def require_admin(
    user_data: dict = Depends(get_current_user_id),
    directory: PrincipalDirectory = Depends(get_principal_directory)
) -> dict:
    """Dependency for admin-only reads; re-checked on every request"""
    directory.require_admin(user_data["id"], "perform this action")
    return user_data


def require_schema_access(required_level: str):
    """Factory function to create a tenant data-access check on the {schema} path parameter"""
    def check_schema_access(
        schema: str,
        user_data: dict = Depends(get_current_user_id),
        engine: AuthorizationEngine = Depends(get_authorization_engine)
    ) -> dict:
        engine.require(user_data["id"], schema, required_level)
        return user_data
    return check_schema_access
