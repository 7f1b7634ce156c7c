from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from tenant_admin.core.dependencies import (
    get_current_user_id, get_authorization_engine, get_bucket_service,
    get_lifecycle_orchestrator, get_schema_executor, get_tenant_registry, require_schema_access
)
from tenant_admin.core.errors import ValidationError
from tenant_admin.modules.access.schemas import AccessLevel
from tenant_admin.modules.authorization.engine import AuthorizationEngine
from tenant_admin.modules.authorization.schemas import AuthorizationResponse
from tenant_admin.modules.buckets.schemas import BucketRequest, TenantBucket, TenantBucketList
from tenant_admin.modules.buckets.service import BucketService
from tenant_admin.modules.provisioning.executor import SchemaExecutor
from tenant_admin.modules.provisioning.schemas import SchemaSummary, SchemaTableList, TableColumnList
from tenant_admin.modules.tenants.lifecycle import LifecycleOrchestrator
from tenant_admin.modules.tenants.schemas import (
    Tenant, TenantCreate, TenantCreateResult, TenantDeleteResult, TenantInfo, TenantStatusUpdate
)
from tenant_admin.modules.tenants.service import TenantRegistry
from tenant_admin.modules.tenants.validation import validate_table_name
from typing import List, Dict

router = APIRouter(prefix="/tenants", tags=["tenants"])


@router.get("", response_model=List[Tenant])
async def list_tenants(
    user_data: Dict = Depends(get_current_user_id),
    registry: TenantRegistry = Depends(get_tenant_registry)
):
    """List tenants (all for admins, granted ones otherwise), newest first"""
    return registry.list_visible(user_data["id"])


@router.post("", response_model=TenantCreateResult, status_code=201)
async def create_tenant(
    tenant_data: TenantCreate,
    user_data: Dict = Depends(get_current_user_id),
    orchestrator: LifecycleOrchestrator = Depends(get_lifecycle_orchestrator)
):
    """Create and provision a tenant schema (admins only)"""
    return orchestrator.create_tenant(tenant_data.schema_name, tenant_data.display_name, user_data["id"])


@router.get("/{schema}", response_model=Tenant)
async def get_tenant(
    schema: str,
    user_data: Dict = Depends(require_schema_access(AccessLevel.READ.value)),
    registry: TenantRegistry = Depends(get_tenant_registry)
):
    """Tenant details (requires read access; denied while suspended)"""
    return registry.require(schema)


@router.get("/{schema}/summary", response_model=SchemaSummary)
async def get_schema_summary(
    schema: str,
    user_data: Dict = Depends(require_schema_access(AccessLevel.READ.value)),
    executor: SchemaExecutor = Depends(get_schema_executor)
):
    """Table count and size of a tenant schema (requires read access)"""
    return executor.schema_summary(schema)


@router.get("/{schema}/tables", response_model=SchemaTableList)
async def list_tables(
    schema: str,
    user_data: Dict = Depends(require_schema_access(AccessLevel.READ.value)),
    executor: SchemaExecutor = Depends(get_schema_executor)
):
    """Tables of a tenant schema (requires read access; denied while suspended)"""
    return SchemaTableList(schema_name=schema, tables=executor.list_tables(schema))


@router.get("/{schema}/tables/{table}/columns", response_model=TableColumnList)
async def list_table_columns(
    schema: str,
    table: str,
    user_data: Dict = Depends(require_schema_access(AccessLevel.READ.value)),
    executor: SchemaExecutor = Depends(get_schema_executor)
):
    """Columns of one table in a tenant schema (requires read access)"""
    validate_table_name(table)
    return TableColumnList(schema_name=schema, table_name=table, columns=executor.table_columns(schema, table))


@router.get("/{schema}/status", response_model=TenantInfo)
async def get_tenant_status(
    schema: str,
    user_data: Dict = Depends(get_current_user_id),
    registry: TenantRegistry = Depends(get_tenant_registry)
):
    """Public tenant info so clients can tell an active tenant from a suspended one"""
    return registry.info(schema)


@router.patch("/{schema}/status", response_model=Tenant)
async def update_tenant_status(
    schema: str,
    update: TenantStatusUpdate,
    user_data: Dict = Depends(get_current_user_id),
    orchestrator: LifecycleOrchestrator = Depends(get_lifecycle_orchestrator)
):
    """Suspend or activate a tenant (admins only). Already in that state -> 409."""
    return orchestrator.set_tenant_status(schema, update.action.target_status, user_data["id"])


@router.delete("/{schema}", response_model=TenantDeleteResult)
async def delete_tenant(
    schema: str,
    confirm: str = "",
    user_data: Dict = Depends(get_current_user_id),
    orchestrator: LifecycleOrchestrator = Depends(get_lifecycle_orchestrator)
):
    """Permanently delete a tenant (super admins only). ``confirm`` must repeat the schema name."""
    if confirm != schema:
        raise ValidationError("Deletion must be confirmed by passing confirm=<schema name>")
    result = orchestrator.delete_tenant(schema, user_data["id"])
    if result.partial:
        return JSONResponse(status_code=207, content=result.model_dump(mode="json"))
    return result


@router.get("/{schema}/authorize", response_model=AuthorizationResponse)
async def authorize(
    schema: str,
    level: str = AccessLevel.READ.value,
    user_data: Dict = Depends(get_current_user_id),
    engine: AuthorizationEngine = Depends(get_authorization_engine)
):
    """Decision for the caller against a tenant at the given level"""
    decision = engine.authorize(user_data["id"], schema, level)
    return AuthorizationResponse(
        principal_id=user_data["id"],
        schema_name=schema,
        required_level=level,
        allowed=decision.allowed,
        reason=decision.reason,
    )


@router.get("/{schema}/buckets", response_model=TenantBucketList)
async def list_buckets(
    schema: str,
    user_data: Dict = Depends(get_current_user_id),
    service: BucketService = Depends(get_bucket_service)
):
    """Buckets linked to a tenant (requires read access)"""
    return TenantBucketList(schema_name=schema, buckets=service.list_for_tenant(schema, user_data["id"]))


@router.post("/{schema}/buckets", response_model=TenantBucket, status_code=201)
async def create_bucket(
    schema: str,
    bucket: BucketRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: BucketService = Depends(get_bucket_service)
):
    """Create a private bucket and link it to the tenant (admins only)"""
    return service.create_and_link(schema, bucket.bucket_id, user_data["id"])


@router.post("/{schema}/buckets/link", response_model=TenantBucket, status_code=201)
async def link_bucket(
    schema: str,
    bucket: BucketRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: BucketService = Depends(get_bucket_service)
):
    """Link an existing bucket to the tenant (admins only)"""
    return service.link_existing(schema, bucket.bucket_id, user_data["id"])
