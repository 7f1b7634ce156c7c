from fastapi import APIRouter, Depends
from tenant_admin.core.dependencies import get_current_user_id, get_grant_store, require_admin
from tenant_admin.core.errors import PermissionDeniedError
from tenant_admin.modules.access.schemas import AccessGrant, GrantRequest, RevokeRequest
from tenant_admin.modules.access.service import GrantStore
from tenant_admin.modules.admins.schemas import AccessibleSchema
from typing import List, Dict

router = APIRouter(prefix="/access", tags=["access"])


@router.post("", response_model=AccessGrant, status_code=201)
async def grant_access(
    request: GrantRequest,
    user_data: Dict = Depends(get_current_user_id),
    store: GrantStore = Depends(get_grant_store)
):
    """Grant or overwrite a user's access to a tenant (admins only)"""
    return store.grant(
        request.user_id, request.tenant_schema, request.access_level, user_data["id"], request.expires_at
    )


@router.delete("")
async def revoke_access(
    request: RevokeRequest,
    user_data: Dict = Depends(get_current_user_id),
    store: GrantStore = Depends(get_grant_store)
):
    """Revoke a user's access to a tenant (admins only). Revoking a missing grant is not an error."""
    removed = store.revoke(request.user_id, request.tenant_schema, user_data["id"])
    return {"message": "Access revoked", "removed": removed}


@router.get("/me", response_model=List[AccessibleSchema])
async def my_schemas(
    user_data: Dict = Depends(get_current_user_id),
    store: GrantStore = Depends(get_grant_store)
):
    """Schemas the caller can access and at which level"""
    return store.accessible_schemas(user_data["id"])


@router.get("/tenants/{schema}", response_model=List[AccessGrant])
async def list_tenant_grants(
    schema: str,
    user_data: Dict = Depends(require_admin),
    store: GrantStore = Depends(get_grant_store)
):
    """All grants on a tenant (admins only)"""
    return store.list_for_tenant(schema)


@router.get("/principals/{principal_id}", response_model=List[AccessGrant])
async def list_principal_grants(
    principal_id: str,
    user_data: Dict = Depends(get_current_user_id),
    store: GrantStore = Depends(get_grant_store)
):
    """Grants held by a user (the user themselves or admins)"""
    if principal_id != user_data["id"] and not store.directory.is_admin(user_data["id"]):
        raise PermissionDeniedError("You can only view your own grants")
    return store.list_for_principal(principal_id)
