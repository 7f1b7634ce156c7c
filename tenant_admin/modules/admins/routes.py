from fastapi import APIRouter, Depends
from tenant_admin.core.dependencies import get_current_user_id, get_principal_directory
from tenant_admin.modules.admins.schemas import AdminRecord, Principal, PrincipalResponse, PromoteRequest
from tenant_admin.modules.admins.service import PrincipalDirectory
from typing import List, Dict

router = APIRouter(prefix="/admins", tags=["admins"])


@router.get("/users", response_model=List[PrincipalResponse])
async def list_users(
    user_data: Dict = Depends(get_current_user_id),
    directory: PrincipalDirectory = Depends(get_principal_directory)
):
    """All users with their admin status (admins only)"""
    return directory.list_principals(user_data["id"])


@router.get("/users/by-email", response_model=Principal)
async def get_user_by_email(
    email: str,
    user_data: Dict = Depends(get_current_user_id),
    directory: PrincipalDirectory = Depends(get_principal_directory)
):
    """Find a user by email (admins only)"""
    return directory.get_principal_by_email(email, user_data["id"])


@router.post("/promote", response_model=AdminRecord)
async def promote(
    request: PromoteRequest,
    user_data: Dict = Depends(get_current_user_id),
    directory: PrincipalDirectory = Depends(get_principal_directory)
):
    """Promote a user to admin or viewer (super admins only)"""
    return directory.promote(request.user_id, request.role, user_data["id"])


@router.post("/{user_id}/revoke")
async def revoke_admin(
    user_id: str,
    user_data: Dict = Depends(get_current_user_id),
    directory: PrincipalDirectory = Depends(get_principal_directory)
):
    """Deactivate a user's admin access (super admins only, never your own)"""
    directory.revoke_admin(user_id, user_data["id"])
    return {"message": "Admin access revoked", "user_id": user_id}
