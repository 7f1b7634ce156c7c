from fastapi import APIRouter, Depends
from tenant_admin.core.dependencies import get_current_user_id, get_grant_store
from tenant_admin.modules.access.service import GrantStore
from tenant_admin.modules.admins.schemas import CurrentUserInfo
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me", response_model=CurrentUserInfo)
async def get_current_user(
    current_user: Dict = Depends(get_current_user_id),
    store: GrantStore = Depends(get_grant_store)
):
    """Get current authenticated user, their platform role and accessible schemas (for frontend UI)."""
    user_id = current_user["id"]
    return store.directory.current_user_info(
        user_id, current_user.get("email"), store.accessible_schemas(user_id)
    )
