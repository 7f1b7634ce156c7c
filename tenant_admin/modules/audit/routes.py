from fastapi import APIRouter, Depends
from tenant_admin.core.dependencies import get_audit_recorder, require_admin
from tenant_admin.modules.audit.schemas import AuditEntryResponse
from tenant_admin.modules.audit.service import AuditRecorder
from typing import List, Dict, Optional

router = APIRouter(prefix="/audit", tags=["audit"])


@router.get("", response_model=List[AuditEntryResponse])
async def list_audit_entries(
    action: Optional[str] = None,
    resource_id: Optional[str] = None,
    actor_id: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
    user_data: Dict = Depends(require_admin),
    recorder: AuditRecorder = Depends(get_audit_recorder)
):
    """Audit trail, newest first (admins only)"""
    return recorder.list_entries(
        action=action, resource_id=resource_id, actor_id=actor_id, limit=limit, offset=offset
    )
