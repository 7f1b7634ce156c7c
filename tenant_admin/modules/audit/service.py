from supabase import Client
from tenant_admin.database.supabase_client import AUDIT_LOG_TABLE
from tenant_admin.modules.audit.schemas import AuditAction, AuditEntryResponse
from typing import Any, Dict, List, Optional, Union
import logging

logger = logging.getLogger(__name__)


class AuditRecorder:
    """Append-only writer for the administrative audit trail.

    ``context`` carries request metadata (ip_address, user_agent) stamped on
    every entry written through this instance.
    """

    def __init__(self, supabase: Client, context: Optional[Dict[str, Optional[str]]] = None):
        self.supabase = supabase
        self.context = context or {}

    def record(
        self,
        actor_id: Optional[str],
        action: Union[AuditAction, str],
        resource_type: str,
        resource_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """Write one audit entry. Never raises: returns False when the write failed."""
        row = {
            "user_id": actor_id,
            "action": action.value if isinstance(action, AuditAction) else action,
            "resource_type": resource_type,
            "resource_id": resource_id,
            "details": details or {},
        }
        for key in ("ip_address", "user_agent"):
            if self.context.get(key):
                row[key] = self.context[key]
        try:
            self.supabase.table(AUDIT_LOG_TABLE).insert(row).execute()
        except Exception:
            logger.exception(
                "Audit write failed for %s on %s/%s", row["action"], resource_type, resource_id
            )
            return False
        logger.info("Audit: %s %s/%s by %s", row["action"], resource_type, resource_id, actor_id)
        return True

    def list_entries(
        self,
        action: Optional[str] = None,
        resource_id: Optional[str] = None,
        actor_id: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[AuditEntryResponse]:
        """List audit entries, newest first"""
        query = self.supabase.table(AUDIT_LOG_TABLE).select("*")
        if action:
            query = query.eq("action", action)
        if resource_id:
            query = query.eq("resource_id", resource_id)
        if actor_id:
            query = query.eq("user_id", actor_id)
        result = query.order("created_at", desc=True)\
            .limit(limit)\
            .offset(offset)\
            .execute()
        return [AuditEntryResponse(**entry) for entry in result.data or []]
