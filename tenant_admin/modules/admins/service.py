from datetime import datetime, timezone
from supabase import Client
from tenant_admin.config.settings import settings
from tenant_admin.core.errors import NotFoundError, PermissionDeniedError, ValidationError
from tenant_admin.database.supabase_client import ADMIN_USERS_TABLE
from tenant_admin.modules.admins.schemas import (
    AccessibleSchema, AdminRecord, AdminRole, CurrentUserInfo, Principal, PrincipalResponse, PROMOTABLE_ROLES
)
from tenant_admin.modules.audit.schemas import AuditAction
from tenant_admin.modules.audit.service import AuditRecorder
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)


def list_auth_users(supabase: Client, per_page: Optional[int] = None) -> list:
    """Every auth user, fetched page by page until a short page comes back"""
    per_page = per_page or settings.auth_users_page_size
    users = []
    page = 1
    while True:
        batch = supabase.auth.admin.list_users(page=page, per_page=per_page) or []
        users.extend(batch)
        if len(batch) < per_page:
            return users
        page += 1


def _to_principal(user) -> Principal:
    created_at = getattr(user, "created_at", None)
    return Principal(id=str(user.id), email=getattr(user, "email", None), created_at=created_at)


class PrincipalDirectory:
    """Platform-level privilege lookups and admin role management.

    Every check reads the current admin_users row; nothing is cached between
    calls, so a revocation takes effect on the next request.
    """

    def __init__(self, supabase: Client, audit: Optional[AuditRecorder] = None):
        self.supabase = supabase
        self.audit = audit or AuditRecorder(supabase)

    # -- lookups ------------------------------------------------------------

    def _active_record(self, principal_id: Optional[str]) -> Optional[AdminRecord]:
        if not principal_id:
            return None
        result = self.supabase.table(ADMIN_USERS_TABLE)\
            .select("*")\
            .eq("id", principal_id)\
            .eq("is_active", True)\
            .limit(1)\
            .execute()
        if not result.data:
            return None
        return AdminRecord(**result.data[0])

    def _record(self, principal_id: str) -> Optional[AdminRecord]:
        result = self.supabase.table(ADMIN_USERS_TABLE)\
            .select("*")\
            .eq("id", principal_id)\
            .limit(1)\
            .execute()
        if not result.data:
            return None
        return AdminRecord(**result.data[0])

    def is_admin(self, principal_id: Optional[str]) -> bool:
        """True for an active admin record of any role"""
        return self._active_record(principal_id) is not None

    def is_super_admin(self, principal_id: Optional[str]) -> bool:
        record = self._active_record(principal_id)
        return record is not None and record.role == AdminRole.SUPER_ADMIN

    def admin_role(self, principal_id: Optional[str]) -> Optional[AdminRole]:
        record = self._active_record(principal_id)
        return record.role if record else None

    def require_admin(self, actor_id: str, action: str) -> None:
        if not self.is_admin(actor_id):
            raise PermissionDeniedError(f"Access denied: only administrators can {action}")

    def require_super_admin(self, actor_id: str, action: str) -> None:
        if not self.is_super_admin(actor_id):
            raise PermissionDeniedError(f"Access denied: only super administrators can {action}")

    def current_user_info(
        self, principal_id: str, email: Optional[str], accessible_schemas: List[AccessibleSchema]
    ) -> CurrentUserInfo:
        role = self.admin_role(principal_id)
        return CurrentUserInfo(
            user_id=principal_id,
            email=email,
            is_admin=role is not None,
            is_super_admin=role == AdminRole.SUPER_ADMIN,
            admin_role=role,
            accessible_schemas=accessible_schemas,
        )

    def get_principal(self, principal_id: str) -> Optional[Principal]:
        """Look up a user in the identity provider. Returns None when unknown."""
        try:
            response = self.supabase.auth.admin.get_user_by_id(principal_id)
        except Exception as e:
            # The auth admin API signals an unknown id with an error response
            logger.debug(f"Principal lookup failed for {principal_id}: {e}")
            return None
        if not response or not response.user:
            return None
        return _to_principal(response.user)

    def principal_exists(self, principal_id: str) -> bool:
        return self.get_principal(principal_id) is not None

    def _all_principals(self) -> List[Principal]:
        return [_to_principal(u) for u in list_auth_users(self.supabase)]

    def get_principal_by_email(self, email: str, actor_id: str) -> Principal:
        """Find a user by email (admins only)"""
        self.require_admin(actor_id, "look up users")
        wanted = email.strip().lower()
        for principal in self._all_principals():
            if principal.email and principal.email.lower() == wanted:
                return principal
        raise NotFoundError(f"No user with email {email}")

    def list_principals(self, actor_id: str) -> List[PrincipalResponse]:
        """All users, newest first, with their admin status merged in (admins only)"""
        self.require_admin(actor_id, "list users")
        records = self.supabase.table(ADMIN_USERS_TABLE).select("*").execute()
        by_id = {r["id"]: AdminRecord(**r) for r in records.data or []}
        principals = sorted(
            self._all_principals(),
            key=lambda p: p.created_at or datetime.min.replace(tzinfo=timezone.utc),
            reverse=True,
        )
        listing = []
        for principal in principals:
            record = by_id.get(principal.id)
            listing.append(PrincipalResponse(
                **principal.model_dump(),
                is_admin=bool(record and record.is_active),
                admin_role=record.role if record else None,
            ))
        return listing

    # -- role management ----------------------------------------------------

    def promote(self, target_id: str, role: str, actor_id: str) -> AdminRecord:
        """Give a user a platform role, reactivating a revoked record (super admins only)"""
        self.require_super_admin(actor_id, "promote users to admin")
        if role not in [r.value for r in PROMOTABLE_ROLES]:
            raise ValidationError("Invalid role. Must be: admin or viewer")
        principal = self.get_principal(target_id)
        if principal is None:
            raise NotFoundError("User not found")

        previous = self._record(target_id)
        now = datetime.now(timezone.utc).isoformat()
        row = {
            "id": target_id,
            "email": principal.email,
            "role": role,
            "is_active": True,
            "updated_at": now,
        }
        if previous and previous.full_name:
            row["full_name"] = previous.full_name
        result = self.supabase.table(ADMIN_USERS_TABLE)\
            .upsert(row, on_conflict="id")\
            .execute()

        self.audit.record(
            actor_id, AuditAction.PROMOTE_ADMIN, "admin_users", target_id,
            {
                "role": role,
                "previous_role": previous.role.value if previous and previous.is_active else None,
            },
        )
        logger.info(f"Promoted {target_id} to {role}")
        return AdminRecord(**result.data[0])

    def revoke_admin(self, target_id: str, actor_id: str) -> None:
        """Deactivate a user's admin record (super admins only, never yourself)"""
        if target_id == actor_id:
            raise PermissionDeniedError("Cannot revoke your own admin access")
        self.require_super_admin(actor_id, "revoke admin access")

        result = self.supabase.table(ADMIN_USERS_TABLE)\
            .update({"is_active": False, "updated_at": datetime.now(timezone.utc).isoformat()})\
            .eq("id", target_id)\
            .execute()
        if not result.data:
            raise NotFoundError("Admin record not found")

        self.audit.record(actor_id, AuditAction.REVOKE_ADMIN, "admin_users", target_id)
        logger.info(f"Revoked admin access for {target_id}")
