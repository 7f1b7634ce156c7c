"""
Error taxonomy shared by every service.

Services raise these; the global handlers in ``tenant_admin.main`` turn them
into ``{"error": "<message>"}`` responses with the matching HTTP status.
"""

from typing import Any, Dict, List, Optional


class TenantAdminError(Exception):
    """Base class for all domain errors"""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(TenantAdminError):
    """Malformed input: bad schema name, unknown access level, invalid bucket id"""

    status_code = 400


class PermissionDeniedError(TenantAdminError):
    """Caller lacks the required platform role or tenant grant"""

    status_code = 403


class NotFoundError(TenantAdminError):
    """Unknown tenant, principal or bucket"""

    status_code = 404


class ConflictError(TenantAdminError):
    """Duplicate schema name, tenant already in the requested status, bucket already linked"""

    status_code = 409


class ExternalDependencyError(TenantAdminError):
    """The schema executor or storage provider failed.

    ``operation`` names the attempted step; ``completed_steps`` lists what
    had already been done so the caller can decide on manual remediation.
    """

    status_code = 502

    def __init__(
        self,
        message: str,
        operation: str,
        completed_steps: Optional[List[str]] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.operation = operation
        self.completed_steps = list(completed_steps or [])
        merged = {"operation": operation, "completed_steps": self.completed_steps}
        merged.update(details or {})
        super().__init__(message, merged)


def is_unique_violation(error: Exception) -> bool:
    """True for a Postgres unique-constraint failure surfaced through PostgREST"""
    if getattr(error, "code", None) == "23505":
        return True
    message = str(error).lower()
    return "duplicate key" in message or "unique constraint" in message or "already exists" in message
