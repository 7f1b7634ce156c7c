"""
Bootstrap script for a fresh Supabase project.
Promotes the first super admin and registers schemas that already exist in
the database. Uses the service role key, so it bypasses the admin checks the
API enforces.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from datetime import datetime, timezone
from tenant_admin.core.errors import TenantAdminError
from tenant_admin.database.supabase_client import ADMIN_USERS_TABLE, TENANTS_TABLE, get_service_supabase
from tenant_admin.modules.admins.schemas import AdminRole
from tenant_admin.modules.admins.service import list_auth_users
from tenant_admin.modules.audit.schemas import AuditAction
from tenant_admin.modules.audit.service import AuditRecorder
from tenant_admin.modules.tenants.schemas import TenantStatus
from tenant_admin.modules.tenants.validation import validate_schema_name
from supabase import Client
from typing import Optional
import logging
import typer

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = typer.Typer(help="Tenant admin bootstrap")


def find_user_id(supabase: Client, email: str) -> Optional[str]:
    wanted = email.strip().lower()
    for user in list_auth_users(supabase):
        if user.email and user.email.lower() == wanted:
            return str(user.id)
    return None


def make_super_admin(supabase: Client, email: str, full_name: Optional[str] = None) -> str:
    """Insert or reactivate the admin_users row for ``email`` as super_admin"""
    user_id = find_user_id(supabase, email)
    if user_id is None:
        raise TenantAdminError(f"No auth user with email {email}; sign up first")
    row = {
        "id": user_id,
        "email": email,
        "role": AdminRole.SUPER_ADMIN.value,
        "is_active": True,
        "updated_at": datetime.now(timezone.utc).isoformat(),
    }
    if full_name:
        row["full_name"] = full_name
    supabase.table(ADMIN_USERS_TABLE).upsert(row, on_conflict="id").execute()
    AuditRecorder(supabase).record(
        None, AuditAction.PROMOTE_ADMIN, "admin_users", user_id,
        {"role": AdminRole.SUPER_ADMIN.value, "bootstrap": True},
    )
    return user_id


def register_schema(
    supabase: Client, schema_name: str, display_name: Optional[str], status: TenantStatus
) -> bool:
    """Add an existing database schema to the tenants table. Returns False if already registered."""
    validate_schema_name(schema_name)
    existing = supabase.table(TENANTS_TABLE)\
        .select("id")\
        .eq("schema_name", schema_name)\
        .execute()
    if existing.data:
        return False
    supabase.table(TENANTS_TABLE).insert({
        "schema_name": schema_name,
        "display_name": display_name or schema_name,
        "status": status.value,
    }).execute()
    AuditRecorder(supabase).record(
        None, AuditAction.REGISTER_EXISTING, "schema", schema_name,
        {"display_name": display_name, "bootstrap": True},
    )
    return True


@app.command("super-admin")
def super_admin(
    email: str = typer.Argument(..., help="Email of an existing Supabase Auth user"),
    full_name: Optional[str] = typer.Option(None, help="Display name stored on the admin record"),
):
    """Make an existing user a super admin."""
    try:
        user_id = make_super_admin(get_service_supabase(), email, full_name)
    except TenantAdminError as e:
        logger.error(e.message)
        raise typer.Exit(1)
    logger.info(f"{email} ({user_id}) is now super_admin")


@app.command("register-schema")
def register(
    schema_name: str = typer.Argument(..., help="Existing Postgres schema to manage"),
    display_name: Optional[str] = typer.Option(None, help="Friendly name"),
    status: TenantStatus = typer.Option(TenantStatus.ACTIVE, help="Initial status"),
):
    """Register an existing schema without running any DDL."""
    try:
        created = register_schema(get_service_supabase(), schema_name, display_name, status)
    except TenantAdminError as e:
        logger.error(e.message)
        raise typer.Exit(1)
    if created:
        logger.info(f"Registered {schema_name}")
    else:
        logger.info(f"{schema_name} is already registered")


if __name__ == "__main__":
    app()
