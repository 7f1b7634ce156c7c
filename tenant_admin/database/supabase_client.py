from supabase import create_client, Client
from tenant_admin.config.settings import settings

# Table names
ADMIN_USERS_TABLE = "admin_users"
TENANTS_TABLE = "tenants"
USER_SCHEMA_ACCESS_TABLE = "user_schema_access"
AUDIT_LOG_TABLE = "admin_audit_log"
TENANT_BUCKETS_TABLE = "tenant_buckets"


class SupabaseClient:
    _client: Client = None
    _service_client: Client = None

    @classmethod
    def get_client(cls) -> Client:
        if cls._client is None:
            cls._client = create_client(settings.supabase_url, settings.supabase_key)
        return cls._client

    @classmethod
    def get_service_client(cls) -> Client:
        """Client with service_role key; bypasses RLS. Authorization is enforced by the services."""
        if cls._service_client is None and settings.supabase_service_role_key:
            cls._service_client = create_client(
                settings.supabase_url, settings.supabase_service_role_key
            )
        return cls._service_client or cls.get_client()

    @classmethod
    def reset_client(cls):
        cls._client = None
        cls._service_client = None


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def get_service_supabase() -> Client:
    return SupabaseClient.get_service_client()
