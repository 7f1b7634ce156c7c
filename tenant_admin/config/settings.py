from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Required for auth admin lookups and storage management
    auth_users_page_size: int = 50  # auth admin list_users page size; listings walk every page

    # Schema executor (Postgres functions called through PostgREST RPC)
    rpc_provision_schema: str = "provision_tenant_schema"
    rpc_drop_schema: str = "drop_tenant_schema"
    rpc_grant_schema_privileges: str = "grant_tenant_schema_privileges"
    rpc_revoke_schema_privileges: str = "revoke_tenant_schema_privileges"
    rpc_schema_tables: str = "get_schema_tables"
    rpc_table_columns: str = "get_table_columns"
    rpc_schema_summary: str = "get_schema_summary"

    # Object storage
    storage_backend: str = "supabase"  # supabase | s3
    tenant_default_bucket: bool = True  # create a private bucket named after each new schema

    # AWS S3 (will read from uppercase env vars automatically)
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_region: str = "us-east-1"
    s3_bucket_prefix: str = ""

    # App
    app_name: str = "tenant-admin-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
