"""
Client for the DDL side of tenant lifecycle.

The schema executor is a set of Postgres functions reached through PostgREST
RPC; this module only names and calls them. Schema names are validated before
they get here.

The inspection calls are read-only and take the same validated names; callers
authorize them before they get here too.
"""

from enum import Enum
from supabase import Client
from tenant_admin.config.settings import settings
from tenant_admin.core.errors import ExternalDependencyError
from tenant_admin.modules.provisioning.schemas import ColumnInfo, SchemaSummary, TableInfo
from typing import Any, Dict, List
import logging

logger = logging.getLogger(__name__)


class ProvisionOutcome(str, Enum):
    CREATED = "created"                      # schema did not exist
    INITIALIZED_EXISTING = "initialized_existing"  # schema existed with no tables
    REGISTERED_EXISTING = "registered_existing"    # schema existed with tables; left untouched


class SchemaExecutor:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _call(self, operation: str, function_name: str, params: Dict[str, Any]) -> Any:
        try:
            result = self.supabase.rpc(function_name, params).execute()
        except Exception as e:
            logger.error(f"Schema executor {operation} failed ({function_name}): {e}")
            raise ExternalDependencyError(
                f"Schema executor failed during {operation}: {e}", operation=operation
            )
        return result.data

    def provision_schema(self, schema_name: str) -> ProvisionOutcome:
        """Create the schema with its default tables and grant privileges"""
        data = self._call("provision_schema", settings.rpc_provision_schema, {"p_schema_name": schema_name})
        try:
            return ProvisionOutcome(data) if data else ProvisionOutcome.CREATED
        except ValueError:
            logger.warning(f"Unexpected provision result for {schema_name}: {data!r}")
            return ProvisionOutcome.CREATED

    def drop_schema(self, schema_name: str) -> None:
        self._call("drop_schema", settings.rpc_drop_schema, {"p_schema_name": schema_name})

    def grant_privileges(self, schema_name: str) -> None:
        self._call(
            "grant_schema_privileges", settings.rpc_grant_schema_privileges, {"p_schema_name": schema_name}
        )

    def revoke_privileges(self, schema_name: str) -> None:
        self._call(
            "revoke_schema_privileges", settings.rpc_revoke_schema_privileges, {"p_schema_name": schema_name}
        )

    # -- read-only inspection -----------------------------------------------

    def list_tables(self, schema_name: str) -> List[TableInfo]:
        """Base tables of a schema with column counts and sizes"""
        data = self._call("list_tables", settings.rpc_schema_tables, {"target_schema": schema_name})
        return [TableInfo(**row) for row in data or []]

    def table_columns(self, schema_name: str, table_name: str) -> List[ColumnInfo]:
        data = self._call(
            "table_columns",
            settings.rpc_table_columns,
            {"target_schema": schema_name, "target_table": table_name},
        )
        return [ColumnInfo(**row) for row in data or []]

    def schema_summary(self, schema_name: str) -> SchemaSummary:
        data = self._call("schema_summary", settings.rpc_schema_summary, {"target_schema": schema_name})
        # The function returns a one-row table; an unknown schema yields no row.
        rows = data if isinstance(data, list) else [data] if data else []
        return SchemaSummary(schema_name=schema_name, **(rows[0] if rows else {}))
