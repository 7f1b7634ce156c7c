"""
Identifier allow-lists for tenant schemas and the names that live beside them.

A schema name becomes a physical Postgres identifier, so it must pass these
checks before it is used to name anything.
"""

import re

from tenant_admin.core.errors import ValidationError

SCHEMA_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9_]{2,62}$")
BUCKET_ID_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_-]{1,61}[a-z0-9]$")
TABLE_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_$]{0,62}$")

RESERVED_SCHEMA_NAMES = frozenset({
    "public", "auth", "storage", "graphql", "realtime", "supabase",
    "extensions", "vault", "pgsodium", "information_schema",
})
RESERVED_SCHEMA_PREFIXES = ("pg_", "supabase_")


def is_reserved_schema_name(name: str) -> bool:
    return name in RESERVED_SCHEMA_NAMES or name.startswith(RESERVED_SCHEMA_PREFIXES)


def validate_schema_name(name) -> str:
    if not isinstance(name, str) or not name:
        raise ValidationError("Schema name is required")
    if len(name) < 3 or len(name) > 63:
        raise ValidationError("Schema name must be between 3 and 63 characters")
    if not SCHEMA_NAME_PATTERN.fullmatch(name):
        raise ValidationError(
            "Invalid schema name: must start with lowercase letter and contain only "
            "lowercase letters, numbers, and underscores"
        )
    if is_reserved_schema_name(name):
        raise ValidationError(f'Schema name "{name}" is reserved and cannot be used')
    return name


def validate_bucket_id(bucket_id) -> str:
    if not isinstance(bucket_id, str) or not BUCKET_ID_PATTERN.fullmatch(bucket_id):
        raise ValidationError(
            "Invalid bucket id: 3-63 characters of lowercase letters, numbers, "
            "underscores and hyphens, starting and ending with a letter or number"
        )
    return bucket_id


def validate_table_name(table_name) -> str:
    if not isinstance(table_name, str) or not TABLE_NAME_PATTERN.fullmatch(table_name):
        raise ValidationError(
            "Invalid table name: up to 63 letters, numbers, underscores or dollar signs, "
            "not starting with a number"
        )
    return table_name
