# Supabase tables: tenants, tenant_buckets
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

tenants:
- id: uuid (primary key, default gen_random_uuid())
- schema_name: text (unique, not null) - the Postgres schema backing the tenant
- display_name: text (nullable, defaults to schema_name on create)
- status: text (not null, default 'active') - values: active, suspended
- created_by: uuid (references admin_users.id)
- created_at: timestamptz (default now())
- updated_at: timestamptz (default now())

tenant_buckets:
- id: uuid (primary key)
- tenant_schema: text (not null, references tenants.schema_name on delete cascade)
- bucket_id: text (unique, not null) - a bucket belongs to exactly one schema
- created_by: uuid (nullable)
- created_at: timestamptz (default now())
"""
