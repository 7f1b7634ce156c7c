# Supabase table: user_schema_access
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key, default gen_random_uuid())
- user_id: uuid (not null, references auth.users.id on delete cascade)
- tenant_schema: text (not null, references tenants.schema_name on delete cascade)
- access_level: text (not null, default 'read') - values: read, write, admin
- granted_by: uuid (references admin_users.id)
- granted_at: timestamptz (not null, default now())
- expires_at: timestamptz (nullable) - temporary access; expired rows count as absent
- unique (user_id, tenant_schema)
"""
