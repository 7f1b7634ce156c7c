# Supabase table: admin_audit_log
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key, default gen_random_uuid())
- user_id: uuid (references auth.users.id) - the acting principal
- action: text (not null) - one of AuditAction
- resource_type: text (not null) - schema | user_schema_access | admin_users | bucket
- resource_id: text (nullable)
- details: jsonb (default '{}')
- ip_address: inet (nullable)
- user_agent: text (nullable)
- created_at: timestamptz (default now())

Rows are append-only: the service never updates or deletes them.
"""
