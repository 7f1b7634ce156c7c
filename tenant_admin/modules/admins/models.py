# Supabase tables: admin_users, auth.users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Principals themselves live in auth.users, managed by Supabase Auth

"""
Expected Supabase table structure:

admin_users:
- id: uuid (primary key, references auth.users.id on delete cascade)
- email: text (unique, not null)
- full_name: text (nullable)
- role: text (not null, default 'admin') - values: super_admin, admin, viewer
- is_active: boolean (not null, default true)
- created_at: timestamptz (default now())
- updated_at: timestamptz (default now())

At most one row per principal. Revocation flips is_active to false; rows are
never hard-deleted by the service.
"""
