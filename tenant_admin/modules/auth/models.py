# Supabase Auth
# This module uses Supabase's built-in authentication system
# No custom tables are required - Supabase Auth handles:
# - User registration and login (OAuth / OTP flows happen client-side)
# - JWT token generation and validation

"""
Supabase Auth provides:
- auth.get_user() - Resolve the caller from a bearer JWT
- auth.admin.get_user_by_id() - Look up any user (service role key)
- auth.admin.list_users(page, per_page) - Enumerate users one page at a time (service role key)

The backend trusts the identity resolved from the token and performs no
credential checks itself. Platform privileges live in admin_users, not in
auth.users metadata.
"""
