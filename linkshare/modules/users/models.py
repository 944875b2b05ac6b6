# Supabase table: users
# This file documents the expected database schema
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

users:
- email: text (primary key) - the principal identifier, immutable
- nickname: text (not null) - display name, copied into links and comments
- "createdAt": bigint (not null) - epoch milliseconds

Note: Authentication data (password, tokens) is stored in auth.users table
managed by Supabase Auth. This table only stores profile information.
Indexes on email and nickname back the prefix search (range scans).
"""
