# Supabase table: groups, plus the array RPC functions used by the document store
# This file documents the expected database schema
# Actual operations are handled via the document store in linkshare/database

"""
Expected Supabase table structure:

groups:
- id: uuid (primary key, default: gen_random_uuid())
- name: text (not null)
- avatar: text (not null) - derived from the name at creation, never regenerated
- "createdBy": text (not null) - owner email, immutable
- "memberEmails": text[] (not null) - always contains "createdBy"
- links: jsonb (not null, default: '[]') - ordered array of link documents, see links/models.py
- "createdAt": bigint (not null) - epoch milliseconds
- version: integer (not null, default: 0) - bumped by conditional writes when
  OPTIMISTIC_CONCURRENCY is enabled

Column names are quoted camelCase so documents keep the same field names as
every other client of the store.

Array operators (called through supabase.rpc with p_table, p_key_column, p_key,
p_field, p_values):

create or replace function array_union_add(
    p_table text, p_key_column text, p_key text, p_field text, p_values text[]
) returns void language plpgsql as $$
begin
    execute format(
        'update %I set %I = (select array_agg(distinct v) from unnest(%I || $1) as v) where %I::text = $2',
        p_table, p_field, p_field, p_key_column
    ) using p_values, p_key;
end $$;

create or replace function array_union_remove(
    p_table text, p_key_column text, p_key text, p_field text, p_values text[]
) returns void language plpgsql as $$
begin
    execute format(
        'update %I set %I = array(select v from unnest(%I) as v where not v = any($1)) where %I::text = $2',
        p_table, p_field, p_field, p_key_column
    ) using p_values, p_key;
end $$;
"""
