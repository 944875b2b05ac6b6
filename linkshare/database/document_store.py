"""
Document Store Adapter.

Two collections, `users` keyed by email and `groups` keyed by a generated id,
stored as Supabase tables. Array fields are Postgres arrays / jsonb; the
set-union and set-removal operators are RPC functions (see
linkshare/modules/groups/models.py for their definitions).
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple

from supabase import Client

from linkshare.config import settings
from linkshare.core.exceptions import AdapterFailure, Conflict, NotFound

logger = logging.getLogger(__name__)

USERS = "users"
GROUPS = "groups"

KEY_FIELDS = {USERS: "email", GROUPS: "id"}
VERSION_FIELD = "version"


class DocumentStore(Protocol):
    def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]: ...

    def query(
        self,
        collection: str,
        field: str,
        contains: Optional[str] = None,
        between: Optional[Tuple[str, str]] = None,
    ) -> List[Dict[str, Any]]: ...

    def insert(self, collection: str, doc: Dict[str, Any]) -> str: ...

    def set(self, collection: str, key: str, doc: Dict[str, Any]) -> None: ...

    def update(
        self,
        collection: str,
        key: str,
        fields: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> None: ...

    def union_add(self, collection: str, key: str, field: str, values: Iterable[str]) -> None: ...

    def union_remove(self, collection: str, key: str, field: str, value: str) -> None: ...


class SupabaseDocumentStore:
    """DocumentStore over Supabase tables. Every client error surfaces as AdapterFailure."""

    def __init__(self, supabase: Client):
        self.supabase = supabase
        self._tables = {USERS: settings.users_table, GROUPS: settings.groups_table}

    def _table(self, collection: str):
        return self.supabase.table(self._tables[collection])

    def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        try:
            result = self._table(collection)\
                .select("*")\
                .eq(KEY_FIELDS[collection], key)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise AdapterFailure(f"Failed to read {collection}/{key}: {e}") from e
        return result.data[0] if result.data else None

    def query(
        self,
        collection: str,
        field: str,
        contains: Optional[str] = None,
        between: Optional[Tuple[str, str]] = None,
    ) -> List[Dict[str, Any]]:
        try:
            query = self._table(collection).select("*")
            if contains is not None:
                query = query.contains(field, [contains])
            if between is not None:
                start, end = between
                query = query.gte(field, start).lte(field, end)
            result = query.execute()
        except Exception as e:
            raise AdapterFailure(f"Failed to query {collection}.{field}: {e}") from e
        return result.data or []

    def insert(self, collection: str, doc: Dict[str, Any]) -> str:
        try:
            result = self._table(collection).insert(doc).execute()
        except Exception as e:
            raise AdapterFailure(f"Failed to insert into {collection}: {e}") from e
        if not result.data:
            raise AdapterFailure(f"Failed to insert into {collection}")
        return str(result.data[0][KEY_FIELDS[collection]])

    def set(self, collection: str, key: str, doc: Dict[str, Any]) -> None:
        try:
            self._table(collection)\
                .upsert({**doc, KEY_FIELDS[collection]: key})\
                .execute()
        except Exception as e:
            raise AdapterFailure(f"Failed to write {collection}/{key}: {e}") from e

    def update(
        self,
        collection: str,
        key: str,
        fields: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> None:
        """Field update; with expected_version the write only lands if the stored version matches, and bumps it."""
        payload = dict(fields)
        if expected_version is not None:
            payload[VERSION_FIELD] = expected_version + 1
        try:
            query = self._table(collection)\
                .update(payload)\
                .eq(KEY_FIELDS[collection], key)
            if expected_version is not None:
                query = query.eq(VERSION_FIELD, expected_version)
            result = query.execute()
        except Exception as e:
            raise AdapterFailure(f"Failed to update {collection}/{key}: {e}") from e
        if not result.data:
            if expected_version is not None:
                raise Conflict(f"{collection}/{key} was modified concurrently")
            raise NotFound(f"{collection}/{key} not found")
        logger.debug(f"Updated {collection}/{key} fields={sorted(fields)}")

    def _array_rpc(self, function: str, collection: str, key: str, field: str, values: List[str]) -> None:
        try:
            self.supabase.rpc(function, {
                "p_table": self._tables[collection],
                "p_key_column": KEY_FIELDS[collection],
                "p_key": key,
                "p_field": field,
                "p_values": values,
            }).execute()
        except Exception as e:
            raise AdapterFailure(f"Failed to update {collection}/{key}.{field}: {e}") from e

    def union_add(self, collection: str, key: str, field: str, values: Iterable[str]) -> None:
        self._array_rpc(settings.array_union_rpc, collection, key, field, list(values))

    def union_remove(self, collection: str, key: str, field: str, value: str) -> None:
        self._array_rpc(settings.array_remove_rpc, collection, key, field, [value])
