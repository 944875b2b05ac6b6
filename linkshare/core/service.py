"""
Shared plumbing for the sync engine services: principal checks, fresh group
reads, the membership query and error recording.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, TypeVar

from linkshare.config import settings
from linkshare.core.exceptions import NotFound, SyncError, Unauthenticated
from linkshare.core.state import ChatState
from linkshare.database.document_store import GROUPS, DocumentStore
from linkshare.modules.users.schemas import UserProfile

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class SyncService:
    def __init__(self, store: DocumentStore, state: ChatState, optimistic: Optional[bool] = None):
        self.store = store
        self.state = state
        self.optimistic = settings.optimistic_concurrency if optimistic is None else optimistic

    def _record(self, error: SyncError) -> SyncError:
        """Put the failure in the shared error slot and hand it back for re-raising."""
        logger.warning(f"{type(self).__name__}: {type(error).__name__}: {error.message}")
        self.state.record_error(error.message)
        return error

    def _require_principal(self) -> str:
        user = self.state.user
        if not user:
            raise Unauthenticated()
        return user

    def _require_profile(self) -> Tuple[str, UserProfile]:
        user = self.state.user
        profile = self.state.profile
        if not user or profile is None:
            raise Unauthenticated()
        return user, profile

    def _fetch_group(self, group_id: str) -> Dict[str, Any]:
        group = self.store.get(GROUPS, group_id)
        if not group:
            raise NotFound("Group not found")
        group.setdefault("id", group_id)
        return group

    def _member_groups(self, email: str) -> List[Dict[str, Any]]:
        """Every group document whose member set contains `email`."""
        return self.store.query(GROUPS, "memberEmails", contains=email)

    def _expected_version(self, group: Dict[str, Any]) -> Optional[int]:
        if not self.optimistic:
            return None
        return group.get("version") or 0

    def _fan_out(self, fn: Callable[[T], R], items: Iterable[T]) -> List[R]:
        """Run fn over items on a bounded pool, results in input order; the first failure propagates."""
        items = list(items)
        if not items:
            return []
        workers = max(1, min(settings.lookup_workers, len(items)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(fn, items))
