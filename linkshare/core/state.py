"""
Process-wide reactive store.

Holds the current principal, profile, group cache, active selection, loading
flag and the shared error slot. Every change swaps in a new immutable
ChatSnapshot and notifies subscribers with (new, old).
"""

import logging
import threading
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Optional, Tuple

from linkshare.modules.groups.schemas import Group
from linkshare.modules.users.schemas import UserProfile

logger = logging.getLogger(__name__)

Listener = Callable[["ChatSnapshot", "ChatSnapshot"], None]


@dataclass(frozen=True)
class ChatSnapshot:
    user: Optional[str] = None
    profile: Optional[UserProfile] = None
    loading: bool = True
    error: Optional[str] = None
    groups: Tuple[Group, ...] = ()
    active_group_id: Optional[str] = None

    def get_group(self, group_id: str) -> Optional[Group]:
        for group in self.groups:
            if group.id == group_id:
                return group
        return None


class ChatState:
    def __init__(self, initial: Optional[ChatSnapshot] = None):
        self._snapshot = initial or ChatSnapshot()
        self._listeners: List[Listener] = []
        self._lock = threading.RLock()

    @property
    def snapshot(self) -> ChatSnapshot:
        return self._snapshot

    @property
    def user(self) -> Optional[str]:
        return self._snapshot.user

    @property
    def profile(self) -> Optional[UserProfile]:
        return self._snapshot.profile

    @property
    def groups(self) -> Tuple[Group, ...]:
        return self._snapshot.groups

    @property
    def active_group_id(self) -> Optional[str]:
        return self._snapshot.active_group_id

    @property
    def error(self) -> Optional[str]:
        return self._snapshot.error

    @property
    def loading(self) -> bool:
        return self._snapshot.loading

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns the callable that removes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def set(self, **changes: Any) -> ChatSnapshot:
        return self.update(lambda _: changes)

    def update(self, fn: Callable[[ChatSnapshot], Dict[str, Any]]) -> ChatSnapshot:
        """Functional update: fn receives the current snapshot and returns the changed fields."""
        with self._lock:
            old = self._snapshot
            changes = dict(fn(old))
            if "groups" in changes:
                changes["groups"] = tuple(changes["groups"])
            new = replace(old, **changes)
            self._snapshot = new
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(new, old)
            except Exception as e:
                logger.error(f"State listener failed: {e}")
        return new

    def replace_group(self, group_id: str, **fields: Any) -> ChatSnapshot:
        """Apply field changes to the cached group with this id and clear the error slot."""
        def apply(state: ChatSnapshot) -> Dict[str, Any]:
            groups = tuple(
                g.model_copy(update=fields) if g.id == group_id else g
                for g in state.groups
            )
            return {"groups": groups, "error": None}
        return self.update(apply)

    def record_error(self, message: Optional[str]) -> None:
        self.set(error=message)

    def reset(self) -> None:
        self.set(user=None, profile=None, groups=(), active_group_id=None, error=None, loading=False)


_chat_state = ChatState()


def get_chat_state() -> ChatState:
    return _chat_state
