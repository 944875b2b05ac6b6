"""Current-principal accessor backed by Supabase Auth."""

import logging
from typing import Callable, Optional, Protocol

from supabase import Client

logger = logging.getLogger(__name__)

PrincipalCallback = Callable[[Optional[str]], None]


class SessionAccessor(Protocol):
    def current_principal(self) -> Optional[str]: ...

    def on_principal_change(self, callback: PrincipalCallback) -> Callable[[], None]: ...


def _principal_of(session) -> Optional[str]:
    if session is None or session.user is None:
        return None
    return session.user.email


class SupabaseSession:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def current_principal(self) -> Optional[str]:
        try:
            return _principal_of(self.supabase.auth.get_session())
        except Exception as e:
            logger.error(f"Error reading auth session: {e}")
            return None

    def on_principal_change(self, callback: PrincipalCallback) -> Callable[[], None]:
        """Call `callback` with the principal email (or None) on every auth state change."""
        def listener(event, session):
            logger.debug(f"Auth state change: {event}")
            callback(_principal_of(session))

        subscription = self.supabase.auth.on_auth_state_change(listener)
        return subscription.unsubscribe
