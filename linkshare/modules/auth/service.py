import logging
from typing import Callable, Optional

from supabase import Client

from linkshare.core.exceptions import AdapterFailure, InvalidRecord, SyncError, Unauthenticated
from linkshare.core.service import SyncService
from linkshare.core.state import ChatState
from linkshare.core.validators import now_ms
from linkshare.database.document_store import USERS, DocumentStore
from linkshare.modules.auth.session import SessionAccessor
from linkshare.modules.groups.schemas import Group
from linkshare.modules.users.schemas import UserProfile

logger = logging.getLogger(__name__)


class AuthService(SyncService):
    def __init__(self, supabase: Client, store: DocumentStore, state: ChatState, optimistic: Optional[bool] = None):
        super().__init__(store, state, optimistic)
        self.supabase = supabase

    def init(self, session: SessionAccessor) -> Callable[[], None]:
        """Hydrate from the current principal and on every later change; returns the unsubscribe callable."""
        unsubscribe = session.on_principal_change(self.hydrate)
        self.hydrate(session.current_principal())
        return unsubscribe

    def hydrate(self, principal: Optional[str]) -> None:
        """Load profile and member groups for `principal`, or clear the session when it is None."""
        if not principal:
            self.state.set(user=None, profile=None, groups=(), active_group_id=None, loading=False)
            return
        try:
            doc = self.store.get(USERS, principal)
            profile = UserProfile.model_validate(doc) if doc else None
            groups = [Group.model_validate(g) for g in self._member_groups(principal)]
            self.state.set(user=principal, profile=profile, groups=groups, loading=False, error=None)
            logger.info(f"Hydrated session for {principal}: {len(groups)} group(s)")
        except SyncError as e:
            logger.error(f"Error hydrating session for {principal}: {e.message}")
            self.state.set(error=e.message, loading=False)

    def sign_in(self, email: str, password: str) -> Optional[UserProfile]:
        """Authenticate with Supabase Auth and load the profile"""
        try:
            try:
                auth_response = self.supabase.auth.sign_in_with_password({
                    "email": email,
                    "password": password
                })
            except Exception as e:
                error_message = str(e)
                if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                    raise Unauthenticated("Invalid email or password") from e
                raise AdapterFailure(f"Login failed: {error_message}") from e

            if not auth_response.user or not auth_response.session:
                raise Unauthenticated("Invalid credentials")

            principal = auth_response.user.email or email
            doc = self.store.get(USERS, principal)
            profile = UserProfile.model_validate(doc) if doc else None
            self.state.set(user=principal, profile=profile, error=None)
            return profile
        except SyncError as e:
            raise self._record(e)

    def sign_up(self, email: str, password: str, nickname: str) -> UserProfile:
        """Create the auth user and its `users/{email}` profile document"""
        try:
            trimmed = (nickname or "").strip()
            if not trimmed:
                raise InvalidRecord("Nickname cannot be empty")
            try:
                auth_response = self.supabase.auth.sign_up({
                    "email": email,
                    "password": password,
                    "options": {
                        "data": {"nickname": trimmed}
                    }
                })
            except Exception as e:
                error_message = str(e)
                if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                    raise AdapterFailure("User already exists") from e
                raise AdapterFailure(f"Registration failed: {error_message}") from e

            if not auth_response.user:
                raise AdapterFailure("Failed to register user")

            profile = UserProfile(email=email, nickname=trimmed, created_at=now_ms())
            self.store.set(USERS, email, profile.model_dump(by_alias=True))
            self.state.set(user=email, profile=profile, groups=(), error=None)
            logger.info(f"Registered {email}")
            return profile
        except SyncError as e:
            raise self._record(e)

    def logout(self) -> None:
        try:
            try:
                self.supabase.auth.sign_out()
            except Exception as e:
                raise AdapterFailure(f"Logout failed: {e}") from e
            self.state.reset()
        except SyncError as e:
            raise self._record(e)
