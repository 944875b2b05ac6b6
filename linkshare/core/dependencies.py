"""
Core dependencies for the HTTP facade
"""

from fastapi import Depends
from supabase import Client

from linkshare.core.exceptions import Unauthenticated
from linkshare.core.state import ChatState, get_chat_state
from linkshare.database.document_store import DocumentStore
from linkshare.database.supabase_client import get_document_store, get_supabase
from linkshare.modules.auth.service import AuthService


def get_auth_service(
    supabase: Client = Depends(get_supabase),
    store: DocumentStore = Depends(get_document_store),
    state: ChatState = Depends(get_chat_state)
) -> AuthService:
    return AuthService(supabase, store, state)


def require_principal(state: ChatState = Depends(get_chat_state)) -> str:
    """Current principal email; 401 when nobody is signed in"""
    if not state.user:
        raise Unauthenticated()
    return state.user
