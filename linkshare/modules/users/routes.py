from fastapi import APIRouter, Depends
from linkshare.core.dependencies import require_principal
from linkshare.core.state import ChatState, get_chat_state
from linkshare.database.document_store import DocumentStore
from linkshare.database.supabase_client import get_document_store
from linkshare.modules.users.schemas import ProfileUpdate, UserProfile
from linkshare.modules.users.service import UserService
from typing import List

router = APIRouter(prefix="/users", tags=["users"])


def get_user_service(
    store: DocumentStore = Depends(get_document_store),
    state: ChatState = Depends(get_chat_state)
) -> UserService:
    return UserService(store, state)


@router.get("/search", response_model=List[UserProfile])
async def search_users(
    q: str = "",
    _: str = Depends(require_principal),
    service: UserService = Depends(get_user_service)
):
    """Prefix search by email or nickname (at least 2 characters)"""
    return service.search_users(q)


@router.put("/me", response_model=UserProfile)
async def update_profile(
    profile_data: ProfileUpdate,
    service: UserService = Depends(get_user_service)
):
    """Change the current user's nickname and propagate it to their links and comments"""
    return service.update_profile(profile_data.nickname)
