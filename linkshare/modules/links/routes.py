from fastapi import APIRouter, Depends
from linkshare.core.state import ChatState, get_chat_state
from linkshare.database.document_store import DocumentStore
from linkshare.database.supabase_client import get_document_store
from linkshare.modules.links.schemas import Link, LinkCreate, LinkUpdate, VoteRequest, CommentCreate
from linkshare.modules.links.service import LinkService

router = APIRouter(prefix="/groups/{group_id}/links", tags=["links"])


def get_link_service(
    store: DocumentStore = Depends(get_document_store),
    state: ChatState = Depends(get_chat_state)
) -> LinkService:
    return LinkService(store, state)


@router.post("", response_model=Link, status_code=201)
async def share_link(
    group_id: str,
    link_data: LinkCreate,
    service: LinkService = Depends(get_link_service)
):
    """Share a link with the group"""
    return service.share_link(
        group_id, link_data.url, link_data.title, link_data.description, link_data.thumbnail
    )


@router.patch("/{link_id}", response_model=Link)
async def update_link(
    group_id: str,
    link_id: str,
    link_data: LinkUpdate,
    service: LinkService = Depends(get_link_service)
):
    """Edit title/url/description/thumbnail (author only)"""
    return service.update_link(group_id, link_id, link_data.model_dump(exclude_none=True))


@router.post("/{link_id}/votes", response_model=Link)
async def toggle_vote(
    group_id: str,
    link_id: str,
    vote: VoteRequest,
    service: LinkService = Depends(get_link_service)
):
    return service.toggle_vote(group_id, link_id, vote.direction)


@router.post("/{link_id}/comments", response_model=Link, status_code=201)
async def add_comment(
    group_id: str,
    link_id: str,
    comment: CommentCreate,
    service: LinkService = Depends(get_link_service)
):
    return service.add_comment(group_id, link_id, comment.content)
