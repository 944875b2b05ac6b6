from fastapi import APIRouter, Depends
from linkshare.core.dependencies import require_principal
from linkshare.core.exceptions import NotFound
from linkshare.core.state import ChatState, get_chat_state
from linkshare.database.document_store import DocumentStore
from linkshare.database.supabase_client import get_document_store
from linkshare.modules.groups.schemas import (
    Group, GroupCreate, GroupRename, ActiveGroupSelect,
    GroupMemberAdd, GroupMembersAdd, GroupMembersAdded
)
from linkshare.modules.groups.service import GroupService
from linkshare.modules.links.schemas import Link
from linkshare.modules.links.service import ranked_links
from typing import List

router = APIRouter(prefix="/groups", tags=["groups"])


def get_group_service(
    store: DocumentStore = Depends(get_document_store),
    state: ChatState = Depends(get_chat_state)
) -> GroupService:
    return GroupService(store, state)


@router.get("", response_model=List[Group])
async def list_groups(
    _: str = Depends(require_principal),
    service: GroupService = Depends(get_group_service)
):
    """Groups the current user belongs to (local cache)"""
    return service.list_groups()


@router.post("", response_model=Group, status_code=201)
async def create_group(
    group_data: GroupCreate,
    service: GroupService = Depends(get_group_service)
):
    """Create a group owned by the current user and make it active"""
    return service.create_group(group_data.name)


@router.put("/active", status_code=204)
async def set_active_group(
    selection: ActiveGroupSelect,
    service: GroupService = Depends(get_group_service)
):
    service.set_active_group(selection.group_id)
    return None


@router.put("/{group_id}", status_code=204)
async def rename_group(
    group_id: str,
    group_data: GroupRename,
    service: GroupService = Depends(get_group_service)
):
    """Rename group (owner only)"""
    service.rename_group(group_id, group_data.name)
    return None


@router.get("/{group_id}/links", response_model=List[Link])
async def list_links(
    group_id: str,
    _: str = Depends(require_principal),
    state: ChatState = Depends(get_chat_state)
):
    """Cached links of a group, highest score first"""
    group = state.snapshot.get_group(group_id)
    if group is None:
        raise NotFound("Group not found")
    return ranked_links(group)


@router.post("/{group_id}/members", status_code=204)
async def add_member(
    group_id: str,
    member_data: GroupMemberAdd,
    service: GroupService = Depends(get_group_service)
):
    """Add an existing user to the group"""
    service.add_member(group_id, member_data.email)
    return None


@router.post("/{group_id}/members/bulk", response_model=GroupMembersAdded)
async def add_members(
    group_id: str,
    members_data: GroupMembersAdd,
    service: GroupService = Depends(get_group_service)
):
    """Add several users at once; nothing is added if any of them does not exist"""
    added = service.add_members(group_id, members_data.emails)
    return GroupMembersAdded(group_id=group_id, added=added)


@router.delete("/{group_id}/members/{email}", status_code=204)
async def remove_member(
    group_id: str,
    email: str,
    service: GroupService = Depends(get_group_service)
):
    """Remove a member from the group (owner only)"""
    service.remove_member(group_id, email)
    return None
