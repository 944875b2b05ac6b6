import logging
from typing import Iterable, List, Optional

from linkshare.core.exceptions import (
    AllAlreadyMembers, Forbidden, InvalidRecord, NoValidInput, NotFound,
    SelfRemoval, SyncError, UsersNotFound
)
from linkshare.core.service import SyncService
from linkshare.core.validators import create_group_data
from linkshare.database.document_store import GROUPS, USERS
from linkshare.modules.groups.schemas import Group

logger = logging.getLogger(__name__)


def _looks_like_email(candidate) -> bool:
    return isinstance(candidate, str) and "@" in candidate


class GroupService(SyncService):
    def list_groups(self) -> List[Group]:
        """Groups currently in the local cache"""
        return list(self.state.groups)

    def set_active_group(self, group_id: Optional[str]) -> None:
        self.state.set(active_group_id=group_id)

    def create_group(self, name: str) -> Group:
        """Create a group owned by the current user and select it"""
        try:
            user, _ = self._require_profile()
            group_data = create_group_data(name, user)
            group_id = self.store.insert(GROUPS, group_data)
            group = Group.model_validate({**group_data, "id": group_id})
            self.state.update(lambda s: {
                "groups": s.groups + (group,),
                "active_group_id": group_id,
                "error": None,
            })
            logger.info(f"Created group {group_id} ({group.name}) for {user}")
            return group
        except SyncError as e:
            raise self._record(e)

    def rename_group(self, group_id: str, new_name: str) -> None:
        """Rename a group (owner only). Same name is a no-op."""
        try:
            user = self._require_principal()
            trimmed_name = (new_name or "").strip()
            if not trimmed_name:
                raise InvalidRecord("Group name cannot be empty")
            group = self._fetch_group(group_id)
            if group.get("createdBy") != user:
                raise Forbidden("Only the group creator can rename it")
            if trimmed_name == group.get("name"):
                return

            self.store.update(GROUPS, group_id, {"name": trimmed_name})
            self.state.replace_group(group_id, name=trimmed_name)
            logger.info(f"Renamed group {group_id} to {trimmed_name}")
        except SyncError as e:
            raise self._record(e)

    def add_member(self, group_id: str, email: str) -> None:
        """Add a single existing user to the group"""
        try:
            self._require_principal()
            if not self.store.get(USERS, email):
                raise NotFound("User not found")
            self._fetch_group(group_id)

            self.store.union_add(GROUPS, group_id, "memberEmails", [email])
            self._mirror_added(group_id, [email])
            logger.info(f"Added {email} to group {group_id}")
        except SyncError as e:
            raise self._record(e)

    def add_members(self, group_id: str, emails: Iterable[str]) -> List[str]:
        """
        Bulk add. Malformed entries are dropped; if any remaining user does not
        exist nothing is added. Returns the emails that were actually new.
        """
        try:
            self._require_principal()
            valid_emails = list(dict.fromkeys(e for e in emails if _looks_like_email(e)))
            if not valid_emails:
                raise NoValidInput()

            exists = self._fan_out(lambda email: self.store.get(USERS, email) is not None, valid_emails)
            missing = [email for email, found in zip(valid_emails, exists) if not found]
            if missing:
                raise UsersNotFound(missing)

            group = self._fetch_group(group_id)
            current = set(group.get("memberEmails") or [])
            new_members = [email for email in valid_emails if email not in current]
            if not new_members:
                raise AllAlreadyMembers()

            self.store.union_add(GROUPS, group_id, "memberEmails", new_members)
            self._mirror_added(group_id, new_members)
            logger.info(f"Added {len(new_members)} member(s) to group {group_id}")
            return new_members
        except SyncError as e:
            raise self._record(e)

    def remove_member(self, group_id: str, email: str) -> None:
        """Remove a member (owner only; the owner cannot remove themselves)"""
        try:
            user = self._require_principal()
            group = self._fetch_group(group_id)
            owner = group.get("createdBy")
            if owner != user:
                raise Forbidden("Only group creator can remove members")
            if email == owner:
                raise SelfRemoval()

            self.store.union_remove(GROUPS, group_id, "memberEmails", email)
            self.state.update(lambda s: {
                "groups": tuple(
                    g.model_copy(update={"member_emails": [m for m in g.member_emails if m != email]})
                    if g.id == group_id else g
                    for g in s.groups
                ),
                "error": None,
            })
            logger.info(f"Removed {email} from group {group_id}")
        except SyncError as e:
            raise self._record(e)

    def _mirror_added(self, group_id: str, emails: List[str]) -> None:
        def apply(state):
            groups = []
            for g in state.groups:
                if g.id == group_id:
                    merged = g.member_emails + [e for e in emails if e not in g.member_emails]
                    g = g.model_copy(update={"member_emails": merged})
                groups.append(g)
            return {"groups": groups, "error": None}
        self.state.update(apply)
