import logging
from typing import Any, Dict, List, Tuple

from linkshare.config import settings
from linkshare.core.exceptions import InvalidRecord, SyncError
from linkshare.core.service import SyncService
from linkshare.database.document_store import GROUPS, USERS
from linkshare.modules.groups.schemas import Group
from linkshare.modules.users.schemas import UserProfile

logger = logging.getLogger(__name__)

# Upper bound for prefix range queries
PREFIX_SENTINEL = "\uf8ff"


def apply_nickname(
    links: List[Dict[str, Any]], email: str, nickname: str
) -> Tuple[List[Dict[str, Any]], bool]:
    """Rewrite author snapshots on links and comments by `email`. Returns (links, changed)."""
    changed = False
    updated_links = []
    for link in links:
        link_changed = False
        if link.get("author") == email:
            link = {**link, "authorNickname": nickname}
            link_changed = True
        comments = []
        for comment in link.get("comments") or []:
            if comment.get("author") == email:
                comment = {**comment, "authorNickname": nickname}
                link_changed = True
            comments.append(comment)
        if link_changed:
            link = {**link, "comments": comments}
            changed = True
        updated_links.append(link)
    return updated_links, changed


class UserService(SyncService):
    def search_users(self, term: str) -> List[UserProfile]:
        """
        Prefix search over email and nickname for the member picker.
        Short terms return nothing; store failures degrade to an empty list.
        """
        search_term = (term or "").strip().lower()
        if len(search_term) < settings.search_min_length:
            return []
        bounds = (search_term, search_term + PREFIX_SENTINEL)
        try:
            by_email, by_nickname = self._fan_out(
                lambda field: self.store.query(USERS, field, between=bounds),
                ["email", "nickname"],
            )
        except SyncError as e:
            logger.warning(f"Search users error: {e}")
            return []

        results: Dict[str, UserProfile] = {}
        for doc in by_email + by_nickname:
            email = doc.get("email")
            if email and email not in results:
                results[email] = UserProfile.model_validate(doc)
        return list(results.values())

    def update_profile(self, nickname: str) -> UserProfile:
        """
        Rename the current user and rewrite the nickname snapshot on every link
        and comment they authored in every group they belong to. Groups with
        nothing by the user are not written.
        """
        try:
            user, profile = self._require_profile()
            trimmed = (nickname or "").strip()
            if not trimmed:
                raise InvalidRecord("Nickname cannot be empty")
            if trimmed == profile.nickname:
                return profile

            self.store.update(USERS, user, {"nickname": trimmed})

            groups = []
            rewritten = 0
            for doc in self._member_groups(user):
                links, changed = apply_nickname(doc.get("links") or [], user, trimmed)
                if changed:
                    expected = self._expected_version(doc)
                    self.store.update(GROUPS, doc["id"], {"links": links}, expected_version=expected)
                    doc = {**doc, "links": links}
                    if expected is not None:
                        doc["version"] = expected + 1
                    rewritten += 1
                groups.append(Group.model_validate(doc))

            updated_profile = profile.model_copy(update={"nickname": trimmed})
            self.state.set(profile=updated_profile, groups=groups, error=None)
            logger.info(f"Renamed {user} to {trimmed}; rewrote {rewritten} of {len(groups)} group(s)")
            return updated_profile
        except SyncError as e:
            raise self._record(e)
