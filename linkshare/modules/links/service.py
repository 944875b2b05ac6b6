"""
Link, vote and comment operations.

Links live inside their group document, and the store can only replace the
`links` field as a whole, so every operation here re-reads the group, builds a
new array with one element swapped, writes that array back in one update and
then mirrors the same array into the local cache. Two clients rewriting the
same group between each other's read and write lose one of the updates unless
optimistic concurrency is switched on (see settings.optimistic_concurrency).
"""

import copy
import logging
import uuid
from typing import Any, Callable, Dict, List, Mapping, Optional

from linkshare.core.exceptions import Forbidden, InvalidRecord, NotFound, SyncError
from linkshare.core.service import SyncService
from linkshare.core.validators import is_valid_link, now_ms
from linkshare.database.document_store import GROUPS
from linkshare.modules.groups.schemas import Group
from linkshare.modules.links.schemas import Link

logger = logging.getLogger(__name__)

VOTE_DIRECTIONS = ("up", "down")
EDITABLE_FIELDS = ("url", "title", "description", "thumbnail")


def find_link_index(links: List[Dict[str, Any]], link_id: str) -> Optional[int]:
    for index, link in enumerate(links):
        if link.get("id") == link_id:
            return index
    return None


def apply_vote(link: Dict[str, Any], voter: str, direction: str) -> Dict[str, Any]:
    """Leave the opposite side, then toggle membership on `direction`. Returns a new link dict."""
    opposite = "down" if direction == "up" else "up"
    votes = link.get("votes") or {}
    up_down = {
        direction: list(votes.get(direction) or []),
        opposite: [v for v in (votes.get(opposite) or []) if v != voter],
    }
    if voter in up_down[direction]:
        up_down[direction] = [v for v in up_down[direction] if v != voter]
    else:
        up_down[direction].append(voter)
    return {**link, "votes": {"up": up_down["up"], "down": up_down["down"]}}


def ranked_links(group: Group) -> List[Link]:
    """Links by descending score; equal scores keep insertion order."""
    return sorted(group.links, key=lambda link: -link.score)


class LinkService(SyncService):
    def share_link(
        self,
        group_id: str,
        url: str,
        title: str,
        description: str = "",
        thumbnail: Optional[str] = None,
    ) -> Link:
        """Append a new link authored by the current user"""
        try:
            user, profile = self._require_profile()
            new_link = {
                "id": str(uuid.uuid4()),
                "url": (url or "").strip(),
                "title": (title or "").strip(),
                "description": (description or "").strip(),
                "author": user,
                "authorNickname": profile.nickname,
                "timestamp": now_ms(),
                "votes": {"up": [], "down": []},
                "comments": [],
            }
            if thumbnail and thumbnail.strip():
                new_link["thumbnail"] = thumbnail.strip()
            if not is_valid_link(new_link):
                raise InvalidRecord("Invalid link data")

            group = self._fetch_group(group_id)
            links = list(group.get("links") or [])
            self._write_links(group_id, group, links + [new_link])
            logger.info(f"Shared link {new_link['id']} in group {group_id}")
            return Link.model_validate(new_link)
        except SyncError as e:
            raise self._record(e)

    def update_link(self, group_id: str, link_id: str, updates: Mapping[str, Any]) -> Link:
        """Merge title/url/description/thumbnail into a link (author only)"""
        try:
            user = self._require_principal()
            allowed = {k: v for k, v in updates.items() if k in EDITABLE_FIELDS and v is not None}

            def merge(link):
                if link.get("author") != user:
                    raise Forbidden("Only the link author can edit it")
                return {**link, **allowed}

            updated = self._rewrite_link(group_id, link_id, merge, validate=True)
            logger.info(f"Updated link {link_id} in group {group_id}")
            return Link.model_validate(updated)
        except SyncError as e:
            raise self._record(e)

    def toggle_vote(self, group_id: str, link_id: str, direction: str) -> Link:
        """Cast, switch or retract the current user's vote"""
        try:
            user = self._require_principal()
            if direction not in VOTE_DIRECTIONS:
                raise InvalidRecord(f"Invalid vote direction: {direction}")

            updated = self._rewrite_link(group_id, link_id, lambda link: apply_vote(link, user, direction))
            logger.debug(f"{user} voted {direction} on link {link_id}")
            return Link.model_validate(updated)
        except SyncError as e:
            raise self._record(e)

    def add_comment(self, group_id: str, link_id: str, content: str) -> Link:
        try:
            user, profile = self._require_profile()
            trimmed = (content or "").strip()
            if not trimmed:
                raise InvalidRecord("Comment cannot be empty")
            comment = {
                "id": str(uuid.uuid4()),
                "content": trimmed,
                "author": user,
                "authorNickname": profile.nickname,
                "timestamp": now_ms(),
            }

            updated = self._rewrite_link(
                group_id, link_id,
                lambda link: {**link, "comments": list(link.get("comments") or []) + [comment]},
            )
            logger.info(f"Added comment {comment['id']} to link {link_id}")
            return Link.model_validate(updated)
        except SyncError as e:
            raise self._record(e)

    def _rewrite_link(
        self,
        group_id: str,
        link_id: str,
        mutate: Callable[[Dict[str, Any]], Dict[str, Any]],
        validate: bool = False,
    ) -> Dict[str, Any]:
        group = self._fetch_group(group_id)
        links = list(group.get("links") or [])
        index = find_link_index(links, link_id)
        if index is None:
            raise NotFound("Link not found")

        updated = mutate(copy.deepcopy(links[index]))
        if validate and not is_valid_link(updated):
            raise InvalidRecord("Invalid link data")

        new_links = links[:index] + [updated] + links[index + 1:]
        self._write_links(group_id, group, new_links)
        return updated

    def _write_links(self, group_id: str, group: Dict[str, Any], new_links: List[Dict[str, Any]]) -> None:
        expected = self._expected_version(group)
        self.store.update(GROUPS, group_id, {"links": new_links}, expected_version=expected)
        fields = {"links": [Link.model_validate(link) for link in new_links]}
        if expected is not None:
            fields["version"] = expected + 1
        self.state.replace_group(group_id, **fields)
