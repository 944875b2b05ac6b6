"""
Structural checks run on every group/link document before it reaches the store.
"""

import math
import time
from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote, urlencode

from linkshare.config import settings
from linkshare.core.exceptions import InvalidRecord


def now_ms() -> int:
    """Epoch milliseconds, the timestamp unit of every stored document."""
    return int(time.time() * 1000)


def _non_blank(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _is_finite_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def is_valid_group(candidate: Optional[Mapping[str, Any]]) -> bool:
    if not candidate:
        return False
    if not (_non_blank(candidate.get("name"))
            and _non_blank(candidate.get("createdBy"))
            and _non_blank(candidate.get("avatar"))):
        return False
    members = candidate.get("memberEmails")
    if not isinstance(members, list) or len(members) == 0:
        return False
    if not isinstance(candidate.get("links"), list):
        return False
    return _is_finite_number(candidate.get("createdAt"))


def is_valid_link(candidate: Optional[Mapping[str, Any]]) -> bool:
    if not candidate:
        return False
    if not (_non_blank(candidate.get("url"))
            and _non_blank(candidate.get("title"))
            and _non_blank(candidate.get("author"))):
        return False
    votes = candidate.get("votes")
    if not isinstance(votes, Mapping):
        return False
    if not isinstance(votes.get("up"), list) or not isinstance(votes.get("down"), list):
        return False
    if not isinstance(candidate.get("comments"), list):
        return False
    return _is_finite_number(candidate.get("timestamp"))


def avatar_for(name: str) -> str:
    # spaces as %20 rather than "+"
    query = urlencode({"name": name, "background": "random"}, safe="", quote_via=quote)
    return f"{settings.avatar_base_url}?{query}"


def create_group_data(name: str, owner_email: str, created_at: Optional[int] = None) -> Dict[str, Any]:
    """Initial document for a new group owned by `owner_email`; raises InvalidRecord if malformed."""
    trimmed_name = (name or "").strip()
    group_data = {
        "name": trimmed_name,
        "avatar": avatar_for(trimmed_name),
        "createdBy": owner_email,
        "memberEmails": [owner_email],
        "links": [],
        "createdAt": created_at if created_at is not None else now_ms(),
    }
    if not is_valid_group(group_data):
        raise InvalidRecord("Invalid group data structure")
    return group_data
