import copy
import itertools
from unittest.mock import MagicMock

import pytest

from linkshare.core.exceptions import AdapterFailure, Conflict, NotFound
from linkshare.core.state import ChatState
from linkshare.database.document_store import GROUPS, KEY_FIELDS, USERS, VERSION_FIELD
from linkshare.modules.auth.service import AuthService
from linkshare.modules.groups.service import GroupService
from linkshare.modules.links.service import LinkService
from linkshare.modules.users.service import UserService


class MemoryDocumentStore:
    """DocumentStore kept in dicts; returns copies so callers never alias stored documents."""

    def __init__(self):
        self.collections = {USERS: {}, GROUPS: {}}
        self.writes = []
        self.fail_on = set()
        self._ids = itertools.count(1)

    def _maybe_fail(self, op):
        if op in self.fail_on:
            raise AdapterFailure(f"{op} unavailable")

    def raw(self, collection, key):
        return self.collections[collection].get(key)

    def get(self, collection, key):
        self._maybe_fail("get")
        doc = self.collections[collection].get(key)
        return copy.deepcopy(doc) if doc is not None else None

    def query(self, collection, field, contains=None, between=None):
        self._maybe_fail("query")
        results = []
        for doc in self.collections[collection].values():
            value = doc.get(field)
            if contains is not None and contains not in (value or []):
                continue
            if between is not None:
                start, end = between
                if not isinstance(value, str) or not (start <= value <= end):
                    continue
            results.append(copy.deepcopy(doc))
        return results

    def insert(self, collection, doc):
        self._maybe_fail("insert")
        key = f"g{next(self._ids)}"
        stored = copy.deepcopy(doc)
        stored[KEY_FIELDS[collection]] = key
        self.collections[collection][key] = stored
        self.writes.append(("insert", collection, key))
        return key

    def set(self, collection, key, doc):
        self._maybe_fail("set")
        self.collections[collection][key] = {**copy.deepcopy(doc), KEY_FIELDS[collection]: key}
        self.writes.append(("set", collection, key))

    def update(self, collection, key, fields, expected_version=None):
        self._maybe_fail("update")
        doc = self.collections[collection].get(key)
        if doc is None:
            raise NotFound(f"{collection}/{key} not found")
        if expected_version is not None:
            if (doc.get(VERSION_FIELD) or 0) != expected_version:
                raise Conflict(f"{collection}/{key} was modified concurrently")
            doc[VERSION_FIELD] = expected_version + 1
        doc.update(copy.deepcopy(fields))
        self.writes.append(("update", collection, key))

    def _existing(self, collection, key):
        doc = self.collections[collection].get(key)
        if doc is None:
            raise NotFound(f"{collection}/{key} not found")
        return doc

    def union_add(self, collection, key, field, values):
        self._maybe_fail("union_add")
        doc = self._existing(collection, key)
        current = doc.setdefault(field, [])
        for value in values:
            if value not in current:
                current.append(value)
        self.writes.append(("union_add", collection, key))

    def union_remove(self, collection, key, field, value):
        self._maybe_fail("union_remove")
        doc = self._existing(collection, key)
        doc[field] = [v for v in doc.get(field, []) if v != value]
        self.writes.append(("union_remove", collection, key))


class FakeSession:
    def __init__(self, principal=None):
        self.principal = principal
        self.listeners = []

    def current_principal(self):
        return self.principal

    def on_principal_change(self, callback):
        self.listeners.append(callback)
        return lambda: self.listeners.remove(callback)

    def emit(self, principal):
        self.principal = principal
        for callback in list(self.listeners):
            callback(principal)


def make_link(link_id, author, nickname, url="https://example.com", title="Example", comments=None,
              up=None, down=None, timestamp=1700000000000):
    return {
        "id": link_id,
        "url": url,
        "title": title,
        "description": "",
        "author": author,
        "authorNickname": nickname,
        "timestamp": timestamp,
        "votes": {"up": list(up or []), "down": list(down or [])},
        "comments": list(comments or []),
    }


def make_comment(comment_id, author, nickname, content="nice"):
    return {
        "id": comment_id,
        "content": content,
        "author": author,
        "authorNickname": nickname,
        "timestamp": 1700000001000,
    }


@pytest.fixture
def store():
    store = MemoryDocumentStore()
    for email, nickname in [("a@x.com", "Alice"), ("b@x.com", "Bob"), ("c@x.com", "Carol")]:
        store.collections[USERS][email] = {"email": email, "nickname": nickname, "createdAt": 1690000000000}
    store.collections[GROUPS]["G"] = {
        "id": "G",
        "name": "Reading list",
        "avatar": "https://ui-avatars.com/api/?name=Reading%20list&background=random",
        "createdBy": "a@x.com",
        "memberEmails": ["a@x.com", "b@x.com"],
        "links": [
            make_link("L1", "a@x.com", "Alice", comments=[make_comment("C1", "b@x.com", "Bob")]),
            make_link("L2", "b@x.com", "Bob", url="https://python.org", title="Python"),
        ],
        "createdAt": 1695000000000,
    }
    store.collections[GROUPS]["H"] = {
        "id": "H",
        "name": "Music",
        "avatar": "https://ui-avatars.com/api/?name=Music&background=random",
        "createdBy": "b@x.com",
        "memberEmails": ["b@x.com", "a@x.com"],
        "links": [
            make_link("M1", "b@x.com", "Bob", comments=[make_comment("C2", "a@x.com", "Alice")]),
        ],
        "createdAt": 1696000000000,
    }
    store.collections[GROUPS]["K"] = {
        "id": "K",
        "name": "Quiet",
        "avatar": "https://ui-avatars.com/api/?name=Quiet&background=random",
        "createdBy": "a@x.com",
        "memberEmails": ["a@x.com", "c@x.com"],
        "links": [make_link("Q1", "c@x.com", "Carol")],
        "createdAt": 1697000000000,
    }
    return store


@pytest.fixture
def state():
    return ChatState()


@pytest.fixture
def login(store, state):
    """Hydrate the state as if `email` had just signed in."""
    def _login(email):
        AuthService(MagicMock(), store, state).hydrate(email)
        store.writes.clear()
        return state
    return _login


@pytest.fixture
def groups(store, state):
    return GroupService(store, state, optimistic=False)


@pytest.fixture
def links(store, state):
    return LinkService(store, state, optimistic=False)


@pytest.fixture
def users(store, state):
    return UserService(store, state, optimistic=False)
