import pytest

from linkshare.core.exceptions import InvalidRecord, Unauthenticated
from linkshare.database.document_store import GROUPS, USERS
from linkshare.modules.users.service import apply_nickname

from conftest import make_comment, make_link


def test_search_short_term_returns_nothing(users, store):
    store.fail_on.add("query")
    assert users.search_users(" a ") == []


def test_search_matches_email_and_nickname_prefixes(users, store):
    store.collections[USERS]["bobby@y.com"] = {"email": "bobby@y.com", "nickname": "zed", "createdAt": 1}
    store.collections[USERS]["z@y.com"] = {"email": "z@y.com", "nickname": "bob", "createdAt": 1}

    results = users.search_users("  BOB ")

    assert [p.email for p in results] == ["bobby@y.com", "z@y.com"]


def test_search_deduplicates_by_email(users, store):
    store.collections[USERS]["carl@x.com"] = {"email": "carl@x.com", "nickname": "carl", "createdAt": 1}

    results = users.search_users("carl")

    assert [p.email for p in results] == ["carl@x.com"]


def test_search_degrades_to_empty_on_store_failure(users, store, state):
    store.fail_on.add("query")

    assert users.search_users("bob") == []
    assert state.error is None


def test_update_profile_requires_session(users):
    with pytest.raises(Unauthenticated):
        users.update_profile("Al")


def test_update_profile_rejects_blank(users, login):
    login("a@x.com")
    with pytest.raises(InvalidRecord):
        users.update_profile("   ")


def test_update_profile_same_name_is_noop(users, store, login):
    login("a@x.com")

    users.update_profile(" Alice ")

    assert store.writes == []


def test_rename_cascades_to_links_and_comments(users, store, login):
    state = login("a@x.com")

    users.update_profile("  Ally ")

    assert store.raw(USERS, "a@x.com")["nickname"] == "Ally"
    g_links = store.raw(GROUPS, "G")["links"]
    assert g_links[0]["authorNickname"] == "Ally"
    assert g_links[0]["comments"][0]["authorNickname"] == "Bob"
    assert g_links[1]["authorNickname"] == "Bob"
    h_link = store.raw(GROUPS, "H")["links"][0]
    assert h_link["authorNickname"] == "Bob"
    assert h_link["comments"][0]["authorNickname"] == "Ally"

    assert state.profile.nickname == "Ally"
    cached = {g.id: g for g in state.groups}
    assert set(cached) == {"G", "H", "K"}
    assert cached["G"].find_link("L1").author_nickname == "Ally"
    assert cached["H"].find_link("M1").comments[0].author_nickname == "Ally"


def test_rename_skips_groups_without_authored_content(users, store, login):
    login("a@x.com")

    users.update_profile("Ally")

    updated = [key for op, collection, key in store.writes if op == "update" and collection == GROUPS]
    assert sorted(updated) == ["G", "H"]
    assert store.raw(GROUPS, "K")["links"][0]["authorNickname"] == "Carol"


def test_apply_nickname_reports_unchanged():
    links = [make_link("L", "b@x.com", "Bob", comments=[make_comment("C", "c@x.com", "Carol")])]

    updated, changed = apply_nickname(links, "a@x.com", "Ally")

    assert changed is False
    assert updated == links
