from linkshare.core.state import ChatState, ChatSnapshot
from linkshare.modules.groups.schemas import Group


def make_group(group_id, name="Group"):
    return Group.model_validate({
        "id": group_id,
        "name": name,
        "avatar": "https://ui-avatars.com/api/?name=Group&background=random",
        "createdBy": "a@x.com",
        "memberEmails": ["a@x.com"],
        "links": [],
        "createdAt": 1,
    })


def test_initial_snapshot_is_loading_and_empty():
    state = ChatState()
    assert state.loading is True
    assert state.user is None
    assert state.groups == ()
    assert state.error is None


def test_subscribers_get_new_and_old_snapshot():
    state = ChatState()
    seen = []
    state.subscribe(lambda new, old: seen.append((old.user, new.user)))

    state.set(user="a@x.com")

    assert seen == [(None, "a@x.com")]


def test_unsubscribe_stops_notifications():
    state = ChatState()
    seen = []
    unsubscribe = state.subscribe(lambda new, old: seen.append(new))
    unsubscribe()

    state.set(error="boom")

    assert seen == []


def test_updates_replace_the_group_tuple():
    state = ChatState()
    state.set(groups=[make_group("G")])
    before = state.groups

    state.replace_group("G", name="Renamed")

    assert before[0].name == "Group"
    assert state.groups[0].name == "Renamed"
    assert state.groups is not before
    assert isinstance(state.groups, tuple)


def test_replace_group_clears_error_and_ignores_other_ids():
    state = ChatState(ChatSnapshot(error="old", groups=(make_group("G"), make_group("H", "Other"))))

    state.replace_group("G", name="New")

    assert state.error is None
    assert [g.name for g in state.groups] == ["New", "Other"]


def test_failing_listener_does_not_block_others():
    state = ChatState()
    seen = []

    def broken(new, old):
        raise RuntimeError("listener bug")

    state.subscribe(broken)
    state.subscribe(lambda new, old: seen.append(new.error))

    state.record_error("last error")

    assert seen == ["last error"]
    assert state.error == "last error"


def test_reset_clears_session():
    state = ChatState(ChatSnapshot(user="a@x.com", groups=(make_group("G"),), active_group_id="G"))

    state.reset()

    assert state.user is None
    assert state.groups == ()
    assert state.active_group_id is None
    assert state.loading is False
