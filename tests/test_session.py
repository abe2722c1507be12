import pytest

from whalytics import EventBuilder, Session, SessionBuilder, ValidationError

pytestmark = pytest.mark.unit


def test_new_session_keeps_identifiers():
    session = Session.new("user123", "session456")
    assert session.user_id == "user123"
    assert session.session_id == "session456"
    assert session.user_properties == {}
    assert session.pending_events_count() == 0


def test_default_sessions_get_distinct_random_ids():
    first = Session.default()
    second = Session.default()
    assert first.user_id and first.session_id
    assert first.user_id != first.session_id
    assert (first.user_id, first.session_id) != (second.user_id, second.session_id)


def test_blank_identifier_is_rejected():
    with pytest.raises(ValidationError):
        Session(user_id="", session_id="s1")


def test_builder_sets_user_properties_and_generates_missing_ids():
    session = (
        SessionBuilder()
        .user_id("user123")
        .user_properties({"platform": "python", "version": "1.0"})
        .build()
    )
    assert session.user_id == "user123"
    assert session.session_id
    assert len(session.user_properties) == 2
    assert isinstance(Session.builder(), SessionBuilder)


def test_user_properties_accessor_returns_copy():
    session = Session.new("u1", "s1")
    session.user_properties["leak"] = True
    assert session.user_properties == {}


def test_event_builder_is_prefilled_from_session():
    session = Session.new("user123", "session456")
    session.set_user_property("platform", "python")
    builder = session.event("test_event")
    assert isinstance(builder, EventBuilder)
    record = builder.build()
    assert record.event == "test_event"
    assert record.user_id == "user123"
    assert record.session_id == "session456"
    assert record.user_properties == {"platform": "python"}
    assert session.pending_events_count() == 0


def test_take_events_is_fifo():
    session = Session.new("u1", "s1")
    for name in ["a", "b", "c", "d"]:
        session.push_event(name)
    taken = session.take_events(2)
    assert [record.event for record in taken] == ["a", "b"]
    assert [record.event for record in session.take_events(10)] == ["c", "d"]
    assert session.pending_events_count() == 0


def test_take_zero_events_does_nothing():
    session = Session.new("u1", "s1")
    session.push_event("a")
    assert session.take_events(0) == []
    assert session.pending_events_count() == 1


@pytest.mark.parametrize("count", [-1, 1.5, True, "2"])
def test_take_events_rejects_invalid_count(count):
    session = Session.new("u1", "s1")
    session.push_event("a")
    session.push_event("b")
    with pytest.raises(ValidationError):
        session.take_events(count)
    assert session.pending_events_count() == 2


def test_push_event_carries_event_properties():
    session = Session.new("u1", "s1")
    record = session.push_event("level_completed", {"level_id": 5, "score": 1500})
    assert record.event_properties == {"level_id": 5, "score": 1500}
    assert session.take_events(1) == [record]


def test_event_property_overrides_identity_for_one_record():
    session = Session.new("u1", "s1")
    overridden = session.push_event("a", {"user_id": "u2", "session_id": "s2"})
    regular = session.push_event("b")
    assert overridden.user_id == "u2"
    assert overridden.session_id == "s2"
    assert overridden.event_properties == {"user_id": "u2", "session_id": "s2"}
    assert regular.user_id == "u1"
    assert regular.session_id == "s1"
    assert session.user_id == "u1"
    assert session.session_id == "s1"


@pytest.mark.parametrize("value", [42, None, ""])
def test_non_string_override_is_ignored(value):
    session = Session.new("u1", "s1")
    record = session.push_event("a", {"user_id": value})
    assert record.user_id == "u1"
    assert record.event_properties == {"user_id": value}


def test_user_property_changes_only_affect_later_events():
    session = Session.new("u1", "s1")
    session.set_user_property("k", "v")
    first = session.push_event("a")
    session.set_user_property("k", "w")
    second = session.push_event("b")
    assert first.user_properties == {"k": "v"}
    assert second.user_properties == {"k": "w"}


def test_set_user_properties_replaces_map():
    session = Session.new("u1", "s1")
    session.set_user_property("old", 1)
    replacement = {"new": 2}
    session.set_user_properties(replacement)
    replacement["later"] = 3
    assert session.user_properties == {"new": 2}
