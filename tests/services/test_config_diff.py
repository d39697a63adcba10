from configwatch.domain.change_event import ChangeType
from configwatch.services.config_diff import compute_changes


def _summary(events):
    return {(e.key, e.change_type, e.new_value) for e in events}


def test_scenario_update_and_add():
    events = compute_changes("ns1", {"a": "1", "b": "2"}, {"a": "1", "b": "3", "c": "4"}, "T2")
    assert [(e.change_type, e.key, e.new_value) for e in events] == [
        (ChangeType.UPDATE, "b", "3"),
        (ChangeType.ADD, "c", "4"),
    ]
    assert events[0].old_value == "2"
    assert all(e.namespace == "ns1" and e.change_token == "T2" for e in events)


def test_deleted_keys_come_last_without_new_value():
    events = compute_changes("ns", {"x": "1", "y": "2", "z": "3"}, {"y": "9", "w": "0"})
    assert [(e.key, e.change_type) for e in events] == [
        ("y", ChangeType.UPDATE),
        ("w", ChangeType.ADD),
        ("x", ChangeType.DELETE),
        ("z", ChangeType.DELETE),
    ]
    deletes = [e for e in events if e.change_type is ChangeType.DELETE]
    assert all(e.new_value is None for e in deletes)
    assert [e.old_value for e in deletes] == ["1", "3"]


def test_identical_maps_produce_no_events():
    assert compute_changes("ns", {"a": "1", "b": ""}, {"b": "", "a": "1"}) == []


def test_missing_old_treats_everything_as_added():
    assert _summary(compute_changes("ns", None, {"a": "1"})) == {("a", ChangeType.ADD, "1")}


def test_missing_new_treats_everything_as_deleted():
    assert _summary(compute_changes("ns", {"a": "1"}, {})) == {("a", ChangeType.DELETE, None)}


def test_keys_compared_exactly():
    events = compute_changes("ns", {"Key": "1"}, {"key": "1", "Key ": "1"})
    assert _summary(events) == {
        ("key", ChangeType.ADD, "1"),
        ("Key ", ChangeType.ADD, "1"),
        ("Key", ChangeType.DELETE, None),
    }


def test_event_set_matches_set_algebra():
    old = {f"k{i}": str(i) for i in range(0, 20)}
    new = {f"k{i}": str(i if i % 3 else i + 100) for i in range(10, 30)}
    events = compute_changes("ns", old, new)

    added = {k for k in new if k not in old}
    deleted = {k for k in old if k not in new}
    updated = {k for k in new if k in old and old[k] != new[k]}

    assert {e.key for e in events if e.change_type is ChangeType.ADD} == added
    assert {e.key for e in events if e.change_type is ChangeType.DELETE} == deleted
    assert {e.key for e in events if e.change_type is ChangeType.UPDATE} == updated
    assert len(events) == len(added) + len(deleted) + len(updated)
