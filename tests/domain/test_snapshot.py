import dataclasses

import pytest

from configwatch.domain.change_event import ChangeType, ConfigChangeEvent
from configwatch.domain.snapshot import ConfigSnapshot


def test_snapshot_content_is_read_only_copy():
    source = {"a": "1"}
    snap = ConfigSnapshot(namespace="ns", content=source, change_token="T1")
    source["a"] = "changed"

    assert snap.content["a"] == "1"
    with pytest.raises(TypeError):
        snap.content["a"] = "2"
    with pytest.raises(dataclasses.FrozenInstanceError):
        snap.change_token = "T2"


def test_snapshot_keeps_key_order_and_get_default():
    snap = ConfigSnapshot(namespace="ns", content={"z": "1", "a": "2"}, change_token="T1")
    assert list(snap.content) == ["z", "a"]
    assert snap.get("missing", "dflt") == "dflt"


def test_delete_event_cannot_carry_new_value():
    with pytest.raises(ValueError):
        ConfigChangeEvent(namespace="ns", key="a", change_type=ChangeType.DELETE, new_value="x")
