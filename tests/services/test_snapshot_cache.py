import threading

import pytest

from configwatch.domain.snapshot import ConfigSnapshot
from configwatch.services.snapshot_cache import SnapshotCache


def _snap(namespace, token, **content):
    return ConfigSnapshot(namespace=namespace, content=content, change_token=token)


def test_get_missing_returns_none():
    assert SnapshotCache().get("ns") is None


def test_put_replaces_and_returns_previous():
    cache = SnapshotCache()
    first = _snap("ns", "T1", a="1")
    second = _snap("ns", "T2", a="2")

    assert cache.put(first) is None
    assert cache.put(second) is first
    assert cache.get("ns") is second


def test_put_if_absent_keeps_existing():
    cache = SnapshotCache()
    first = _snap("ns", "T1")
    cache.put(first)
    assert cache.put_if_absent(_snap("ns", "T9")) is first


def test_discard_and_namespaces():
    cache = SnapshotCache()
    cache.put(_snap("a", "1"))
    cache.put(_snap("b", "1"))
    assert sorted(cache.namespaces()) == ["a", "b"]
    assert cache.discard("a") is True
    assert cache.discard("a") is False
    assert cache.namespaces() == ["b"]


def test_put_requires_snapshot():
    with pytest.raises(ValueError):
        SnapshotCache().put(None)


def test_readers_only_see_whole_snapshots():
    cache = SnapshotCache()
    cache.put(_snap("ns", "0", a="0", b="0"))
    stop = threading.Event()
    torn = []

    def _writer():
        i = 0
        while not stop.is_set():
            i += 1
            cache.put(_snap("ns", str(i), a=str(i), b=str(i)))

    def _reader():
        for _ in range(2000):
            snap = cache.get("ns")
            if not (snap.content["a"] == snap.content["b"] == snap.change_token):
                torn.append(snap)

    writer = threading.Thread(target=_writer)
    writer.start()
    readers = [threading.Thread(target=_reader) for _ in range(3)]
    for r in readers:
        r.start()
    for r in readers:
        r.join()
    stop.set()
    writer.join()

    assert torn == []
