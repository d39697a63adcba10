import threading

from configwatch.services.listener_registry import InMemoryListenerRegistry


class _Listener:
    def process(self, event):
        pass


def test_add_is_idempotent_per_identity():
    registry = InMemoryListenerRegistry()
    listener = _Listener()

    assert registry.add("ns", listener) is True
    assert registry.add("ns", listener) is False
    assert registry.count("ns") == 1
    assert registry.snapshot_listeners("ns") == [listener]


def test_equal_but_distinct_listeners_are_separate_registrations():
    class _Eq(_Listener):
        def __eq__(self, other):
            return True

        __hash__ = object.__hash__

    registry = InMemoryListenerRegistry()
    registry.add("ns", _Eq())
    registry.add("ns", _Eq())
    assert registry.count("ns") == 2


def test_same_listener_on_two_namespaces():
    registry = InMemoryListenerRegistry()
    listener = _Listener()
    registry.add("a", listener)
    registry.add("b", listener)

    assert registry.remove("a", listener) is True
    assert not registry.is_registered("a", listener)
    assert registry.is_registered("b", listener)
    assert registry.namespaces() == ["b"]


def test_remove_unknown_returns_false():
    registry = InMemoryListenerRegistry()
    assert registry.remove("nope", _Listener()) is False
    registry.add("ns", _Listener())
    assert registry.remove("ns", _Listener()) is False


def test_snapshot_is_a_copy():
    registry = InMemoryListenerRegistry()
    first = _Listener()
    registry.add("ns", first)
    snap = registry.snapshot_listeners("ns")

    registry.add("ns", _Listener())
    registry.remove("ns", first)

    assert snap == [first]
    assert first not in registry.snapshot_listeners("ns")


def test_registrations_record_namespace_and_identity():
    registry = InMemoryListenerRegistry()
    listener = _Listener()
    registry.add("ns", listener)

    [reg] = registry.registrations("ns")
    assert reg.namespace == "ns"
    assert reg.listener is listener
    assert reg.listener_id == id(listener)
    assert reg.registered_at is not None


def test_concurrent_add_remove_keeps_consistent_counts():
    registry = InMemoryListenerRegistry()
    keepers = [_Listener() for _ in range(50)]
    churners = [_Listener() for _ in range(50)]
    start = threading.Event()

    def _add(listeners):
        start.wait()
        for listener in listeners:
            registry.add("ns", listener)

    def _churn():
        start.wait()
        for listener in churners:
            registry.add("ns", listener)
            registry.remove("ns", listener)

    threads = [threading.Thread(target=_add, args=(keepers,)) for _ in range(4)]
    threads += [threading.Thread(target=_churn) for _ in range(4)]
    for t in threads:
        t.start()
    start.set()
    for t in threads:
        t.join()

    assert registry.count("ns") == 50
    assert set(map(id, registry.snapshot_listeners("ns"))) == set(map(id, keepers))
