from __future__ import annotations

import threading
import time

import pytest

from configwatch.domain.snapshot import RemoteConfig
from configwatch.exceptions import NotFoundError
from configwatch.services.backoff import ExponentialBackoff
from configwatch.services.change_dispatcher import ChangeDispatcher
from configwatch.services.config_client import ConfigClient
from configwatch.services.config_refresher import ConfigRefresher
from configwatch.services.listener_registry import InMemoryListenerRegistry
from configwatch.services.parser_factory import ParserFactory
from configwatch.services.poll_supervisor import PollLoopSupervisor
from configwatch.services.snapshot_cache import SnapshotCache


class ScriptedGateway:
    """In-memory stand-in for the remote config service.

    `publish()` changes a namespace; `await_change` wakes up like a long poll.
    """

    def __init__(self, configs: dict[str, tuple[str, str]] | None = None, fetch_delay: float = 0.0):
        self._cond = threading.Condition()
        self._configs = dict(configs or {})
        self.fetch_delay = fetch_delay
        self.fetch_calls: list[str] = []
        self.await_calls: list[tuple[str, str]] = []
        self._active_fetches: dict[str, int] = {}
        self.max_concurrent_fetches: dict[str, int] = {}

    def publish(self, namespace: str, raw: str, token: str) -> None:
        with self._cond:
            self._configs[namespace] = (raw, token)
            self._cond.notify_all()

    def fetch_config(self, namespace: str) -> RemoteConfig:
        with self._cond:
            self.fetch_calls.append(namespace)
            if namespace not in self._configs:
                raise NotFoundError(namespace)
            raw, token = self._configs[namespace]
            active = self._active_fetches.get(namespace, 0) + 1
            self._active_fetches[namespace] = active
            self.max_concurrent_fetches[namespace] = max(self.max_concurrent_fetches.get(namespace, 0), active)
        try:
            if self.fetch_delay:
                time.sleep(self.fetch_delay)
            return RemoteConfig(raw_content=raw, change_token=token)
        finally:
            with self._cond:
                self._active_fetches[namespace] -= 1

    def await_change(self, namespace: str, since_token: str, timeout: float) -> str:
        with self._cond:
            self.await_calls.append((namespace, since_token))

            def _changed():
                entry = self._configs.get(namespace)
                return entry is not None and entry[1] != since_token

            self._cond.wait_for(_changed, timeout)
            entry = self._configs.get(namespace)
            return entry[1] if entry is not None else since_token


class RecordingListener:
    def __init__(self, expected: int = 0):
        self.events = []
        self._lock = threading.Lock()
        self._expected = expected
        self.done = threading.Event()

    def process(self, event):
        with self._lock:
            self.events.append(event)
            if self._expected and len(self.events) >= self._expected:
                self.done.set()


def wait_until(predicate, timeout: float = 3.0, interval: float = 0.01) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


def build_client(
    gateway,
    *,
    poll_timeout: float = 0.05,
    backoff_factory=None,
    fault_handler=None,
    default_namespace: str = "application",
) -> ConfigClient:
    registry = InMemoryListenerRegistry()
    cache = SnapshotCache()
    parser_factory = ParserFactory()
    dispatcher = ChangeDispatcher(registry, fault_handler=fault_handler)
    refresher = ConfigRefresher(gateway=gateway, cache=cache, parser_factory=parser_factory, dispatcher=dispatcher)
    supervisor = PollLoopSupervisor(
        gateway=gateway,
        refresher=refresher,
        cache=cache,
        poll_timeout=poll_timeout,
        backoff_factory=backoff_factory or (lambda: ExponentialBackoff(initial_seconds=0.01, max_seconds=0.05)),
    )
    return ConfigClient(
        registry=registry,
        cache=cache,
        refresher=refresher,
        supervisor=supervisor,
        parser_factory=parser_factory,
        default_namespace=default_namespace,
    )


@pytest.fixture
def client_factory():
    clients = []

    def _make(gateway, **kwargs):
        client = build_client(gateway, **kwargs)
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close(timeout=2)
