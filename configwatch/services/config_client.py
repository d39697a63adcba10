import logging
from typing import List, Optional

from configwatch.domain.poll_status import PollerStatus
from configwatch.domain.snapshot import ConfigSnapshot
from configwatch.exceptions import ParseError, PropertyNotFoundError, RegistrationError

logger = logging.getLogger(__name__)


class ConfigClient:
    """Keeps namespaces in sync with the remote config service and notifies listeners.

    Owns no global state: registry, cache and poll supervisor are injected
    and belong to this instance.

    - `add_listener` registers and starts the namespace's poll loop on the
      first listener.
    - `remove_listener` unregisters and asks the loop to stop once the
      namespace has no listeners left. The cached snapshot is kept, so a
      later `get_properties` or `add_listener` does not refetch.
    - `get_properties` / `get_internal_property` read through the cache and
      never start polling.
    """

    def __init__(self, *, registry, cache, refresher, supervisor, parser_factory, default_namespace: str = "application"):
        self.registry = registry
        self.cache = cache
        self.refresher = refresher
        self.supervisor = supervisor
        self.parser_factory = parser_factory
        self.default_namespace = default_namespace

    @staticmethod
    def _validate(namespace, listener) -> None:
        if not isinstance(namespace, str) or namespace.strip() == "":
            raise RegistrationError(namespace, "namespace must be a non-empty string")
        if listener is None:
            raise RegistrationError(namespace, "listener is required")
        if not callable(getattr(listener, "process", None)):
            raise RegistrationError(namespace, f"{type(listener).__name__} has no callable process()")

    def add_listener(self, namespace: str, listener) -> bool:
        """Register `listener`; returns False if it was already registered (no duplicate delivery)."""
        self._validate(namespace, listener)
        added = self.registry.add(namespace, listener)
        if not added:
            logger.debug("Listener %r already registered on %s", listener, namespace)
        # Also covers a loop that was asked to stop and has not exited yet.
        self.supervisor.ensure_polling(namespace)
        return added

    def remove_listener(self, namespace: str, listener) -> bool:
        """Unregister `listener`; returns False if it was not registered.

        Once this returns the listener gets no new events; a delivery that
        was already under way on the poll thread may still complete.
        """
        self._validate(namespace, listener)
        removed = self.registry.remove(namespace, listener)
        if removed and self.registry.count(namespace) == 0:
            self.supervisor.request_stop(
                namespace,
                when=lambda: self.registry.count(namespace) == 0,
            )
        return removed

    def get_snapshot(self, namespace: str) -> ConfigSnapshot:
        if not isinstance(namespace, str) or namespace.strip() == "":
            raise ValueError("namespace must be a non-empty string")
        return self.refresher.load(namespace)

    def get_properties(self, namespace: str) -> str:
        """Raw content of `namespace` (cache-or-fetch). Raises NotFoundError / TransportError.

        Content that does not parse is still returned as fetched; it is just
        not cached.
        """
        try:
            return self.get_snapshot(namespace).raw_content
        except ParseError as e:
            if e.raw_content is None:
                raise
            logger.warning("Returning unparsed content of %s: %s", namespace, e.reason)
            return e.raw_content

    def get_internal_property(self, key: str, namespace: Optional[str] = None) -> str:
        ns = namespace or self.default_namespace
        snapshot = self.get_snapshot(ns)
        value = snapshot.get(key)
        if value is None:
            # yaml/json namespaces keep their document under the server's `content` key.
            value = snapshot.remote_configurations.get(key)
        if value is None:
            raise PropertyNotFoundError(ns, key)
        return value

    def set_parser(self, parser) -> None:
        """Use `parser` for every namespace from the next fetch on."""
        self.parser_factory.override = parser

    def listener_count(self, namespace: str) -> int:
        return self.registry.count(namespace)

    def watched_namespaces(self) -> List[str]:
        return self.registry.namespaces()

    def cached_namespaces(self) -> List[str]:
        return self.cache.namespaces()

    def poller_status(self, namespace: str) -> PollerStatus:
        return self.supervisor.status(namespace)

    def close(self, timeout: Optional[float] = None) -> None:
        self.supervisor.shutdown(timeout)
