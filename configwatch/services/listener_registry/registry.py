from __future__ import annotations

import threading
from datetime import datetime
from typing import Any, Dict, List

from .models import ListenerRegistration
from .store import NamespaceListenerSet


class InMemoryListenerRegistry:
    """Thread-safe in-memory registry of listeners per namespace.

    The registry lock only guards the namespace -> entry map; adds, removes
    and snapshots lock the single namespace entry they touch, so unrelated
    namespaces never serialize on each other.

    Empty entries are kept: a namespace that loses its last listener and
    gains a new one reuses the same entry, which avoids a remove/re-create
    race between two callers.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: Dict[str, NamespaceListenerSet] = {}

    def _entry(self, namespace: str, *, create: bool):
        entry = self._entries.get(namespace)
        if entry is not None or not create:
            return entry
        with self._lock:
            entry = self._entries.get(namespace)
            if entry is None:
                entry = NamespaceListenerSet(namespace)
                self._entries[namespace] = entry
            return entry

    def add(self, namespace: str, listener: Any) -> bool:
        """Register `listener`; returns False if it was already registered."""
        return self._entry(namespace, create=True).add(listener, now=datetime.utcnow())

    def remove(self, namespace: str, listener: Any) -> bool:
        """Unregister `listener`; returns False if it was not registered."""
        entry = self._entry(namespace, create=False)
        if entry is None:
            return False
        return entry.remove(listener)

    def is_registered(self, namespace: str, listener: Any) -> bool:
        entry = self._entry(namespace, create=False)
        return entry is not None and entry.contains(listener)

    def snapshot_listeners(self, namespace: str) -> List[Any]:
        """Copy of the namespace's listeners, safe to iterate without any lock."""
        entry = self._entry(namespace, create=False)
        if entry is None:
            return []
        return entry.snapshot()

    def registrations(self, namespace: str) -> List[ListenerRegistration]:
        entry = self._entry(namespace, create=False)
        if entry is None:
            return []
        return entry.registrations()

    def count(self, namespace: str) -> int:
        entry = self._entry(namespace, create=False)
        return len(entry) if entry is not None else 0

    def namespaces(self) -> List[str]:
        """Namespaces with at least one registered listener."""
        with self._lock:
            entries = list(self._entries.values())
        return [e.namespace for e in entries if len(e) > 0]
