from __future__ import annotations

import threading
from datetime import datetime
from typing import Any, Dict, List

from .models import ListenerRegistration


class NamespaceListenerSet:
    """Listeners of a single namespace, guarded by their own lock.

    Keyed by listener identity, so re-adding the same object is a no-op.
    Iteration goes through `snapshot()`, which copies under the lock and
    lets dispatch run without holding it.
    """

    def __init__(self, namespace: str):
        self.namespace = namespace
        self._lock = threading.Lock()
        self._registrations: Dict[int, ListenerRegistration] = {}

    def add(self, listener: Any, *, now: datetime) -> bool:
        key = id(listener)
        with self._lock:
            if key in self._registrations:
                return False
            self._registrations[key] = ListenerRegistration(
                namespace=self.namespace,
                listener_id=key,
                listener=listener,
                registered_at=now,
            )
            return True

    def remove(self, listener: Any) -> bool:
        with self._lock:
            return self._registrations.pop(id(listener), None) is not None

    def contains(self, listener: Any) -> bool:
        with self._lock:
            reg = self._registrations.get(id(listener))
            return reg is not None and reg.listener is listener

    def snapshot(self) -> List[Any]:
        with self._lock:
            return [reg.listener for reg in self._registrations.values()]

    def registrations(self) -> List[ListenerRegistration]:
        with self._lock:
            return list(self._registrations.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._registrations)
