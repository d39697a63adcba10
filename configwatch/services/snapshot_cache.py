import threading
from typing import Dict, List, Optional

from configwatch.domain.snapshot import ConfigSnapshot


class SnapshotCache:
    """
    Per-namespace cache of the last-known ConfigSnapshot.

    Snapshots are immutable and published by replacing the dict entry under
    the lock, so a reader sees either the old snapshot or the new one, never
    a mix. There is no implicit eviction: entries live until `discard()`.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._snapshots: Dict[str, ConfigSnapshot] = {}

    def get(self, namespace: str) -> Optional[ConfigSnapshot]:
        """Return the cached snapshot, or None if the namespace was never fetched."""
        with self._lock:
            return self._snapshots.get(namespace)

    def put(self, snapshot: ConfigSnapshot) -> Optional[ConfigSnapshot]:
        """Replace the namespace's snapshot; returns the one it replaced."""
        if snapshot is None:
            raise ValueError("snapshot is required")
        with self._lock:
            previous = self._snapshots.get(snapshot.namespace)
            self._snapshots[snapshot.namespace] = snapshot
            return previous

    def put_if_absent(self, snapshot: ConfigSnapshot) -> ConfigSnapshot:
        """Store `snapshot` only when nothing is cached yet; return whichever is cached afterwards."""
        with self._lock:
            existing = self._snapshots.get(snapshot.namespace)
            if existing is not None:
                return existing
            self._snapshots[snapshot.namespace] = snapshot
            return snapshot

    def discard(self, namespace: str) -> bool:
        with self._lock:
            return self._snapshots.pop(namespace, None) is not None

    def namespaces(self) -> List[str]:
        with self._lock:
            return list(self._snapshots.keys())

    def clear(self) -> None:
        """Clear entire cache. Useful for testing or manual invalidation."""
        with self._lock:
            self._snapshots.clear()
