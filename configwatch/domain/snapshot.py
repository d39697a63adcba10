from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Mapping, Optional


@dataclass(frozen=True)
class ConfigSnapshot:
    """Last-known state of one namespace.

    Immutable: a refresh publishes a new snapshot instead of mutating this one.
    `content` is wrapped in a read-only mapping that keeps the parser's key order.
    `remote_configurations` holds the key/value map exactly as the server
    sent it (for yaml or json namespaces that is the single `content` key).
    """

    namespace: str
    content: Mapping[str, str]
    change_token: str
    raw_content: str = ""
    fetched_at: Optional[datetime] = None
    remote_configurations: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "content", MappingProxyType(dict(self.content)))
        object.__setattr__(self, "remote_configurations", MappingProxyType(dict(self.remote_configurations)))

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.content.get(key, default)

    def __repr__(self):
        return f"<ConfigSnapshot namespace={self.namespace} token={self.change_token} keys={len(self.content)}>"


@dataclass(frozen=True)
class RemoteConfig:
    """Namespace content as returned by the remote gateway.

    `configurations` is the server's own flat map when it serves one;
    properties namespaces use it as-is instead of re-parsing `raw_content`.
    """

    raw_content: str
    change_token: str
    configurations: Optional[Mapping[str, str]] = None
