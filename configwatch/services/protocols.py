"""Protocol (interface) definitions for services."""

from typing import Mapping, Protocol

from configwatch.domain.change_event import ConfigChangeEvent
from configwatch.domain.snapshot import RemoteConfig


class ConfigListener(Protocol):
    """Caller-supplied handler invoked once per changed key.

    Registered by identity: the same object added twice is one registration.
    """
    def process(self, event: ConfigChangeEvent) -> None:
        ...


class RemoteConfigGateway(Protocol):
    """Minimal interface to the remote config service.

    Only the two calls the poll loop needs; the transport behind them is
    free to change (HTTP client, test fake, ...).
    """
    def fetch_config(self, namespace: str) -> RemoteConfig:
        """Return the namespace's full raw content and its change token.

        Raises TransportError or NotFoundError.
        """
        ...

    def await_change(self, namespace: str, since_token: str, timeout: float) -> str:
        """Block until a change newer than `since_token`, or return `since_token` on timeout.

        Raises TransportError.
        """
        ...


class ContentParser(Protocol):
    """Turns raw namespace content into flat key -> value pairs."""
    def parse(self, namespace: str, raw_content: str) -> Mapping[str, str]:
        ...
