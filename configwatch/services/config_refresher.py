import logging
from datetime import datetime
from typing import List, Mapping, Optional

from configwatch.domain.change_event import ConfigChangeEvent
from configwatch.domain.snapshot import ConfigSnapshot
from configwatch.exceptions import ParseError
from configwatch.services.config_diff import compute_changes

logger = logging.getLogger(__name__)


class ConfigRefresher:
    """Fetch, parse, diff, cache and dispatch one namespace.

    Called from a namespace's poll loop (one at a time per namespace) and
    from `ConfigClient.get_properties` for cache-or-fetch loads.
    """

    def __init__(self, *, gateway, cache, parser_factory, dispatcher):
        self.gateway = gateway
        self.cache = cache
        self.parser_factory = parser_factory
        self.dispatcher = dispatcher

    def fetch_snapshot(self, namespace: str, change_token: Optional[str] = None) -> ConfigSnapshot:
        """Fetch and parse without touching the cache.

        `change_token` replaces the gateway's token, e.g. the notification
        id that triggered this fetch.
        """
        remote = self.gateway.fetch_config(namespace)
        if remote.configurations is not None and self.parser_factory.accepts_flat_map(namespace):
            content = remote.configurations
        else:
            content = self._parse(namespace, remote)
        return ConfigSnapshot(
            namespace=namespace,
            content=content,
            change_token=change_token if change_token is not None else remote.change_token,
            raw_content=remote.raw_content,
            fetched_at=datetime.utcnow(),
            remote_configurations=remote.configurations or {},
        )

    def _parse(self, namespace: str, remote) -> Mapping[str, str]:
        parser = self.parser_factory.get(namespace)
        try:
            return parser.parse(namespace, remote.raw_content)
        except ParseError as e:
            e.raw_content = remote.raw_content
            raise
        except Exception as e:
            raise ParseError(namespace, str(e), raw_content=remote.raw_content) from e

    def load(self, namespace: str) -> ConfigSnapshot:
        """Cache-or-fetch. Never dispatches; a concurrent refresh's snapshot wins."""
        cached = self.cache.get(namespace)
        if cached is not None:
            return cached
        snapshot = self.fetch_snapshot(namespace)
        return self.cache.put_if_absent(snapshot)

    def refresh(self, namespace: str, change_token: Optional[str] = None, *, dispatch: bool = True) -> List[ConfigChangeEvent]:
        """Replace the cached snapshot with a fresh one and dispatch the differences.

        Returns the events computed (also when `dispatch` is False).
        """
        snapshot = self.fetch_snapshot(namespace, change_token)
        previous = self.cache.put(snapshot)
        old_content = previous.content if previous is not None else {}
        events = compute_changes(namespace, old_content, snapshot.content, snapshot.change_token)
        logger.info(
            "Refreshed %s token=%s (%d keys, %d changes)",
            namespace, snapshot.change_token, len(snapshot.content), len(events),
        )
        if dispatch and events:
            self.dispatcher.dispatch(namespace, events)
        return events
