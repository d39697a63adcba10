import logging
from typing import Callable

from configwatch.domain.change_event import ChangeType, ConfigChangeEvent

logger = logging.getLogger(__name__)


class LoggingChangeListener:
    """Logs every change event; what `run.py` registers for watched namespaces."""

    def __init__(self, log: logging.Logger = logger, level: int = logging.INFO):
        self._log = log
        self._level = level

    def process(self, event: ConfigChangeEvent) -> None:
        if event.change_type is ChangeType.DELETE:
            self._log.log(self._level, "[%s] %s deleted", event.namespace, event.key)
            return
        self._log.log(
            self._level,
            "[%s] %s %s -> %r (token=%s)",
            event.namespace, event.key, event.change_type.value, event.new_value, event.change_token,
        )


class CallbackListener:
    """Adapts a plain function to the listener interface.

    Identity is the wrapper, not the function: keep the wrapper around to
    remove it later.
    """

    def __init__(self, callback: Callable[[ConfigChangeEvent], None]):
        if not callable(callback):
            raise ValueError("callback must be callable")
        self._callback = callback

    def process(self, event: ConfigChangeEvent) -> None:
        self._callback(event)

    def __repr__(self):
        return f"<CallbackListener {getattr(self._callback, '__name__', self._callback)!r}>"
