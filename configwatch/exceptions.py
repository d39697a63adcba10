"""Custom exceptions for configwatch services."""


class ConfigWatchError(Exception):
    """Base class for every error raised by configwatch."""


class TransportError(ConfigWatchError):
    """Raised when talking to the remote config service fails (network, HTTP status, bad payload)."""

    def __init__(self, target: str, original: Exception):
        self.target = target
        self.original = original
        super().__init__(f"Remote config request failed for {target}: {original}")


class NotFoundError(ConfigWatchError):
    """Raised when a namespace does not exist on the remote config service."""

    def __init__(self, namespace: str, reason: str = "not found"):
        self.namespace = namespace
        self.reason = reason
        super().__init__(f"Namespace '{namespace}' {reason}")


class RegistrationError(ConfigWatchError):
    """Raised synchronously when a listener cannot be registered or removed."""

    def __init__(self, namespace, reason: str):
        self.namespace = namespace
        self.reason = reason
        super().__init__(f"Listener registration for namespace {namespace!r} rejected: {reason}")


class ListenerFault(ConfigWatchError):
    """Wraps an exception raised by a listener's ``process`` call.

    Never propagated out of dispatch; it is logged and handed to the
    dispatcher's fault handler.
    """

    def __init__(self, namespace: str, listener, event, original: Exception):
        self.namespace = namespace
        self.listener = listener
        self.event = event
        self.original = original
        super().__init__(
            f"Listener {listener!r} failed on {namespace}/{getattr(event, 'key', '?')}: {original}"
        )


class ParseError(ConfigWatchError):
    """Raised when raw namespace content cannot be parsed into a flat map.

    `raw_content` carries the fetched text when it is known, so callers that
    only want the raw document can still get it.
    """

    def __init__(self, namespace: str, reason: str, raw_content=None):
        self.namespace = namespace
        self.reason = reason
        self.raw_content = raw_content
        super().__init__(f"Could not parse namespace '{namespace}': {reason}")


class PropertyNotFoundError(ConfigWatchError):
    """Raised when a key is missing from a namespace's cached properties."""

    def __init__(self, namespace: str, key: str):
        self.namespace = namespace
        self.key = key
        super().__init__(f"Property '{key}' not found in namespace '{namespace}'")
