"""Domain objects for configwatch - explicit re-exports to satisfy linters."""
from .snapshot import ConfigSnapshot as ConfigSnapshot
from .snapshot import RemoteConfig as RemoteConfig
from .change_event import ChangeType as ChangeType
from .change_event import ConfigChangeEvent as ConfigChangeEvent
from .poll_status import PollState as PollState
from .poll_status import PollerStatus as PollerStatus

__all__ = [
    "ConfigSnapshot",
    "RemoteConfig",
    "ChangeType",
    "ConfigChangeEvent",
    "PollState",
    "PollerStatus",
]
