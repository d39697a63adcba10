from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class PollState(str, Enum):
    IDLE = "idle"
    POLLING = "polling"
    REFRESHING = "refreshing"
    BACKOFF = "backoff"


@dataclass(frozen=True)
class PollerStatus:
    """Point-in-time view of one namespace's poll loop."""

    namespace: str
    state: PollState
    last_token: Optional[str] = None
    consecutive_failures: int = 0
    started_at: Optional[datetime] = None
    last_refresh_at: Optional[datetime] = None
    last_error: Optional[str] = None
