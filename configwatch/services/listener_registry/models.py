from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class ListenerRegistration:
    """One listener registered on one namespace.

    `listener_id` is `id(listener)`; holding `listener` keeps that id valid
    for as long as the registration exists.
    """
    namespace: str
    listener_id: int
    listener: Any = field(compare=False)
    registered_at: datetime = field(compare=False, default_factory=datetime.utcnow)
