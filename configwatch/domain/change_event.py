from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ChangeType(str, Enum):
    ADD = "add"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class ConfigChangeEvent:
    """A single key changing in one namespace during one refresh cycle."""

    namespace: str
    key: str
    change_type: ChangeType
    new_value: Optional[str] = None
    old_value: Optional[str] = None
    change_token: Optional[str] = None

    def __post_init__(self):
        if self.change_type is ChangeType.DELETE and self.new_value is not None:
            raise ValueError("DELETE events carry no new_value")
