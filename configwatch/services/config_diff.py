from typing import List, Mapping, Optional

from configwatch.domain.change_event import ChangeType, ConfigChangeEvent


def compute_changes(
    namespace: str,
    old: Optional[Mapping[str, str]],
    new: Optional[Mapping[str, str]],
    change_token: Optional[str] = None,
) -> List[ConfigChangeEvent]:
    """Return one event per key that differs between `old` and `new`.

    Keys only in `new` are ADD, keys in both with unequal values are UPDATE,
    keys only in `old` are DELETE. Order: `new`'s keys in their order, then
    deleted keys in `old`'s order.
    """
    old = old or {}
    new = new or {}
    events: List[ConfigChangeEvent] = []

    for key, value in new.items():
        if key not in old:
            events.append(ConfigChangeEvent(
                namespace=namespace,
                key=key,
                change_type=ChangeType.ADD,
                new_value=value,
                change_token=change_token,
            ))
        elif old[key] != value:
            events.append(ConfigChangeEvent(
                namespace=namespace,
                key=key,
                change_type=ChangeType.UPDATE,
                new_value=value,
                old_value=old[key],
                change_token=change_token,
            ))

    for key, value in old.items():
        if key not in new:
            events.append(ConfigChangeEvent(
                namespace=namespace,
                key=key,
                change_type=ChangeType.DELETE,
                old_value=value,
                change_token=change_token,
            ))

    return events
