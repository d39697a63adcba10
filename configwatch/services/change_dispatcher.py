from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from configwatch.domain.change_event import ConfigChangeEvent
from configwatch.exceptions import ListenerFault

logger = logging.getLogger(__name__)


@dataclass
class DispatchReport:
    events: int = 0
    delivered: int = 0
    skipped_removed: int = 0
    faults: int = 0


class ChangeDispatcher:
    """Fan change events out to the listeners registered for a namespace.

    Delivery is "for each event, for each listener in one registry
    snapshot", so every listener sees the events in the same order.

    Removal race: registration is re-checked right before each `process`
    call. A listener removed concurrently can still get the one delivery
    that had already passed that check; nothing after it.
    """

    def __init__(self, registry, fault_handler: Optional[Callable[[ListenerFault], None]] = None):
        self.registry = registry
        self.fault_handler = fault_handler

    def dispatch(self, namespace: str, events: Iterable[ConfigChangeEvent]) -> DispatchReport:
        report = DispatchReport()
        events = list(events)
        if not events:
            return report
        listeners = self.registry.snapshot_listeners(namespace)
        report.events = len(events)
        if not listeners:
            logger.debug("No listeners for %s; dropping %d events", namespace, len(events))
            return report

        for event in events:
            for listener in listeners:
                if not self.registry.is_registered(namespace, listener):
                    report.skipped_removed += 1
                    continue
                try:
                    listener.process(event)
                    report.delivered += 1
                except Exception as e:
                    report.faults += 1
                    self._report_fault(ListenerFault(namespace, listener, event, e))

        logger.info(
            "Dispatched %d events for %s to %d listeners (faults=%d)",
            report.events, namespace, len(listeners), report.faults,
        )
        return report

    def _report_fault(self, fault: ListenerFault) -> None:
        logger.error("%s", fault, exc_info=fault.original)
        if self.fault_handler is None:
            return
        try:
            self.fault_handler(fault)
        except Exception:
            logger.exception("Fault handler failed for %s", fault.namespace)
