from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, Dict, List, Optional

from configwatch.domain.poll_status import PollerStatus, PollState
from configwatch.exceptions import NotFoundError, ParseError, TransportError
from configwatch.services.backoff import ExponentialBackoff

logger = logging.getLogger(__name__)

# Failures that are expected from an unreliable remote; logged without a traceback.
_TRANSIENT_ERRORS = (TransportError, NotFoundError, ParseError)


class _NamespacePoller:
    """State of one namespace's poll loop. Mutated only by its own thread."""

    def __init__(self, namespace: str, stop_event: threading.Event):
        self.namespace = namespace
        self.stop_event = stop_event
        self.thread: Optional[threading.Thread] = None
        self.state = PollState.POLLING
        self.last_token: Optional[str] = None
        self.consecutive_failures = 0
        self.started_at = datetime.utcnow()
        self.last_refresh_at: Optional[datetime] = None
        self.last_error: Optional[str] = None

    def status(self) -> PollerStatus:
        return PollerStatus(
            namespace=self.namespace,
            state=self.state,
            last_token=self.last_token,
            consecutive_failures=self.consecutive_failures,
            started_at=self.started_at,
            last_refresh_at=self.last_refresh_at,
            last_error=self.last_error,
        )


class PollLoopSupervisor:
    """Runs one long-poll thread per watched namespace.

    Loop per namespace: POLLING (await_change) -> REFRESHING (fetch, diff,
    dispatch) -> POLLING, with BACKOFF after any failure. Nothing is fatal
    to a loop; only `request_stop` / `shutdown` end it, and only at a loop
    boundary. In-flight HTTP calls are allowed to finish.

    The decision to exit and the removal of the loop's handle happen under
    the supervisor lock, as does `ensure_polling`, so a namespace never has
    two loops: starting a namespace whose loop is still draining withdraws
    the stop request instead of spawning a second thread.
    """

    def __init__(
        self,
        *,
        gateway,
        refresher,
        cache,
        poll_timeout: float = 60.0,
        backoff_factory: Optional[Callable[[], ExponentialBackoff]] = None,
        event_factory=threading.Event,
    ):
        if poll_timeout <= 0:
            raise ValueError("poll_timeout must be > 0")
        self.gateway = gateway
        self.refresher = refresher
        self.cache = cache
        self.poll_timeout = poll_timeout
        self._backoff_factory = backoff_factory or ExponentialBackoff
        self._event_factory = event_factory
        self._lock = threading.Lock()
        self._pollers: Dict[str, _NamespacePoller] = {}
        self._closed = False

    def ensure_polling(self, namespace: str) -> bool:
        """Make sure a loop runs for `namespace`; returns True if a new thread was started."""
        with self._lock:
            if self._closed:
                raise RuntimeError("poll supervisor is shut down")
            poller = self._pollers.get(namespace)
            if poller is not None:
                if poller.stop_event.is_set():
                    poller.stop_event.clear()
                    logger.info("Stop request withdrawn for %s; loop keeps running", namespace)
                return False

            poller = _NamespacePoller(namespace, self._event_factory())
            thread = threading.Thread(
                target=self._run,
                args=(poller,),
                name=f"configwatch-poll-{namespace}",
                daemon=True,
            )
            poller.thread = thread
            self._pollers[namespace] = poller
            thread.start()
            logger.info("Started poll loop for %s", namespace)
            return True

    def request_stop(self, namespace: str, *, when: Optional[Callable[[], bool]] = None) -> bool:
        """Ask the namespace's loop to stop at its next boundary.

        `when` is evaluated under the supervisor lock; the stop is only
        requested if it returns True. Callers use it to re-check that the
        namespace still has no listeners.
        """
        with self._lock:
            poller = self._pollers.get(namespace)
            if poller is None:
                return False
            if when is not None and not when():
                return False
            poller.stop_event.set()
            logger.info("Stop requested for poll loop of %s", namespace)
            return True

    def is_polling(self, namespace: str) -> bool:
        with self._lock:
            poller = self._pollers.get(namespace)
            return poller is not None and not poller.stop_event.is_set()

    def status(self, namespace: str) -> PollerStatus:
        with self._lock:
            poller = self._pollers.get(namespace)
        if poller is None:
            return PollerStatus(namespace=namespace, state=PollState.IDLE)
        return poller.status()

    def statuses(self) -> List[PollerStatus]:
        with self._lock:
            pollers = list(self._pollers.values())
        return [p.status() for p in pollers]

    def join(self, namespace: str, timeout: Optional[float] = None) -> bool:
        """Wait for the namespace's loop thread to exit; True if no loop remains."""
        with self._lock:
            poller = self._pollers.get(namespace)
        if poller is None or poller.thread is None:
            return True
        poller.thread.join(timeout)
        return not poller.thread.is_alive()

    def shutdown(self, timeout: Optional[float] = None) -> None:
        with self._lock:
            self._closed = True
            pollers = list(self._pollers.values())
            for poller in pollers:
                poller.stop_event.set()
        for poller in pollers:
            if poller.thread is not None and poller.thread is not threading.current_thread():
                poller.thread.join(timeout)
        logger.info("Poll supervisor shut down (%d loops)", len(pollers))

    def _should_exit(self, poller: _NamespacePoller) -> bool:
        with self._lock:
            if not poller.stop_event.is_set():
                return False
            if self._pollers.get(poller.namespace) is poller:
                del self._pollers[poller.namespace]
            poller.state = PollState.IDLE
            return True

    def _run(self, poller: _NamespacePoller) -> None:
        namespace = poller.namespace
        backoff = self._backoff_factory()
        while not self._should_exit(poller):
            try:
                self._poll_once(poller)
                backoff.reset()
                poller.consecutive_failures = 0
            except _TRANSIENT_ERRORS as e:
                logger.warning("Poll loop for %s failed: %s", namespace, e)
                self._back_off(poller, backoff, e)
            except Exception as e:
                logger.exception("Unexpected error in poll loop for %s", namespace)
                self._back_off(poller, backoff, e)
        logger.info("Poll loop for %s stopped", namespace)

    def _poll_once(self, poller: _NamespacePoller) -> None:
        namespace = poller.namespace
        if poller.last_token is None:
            snapshot = self.cache.get(namespace)
            if snapshot is None:
                # Baseline load: nothing to compare against, so nothing to dispatch.
                poller.state = PollState.REFRESHING
                self.refresher.refresh(namespace, dispatch=False)
                snapshot = self.cache.get(namespace)
                poller.last_refresh_at = datetime.utcnow()
            poller.last_token = snapshot.change_token

        poller.state = PollState.POLLING
        token = self.gateway.await_change(namespace, poller.last_token, self.poll_timeout)
        if token is None or token == poller.last_token:
            return
        if poller.stop_event.is_set():
            return

        poller.state = PollState.REFRESHING
        self.refresher.refresh(namespace, token)
        poller.last_token = token
        poller.last_refresh_at = datetime.utcnow()
        poller.last_error = None
        poller.state = PollState.POLLING

    def _back_off(self, poller: _NamespacePoller, backoff: ExponentialBackoff, error: Exception) -> None:
        poller.state = PollState.BACKOFF
        poller.consecutive_failures += 1
        poller.last_error = str(error)
        delay = backoff.next_delay()
        logger.info(
            "Backing off %s for %.2fs (failures=%d)",
            poller.namespace, delay, poller.consecutive_failures,
        )
        # A stop request cuts the wait short.
        poller.stop_event.wait(delay)
