"""
Secret synchronizer.

Polls a secret every interval and turns each poll into a watch event:

    secret found          -> ADDED
    secret not found      -> DELETED
    any other fetch error -> ERROR

Events are handled by a dispatcher thread in poll order. ADDED and MODIFIED
replace the local snapshot, DELETED clears it. ERROR is escalated on the
error channel and ends the loop. Restarting is left to the owner.

Listeners are only called when a polled secret differs from the last one
they were told about. refresh() updates the snapshot without calling them,
so a change it pulls in is still delivered by the next poll.

States: IDLE -> RUNNING -> STOPPED. stop() may be called any number of
times from any thread; the error channel is closed exactly once.
"""

import logging
import queue
import threading
from collections import defaultdict
from enum import Enum
from typing import Callable, Dict, List, Optional, Protocol

from ..kube.errors import is_not_found
from .errors import SynchronizationError, SynchronizationFetchError, WatchTerminatedError
from .types import EventType, SecretSnapshot, WatchEvent
from .watcher import PollWatcher

logger = logging.getLogger(__name__)

# Time interval between which the secret is resynchronized.
SECRET_SYNC_PERIOD = 300.0

ActionHandler = Callable[[WatchEvent], None]


class SecretStore(Protocol):
    """Capability that fetches a secret by namespace and name."""

    def get_secret(self, namespace: str, name: str) -> SecretSnapshot:
        """
        Raises:
            StatusError: With code 404 if the secret does not exist
            Exception: Any other fetch failure
        """
        ...


class SyncState(str, Enum):
    """Lifecycle state of a synchronizer."""

    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class SecretSynchronizer:
    """Poll-based watch over one secret."""

    def __init__(
        self,
        store: SecretStore,
        namespace: str,
        name: str,
        interval: float = SECRET_SYNC_PERIOD,
    ):
        """
        Initialize synchronizer.

        Args:
            store: Capability used to fetch the secret
            namespace: Namespace of the secret
            name: Name of the secret
            interval: Seconds between polls
        """
        self.store = store
        self.namespace = namespace
        self.secret_name = name
        self.interval = interval

        self._secret: Optional[SecretSnapshot] = None
        self._notified: Optional[SecretSnapshot] = None
        self._secret_lock = threading.Lock()

        # Held while changing state and while dispatching, so nothing is
        # delivered once stop() has returned.
        self._state_lock = threading.RLock()
        self._state = SyncState.IDLE

        self._handlers: Dict[EventType, List[ActionHandler]] = defaultdict(list)
        self._watcher: Optional[PollWatcher] = None
        self._stop_polling = threading.Event()
        self._errors: queue.Queue = queue.Queue()
        self._threads: List[threading.Thread] = []

    def name(self) -> str:
        return f"{self.secret_name}-{self.namespace}"

    @property
    def state(self) -> SyncState:
        with self._state_lock:
            return self._state

    @property
    def errors(self) -> queue.Queue:
        """
        Error channel.

        Receives SynchronizationError instances while running and a final
        None once the synchronizer is stopped.
        """
        return self._errors

    def register_action_handler(self, event_type: EventType, handler: ActionHandler) -> None:
        """Call handler for every delivered event of the given type."""
        with self._state_lock:
            self._handlers[EventType(event_type)].append(handler)

    def get(self) -> Optional[SecretSnapshot]:
        """Returns the last synchronized secret, or None."""
        with self._secret_lock:
            return self._secret

    def start(self) -> None:
        """
        Start polling in the background.

        Raises:
            RuntimeError: If the synchronizer was already started
        """
        with self._state_lock:
            if self._state != SyncState.IDLE:
                raise RuntimeError(f"synchronizer {self.name()} cannot start from state {self._state.value}")
            self._watcher = PollWatcher()
            self._state = SyncState.RUNNING

        self._threads = [
            threading.Thread(target=self._poll, daemon=True, name=f"secret-poll-{self.name()}"),
            threading.Thread(target=self._dispatch, daemon=True, name=f"secret-sync-{self.name()}"),
        ]
        for thread in self._threads:
            thread.start()
        logger.info(
            f"Starting secret synchronizer for {self.secret_name} in namespace {self.namespace} "
            f"(interval {self.interval:g}s)"
        )

    def stop(self) -> None:
        """Stop polling and close the event and error channels."""
        with self._state_lock:
            if self._state == SyncState.STOPPED:
                return
            self._state = SyncState.STOPPED
            watcher = self._watcher

        self._stop_polling.set()
        if watcher is not None:
            watcher.stop()
        self._errors.put(None)
        logger.info(f"Secret synchronizer {self.name()} stopped")

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the background threads to exit."""
        for thread in self._threads:
            if thread is not threading.current_thread():
                thread.join(timeout)

    def refresh(self) -> None:
        """
        Fetch the secret now, outside the poll schedule.

        Fetch failures are logged and the current snapshot is kept.
        """
        try:
            secret = self.store.get_secret(self.namespace, self.secret_name)
        except Exception as e:
            logger.warning(f"Secret synchronizer {self.name()} failed to refresh secret: {e}")
            return
        self._update(secret)

    def _poll(self) -> None:
        watcher = self._watcher
        while not self._stop_polling.is_set():
            if not watcher.send(self._secret_event()):
                return
            self._stop_polling.wait(self.interval)

    def _dispatch(self) -> None:
        for event in self._watcher.events():
            try:
                self._handle_event(event)
            except SynchronizationError as e:
                self._fail(e)
                return

        if self.state == SyncState.RUNNING:
            self._fail(WatchTerminatedError(f"{self.name()} watch ended unexpectedly"))

    def _fail(self, error: SynchronizationError) -> None:
        logger.error(f"Secret synchronizer {self.name()} failed: {error}")
        with self._state_lock:
            if self._state != SyncState.RUNNING:
                return
            self._errors.put(error)
        self.stop()

    def _secret_event(self) -> WatchEvent:
        try:
            secret = self.store.get_secret(self.namespace, self.secret_name)
        except Exception as e:
            # A secret that was never created is reported as deleted so a
            # listener can recreate it.
            if is_not_found(e):
                return WatchEvent(EventType.DELETED)
            return WatchEvent(EventType.ERROR, e)
        # TODO: emit MODIFIED when a previously observed secret changes; every
        # successful poll is ADDED today and ADDED listeners rely on that.
        return WatchEvent(EventType.ADDED, secret)

    def _handle_event(self, event: WatchEvent) -> None:
        with self._state_lock:
            if self._state != SyncState.RUNNING:
                return

            if event.type in (EventType.ADDED, EventType.MODIFIED):
                if not isinstance(event.payload, SecretSnapshot):
                    raise SynchronizationError(
                        f"expected secret, got {type(event.payload).__name__}"
                    )
                self._update(event.payload)
                if not self._mark_notified(event.payload):
                    return
            elif event.type == EventType.DELETED:
                with self._secret_lock:
                    self._secret = None
                    self._notified = None

            for handler in list(self._handlers[event.type]):
                try:
                    handler(event)
                except Exception:
                    logger.exception(f"Handler for {event.type.value} event of {self.name()} failed")

            if event.type == EventType.ERROR:
                raise SynchronizationFetchError(self.name(), event.payload)

    def _update(self, secret: SecretSnapshot) -> None:
        with self._secret_lock:
            self._secret = secret

    def _mark_notified(self, secret: SecretSnapshot) -> bool:
        """Record secret as delivered to listeners. Returns False if it already was."""
        with self._secret_lock:
            if self._notified == secret:
                return False
            self._notified = secret
            return True
