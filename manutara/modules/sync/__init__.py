"""
Sync Module - Black Box Interface

Purpose: Keep a local copy of a Kubernetes secret current
Interface: SecretSynchronizer.start(), stop(), refresh(), get(),
           register_action_handler()
Hidden: Polling loop, event channel, change detection

Emulates a watch over the secret by polling it, so it works without a
push channel from the API server. Listeners subscribe per event type.
"""

from .errors import SynchronizationError, SynchronizationFetchError, WatchTerminatedError
from .synchronizer import SECRET_SYNC_PERIOD, SecretStore, SecretSynchronizer, SyncState
from .types import EventType, SecretSnapshot, WatchEvent
from .watcher import PollWatcher

__all__ = [
    "EventType",
    "PollWatcher",
    "SECRET_SYNC_PERIOD",
    "SecretSnapshot",
    "SecretStore",
    "SecretSynchronizer",
    "SyncState",
    "SynchronizationError",
    "SynchronizationFetchError",
    "WatchEvent",
    "WatchTerminatedError",
]
