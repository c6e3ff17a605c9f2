"""Watch event and secret snapshot types."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class EventType(str, Enum):
    """Kind of change reported by a watch."""

    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"
    ERROR = "ERROR"


@dataclass(frozen=True)
class SecretSnapshot:
    """
    Last observed state of a secret.

    Compared structurally to detect changes between polls.
    """
    namespace: str
    name: str
    data: Dict[str, bytes] = field(default_factory=dict)
    resource_version: Optional[str] = None


@dataclass(frozen=True)
class WatchEvent:
    """A single change notification."""
    type: EventType
    payload: Any = None
