"""Secret synchronizer errors."""


class SynchronizationError(Exception):
    """Base class for synchronizer errors delivered on the error channel."""


class SynchronizationFetchError(SynchronizationError):
    """The secret could not be fetched from the cluster."""

    def __init__(self, name: str, cause: BaseException):
        self.cause = cause
        super().__init__(f"{name}: failed to fetch secret: {cause}")


class WatchTerminatedError(SynchronizationError):
    """The event stream ended while the synchronizer was still running."""
