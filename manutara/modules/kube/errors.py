"""Status-coded failures reported by the Kubernetes API server."""
from typing import Optional


class StatusError(Exception):
    """A request the API server answered with a non-success status."""

    def __init__(self, code: int, reason: Optional[str] = None, message: Optional[str] = None):
        self.code = code
        self.reason = reason or ""
        self.message = message or f"request failed with status {code}"
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code}, reason={self.reason!r})"


class ResourceNotFoundError(StatusError):
    """The requested resource does not exist."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(404, "NotFound", message)


def is_not_found(error: BaseException) -> bool:
    return isinstance(error, StatusError) and error.code == 404
