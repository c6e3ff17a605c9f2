"""
Authentication data model.

AuthInfo is the credential descriptor carried (encrypted) inside every
token. It mirrors the user section of a kubeconfig so a cluster client can
be built from it on every request.
"""

from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

# Default number of seconds that a token is valid.
DEFAULT_TOKEN_TTL = 900


class AuthInfo(BaseModel):
    """Caller credential recovered from a login request or a token."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    token: Optional[str] = Field(None, description="Bearer token accepted by the API server")
    username: Optional[str] = Field(None, description="Basic auth username")
    password: Optional[str] = Field(None, description="Basic auth password")
    impersonate: Optional[str] = Field(None, alias="as", description="User to impersonate")
    impersonate_groups: List[str] = Field(
        default_factory=list, alias="as-groups", description="Groups to impersonate"
    )


class LoginSpec(BaseModel):
    """Information extracted from a login request, required to authenticate the user."""

    token: str = Field(..., description="Bearer token for the Kubernetes cluster")


@dataclass
class AuthError:
    """
    Non-critical login failure such as 401 or 403 from the API server.

    Returned inside an AuthResponse instead of being raised.
    """
    code: int
    cause: Exception

    @property
    def message(self) -> str:
        return str(self.cause)


@dataclass
class AuthResponse:
    """
    Result of a login request.

    Holds either the generated token or a non-critical AuthError.
    """
    jwe_token: str = ""
    error: Optional[AuthError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.jwe_token)
