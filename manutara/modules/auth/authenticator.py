"""Authenticators turning a LoginSpec into an AuthInfo."""
from .interfaces import Authenticator
from .types import AuthInfo, LoginSpec


class TokenAuthenticator:
    """Bearer token authentication: any token accepted by the API server."""

    def __init__(self, spec: LoginSpec):
        self.token = spec.token

    def get_auth_info(self) -> AuthInfo:
        return AuthInfo(token=self.token)


def get_authenticator(spec: LoginSpec) -> Authenticator:
    """Returns the authenticator matching the provided LoginSpec."""
    return TokenAuthenticator(spec)
