"""
Authentication manager.

Orchestrates login, decrypt and refresh requests. The outcome of the
access check is classified in one place:

    success             -> token generated
    StatusError 401/403 -> non-critical, AuthError in the response
    anything else       -> critical, CriticalAuthError raised
"""

import logging
from typing import Optional

from ..kube.errors import StatusError
from .authenticator import get_authenticator
from .errors import CriticalAuthError
from .interfaces import AccessChecker, TokenManager
from .types import AuthError, AuthInfo, AuthResponse, LoginSpec

logger = logging.getLogger(__name__)

NON_CRITICAL_STATUS_CODES = (401, 403)


def classify_error(error: Optional[BaseException]) -> Optional[AuthError]:
    """
    Split an access check failure into non-critical and critical.

    Returns:
        AuthError for rejected credentials, None when there is no error

    Raises:
        CriticalAuthError: For any other failure
    """
    if error is None:
        return None
    if isinstance(error, StatusError) and error.code in NON_CRITICAL_STATUS_CODES:
        return AuthError(code=error.code, cause=error)
    raise CriticalAuthError(error) from error


class DefaultAuthManager:
    """Default implementation of the AuthManager interface."""

    def __init__(self, access_checker: AccessChecker, token_manager: TokenManager):
        """
        Initialize with injected dependencies.

        Args:
            access_checker: Checks credentials against the cluster
            token_manager: Generates and decrypts tokens
        """
        self.access_checker = access_checker
        self.token_manager = token_manager

    def login(self, spec: LoginSpec) -> AuthResponse:
        """
        Authenticate the user described by spec.

        Returns:
            AuthResponse with either a token or a non-critical AuthError

        Raises:
            CriticalAuthError: If the access check failed for another reason
            TokenError: If the token could not be generated
        """
        auth_info = get_authenticator(spec).get_auth_info()

        auth_error = classify_error(self._health_check(auth_info))
        if auth_error is not None:
            logger.info(f"Login rejected by cluster with status {auth_error.code}")
            return AuthResponse(error=auth_error)

        token = self.token_manager.generate(auth_info)
        logger.info("Login successful, token issued")
        return AuthResponse(jwe_token=token)

    def decrypt(self, token: str) -> AuthInfo:
        return self.token_manager.decrypt(token)

    def refresh(self, token: str) -> str:
        return self.token_manager.refresh(token)

    def _health_check(self, auth_info: AuthInfo) -> Optional[BaseException]:
        try:
            self.access_checker.has_access(auth_info)
        except Exception as e:
            return e
        return None
