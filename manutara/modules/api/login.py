"""
Login endpoints.

Maps auth module outcomes to HTTP responses:

- missing or malformed bearer header    -> 401
- credentials rejected by the cluster   -> status reported by the cluster
- expired / undecryptable token         -> 401 with distinct message ids
- critical failures                     -> 500
"""

import logging
from typing import Callable, Optional

from fastapi import APIRouter, Header
from fastapi.responses import JSONResponse

from ..auth import (
    CriticalAuthError,
    LoginSpec,
    TokenDecryptionError,
    TokenError,
    TokenExpiredError,
)
from ..auth.interfaces import AuthManager
from .models import (
    ACCESS_DENIED,
    INVALID_AUTH_TOKEN,
    LOGIN_SUCCESS,
    MESSAGES,
    NO_AUTH_TOKEN,
    SERVER_ERROR,
    TOKEN_EXPIRED,
    AlertType,
    LoginResponse,
    TokenRefreshRequest,
)

logger = logging.getLogger(__name__)


def _respond(status_code: int, message_id: str, token: str = "", **data) -> JSONResponse:
    body = LoginResponse(
        alert_type=AlertType.INFO if status_code == 200 else AlertType.ERROR,
        alert_message=MESSAGES[message_id].format(**data),
        message_id=message_id,
        token=token,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True))


def parse_bearer(authorization: Optional[str]) -> Optional[str]:
    """
    Extract the token from an Authorization header.

    Returns:
        The token, or None if the header is not "Bearer <token>"
    """
    parts = authorization.split(" ") if authorization else []
    if len(parts) < 2 or parts[0] != "Bearer" or not parts[1]:
        return None
    return parts[1]


def create_login_router(get_auth_manager: Callable[[], Optional[AuthManager]]) -> APIRouter:
    """
    Create login router.

    Args:
        get_auth_manager: Returns the auth manager, or None while starting up

    Returns:
        FastAPI router with login endpoints
    """
    router = APIRouter(prefix="/api/v1", tags=["login"])

    def auth_manager() -> Optional[AuthManager]:
        manager = get_auth_manager()
        if manager is None:
            logger.error("Login requested before the auth manager was initialized")
        return manager

    @router.post("/login", response_model=LoginResponse)
    def login(authorization: Optional[str] = Header(None)):
        """Exchange a cluster bearer token for an encrypted token."""
        if not authorization:
            return _respond(401, NO_AUTH_TOKEN)
        bearer = parse_bearer(authorization)
        if bearer is None:
            return _respond(401, INVALID_AUTH_TOKEN)

        manager = auth_manager()
        if manager is None:
            return _respond(503, SERVER_ERROR, request="login")

        try:
            response = manager.login(LoginSpec(token=bearer))
        except (CriticalAuthError, TokenError) as e:
            logger.error(f"Login failed: {e}")
            return _respond(500, SERVER_ERROR, request="login")

        if response.error is not None:
            return _respond(response.error.code, ACCESS_DENIED)
        if not response.jwe_token:
            logger.error("Login service failed to return a valid token")
            return _respond(500, SERVER_ERROR, request="login")

        return _respond(200, LOGIN_SUCCESS, token=response.jwe_token)

    @router.post("/token/refresh", response_model=LoginResponse)
    def refresh(spec: TokenRefreshRequest):
        """Re-issue a token that has not expired yet."""
        manager = auth_manager()
        if manager is None:
            return _respond(503, SERVER_ERROR, request="refresh")

        try:
            token = manager.refresh(spec.jwe_token)
        except TokenExpiredError:
            return _respond(401, TOKEN_EXPIRED)
        except TokenDecryptionError:
            return _respond(401, INVALID_AUTH_TOKEN)
        except TokenError as e:
            logger.error(f"Token refresh failed: {e}")
            return _respond(500, SERVER_ERROR, request="refresh")

        return _respond(200, LOGIN_SUCCESS, token=token)

    return router
