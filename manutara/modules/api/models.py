"""
Login API data models.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class AlertType(str, Enum):
    """Severity shown by the front-end for a login response."""

    INFO = "info"
    ERROR = "error"


# Message identifiers rendered by the front-end.
NO_AUTH_TOKEN = "no_auth_token"
INVALID_AUTH_TOKEN = "invalid_auth_token"
TOKEN_EXPIRED = "token_expired"
LOGIN_SUCCESS = "login_success"
ACCESS_DENIED = "access_denied"
SERVER_ERROR = "server_error"

MESSAGES = {
    NO_AUTH_TOKEN: "No authentication token was provided",
    INVALID_AUTH_TOKEN: "The provided authentication token is invalid",
    TOKEN_EXPIRED: "The authentication token has expired, please log in again",
    LOGIN_SUCCESS: "Login successful",
    ACCESS_DENIED: "Access to the cluster was denied",
    SERVER_ERROR: "The server was unable to process the {request} request",
}


class LoginResponse(BaseModel):
    """Response body for login and token refresh requests."""

    model_config = ConfigDict(populate_by_name=True)

    alert_type: AlertType = Field(..., alias="alertType")
    alert_message: str = Field(..., alias="alertMessage")
    message_id: str = Field(..., alias="messageId")
    token: str = Field("", description="Encrypted token, empty on failure")


class TokenRefreshRequest(BaseModel):
    """Token refresh request."""

    model_config = ConfigDict(populate_by_name=True)

    jwe_token: str = Field(..., alias="jweToken", min_length=1)
