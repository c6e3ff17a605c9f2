"""
API Module - Black Box Interface

Purpose: HTTP login boundary
Interface: create_login_router()
Hidden: Header parsing, error-to-status mapping

The API module only orchestrates - it contains no business logic.
All logic is delegated to the auth module.
"""

from .login import create_login_router
from .models import AlertType, LoginResponse, TokenRefreshRequest

__all__ = ["AlertType", "LoginResponse", "TokenRefreshRequest", "create_login_router"]
