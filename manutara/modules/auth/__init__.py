"""
Authentication Module - Black Box Interface

Purpose: Log users in against the cluster and manage their tokens
Interface: login(), decrypt(), refresh()
Hidden: JWE encryption, key management, access-check classification

Tokens are opaque encrypted strings carrying the caller's AuthInfo. The
module can be replaced with any other token scheme without affecting the
HTTP layer.
"""

from .errors import (
    AuthenticationError,
    CriticalAuthError,
    KeyGenerationError,
    TokenDecryptionError,
    TokenEncodingError,
    TokenEncryptionError,
    TokenError,
    TokenExpiredError,
)
from .factory import AuthFactory, AuthStack
from .manager import DefaultAuthManager
from .types import DEFAULT_TOKEN_TTL, AuthError, AuthInfo, AuthResponse, LoginSpec

__all__ = [
    "DEFAULT_TOKEN_TTL",
    "AuthError",
    "AuthFactory",
    "AuthInfo",
    "AuthResponse",
    "AuthStack",
    "AuthenticationError",
    "CriticalAuthError",
    "DefaultAuthManager",
    "KeyGenerationError",
    "LoginSpec",
    "TokenDecryptionError",
    "TokenEncodingError",
    "TokenEncryptionError",
    "TokenError",
    "TokenExpiredError",
]
