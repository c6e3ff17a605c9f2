"""
Authentication and token errors.

Three outcomes stay distinguishable for callers: a malformed or foreign
token (TokenDecryptionError), an expired token (TokenExpiredError) and a
backend failure (CriticalAuthError). Rejected credentials are not errors
at all; they come back as an AuthError inside the AuthResponse.
"""


class AuthenticationError(Exception):
    """Base class for all authentication module errors."""


class KeyGenerationError(AuthenticationError):
    """The encryption key pair could not be generated. Fatal at startup."""


class TokenError(AuthenticationError):
    """Base class for token lifecycle errors."""


class TokenEncodingError(TokenError):
    """The credential descriptor could not be serialized."""


class TokenEncryptionError(TokenError):
    """The serialized payload could not be encrypted."""


class TokenDecryptionError(TokenError):
    """The token is malformed, tampered with, or encrypted with another key."""


class TokenExpiredError(TokenError):
    """The token is older than the configured TTL."""

    def __init__(self, issued_at: float, ttl: float):
        self.issued_at = issued_at
        self.ttl = ttl
        super().__init__(f"token expired (issued at {issued_at:.0f}, ttl {ttl:g}s)")


class CriticalAuthError(AuthenticationError):
    """The access check failed for a reason other than rejected credentials."""

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(f"access check failed: {cause}")
