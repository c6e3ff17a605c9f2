"""
JWE token manager.

A token is a compact JWE whose payload is

    {"authInfo": {...}, "iat": <issued at, unix seconds>}

Only the issue time is stored. Expiry is evaluated on every read as
iat + TTL, so changing the TTL re-scopes every outstanding token.
"""

import json
import logging
import threading
import time
from datetime import timedelta
from typing import Callable, Tuple, Union

from jose import jwe
from jose.exceptions import JOSEError
from pydantic import ValidationError

from ..errors import (
    TokenDecryptionError,
    TokenEncodingError,
    TokenEncryptionError,
    TokenExpiredError,
)
from ..interfaces import KeyHolder
from ..types import DEFAULT_TOKEN_TTL, AuthInfo

logger = logging.getLogger(__name__)

AUTH_INFO_CLAIM = "authInfo"
ISSUED_AT_CLAIM = "iat"


class JWETokenManager:
    """Generates, decrypts and refreshes JWE tokens carrying an AuthInfo."""

    def __init__(
        self,
        key_holder: KeyHolder,
        token_ttl: float = DEFAULT_TOKEN_TTL,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize token manager.

        Args:
            key_holder: Source of the encryption key
            token_ttl: Token validity in seconds (0 disables expiry)
            clock: Returns the current time in unix seconds
        """
        self.key_holder = key_holder
        self.clock = clock
        self._ttl_lock = threading.Lock()
        self._token_ttl = 0.0
        self.set_token_ttl(token_ttl)

    @property
    def token_ttl(self) -> float:
        with self._ttl_lock:
            return self._token_ttl

    def set_token_ttl(self, ttl: Union[int, float, timedelta]) -> None:
        """Set the validity window applied to all subsequent reads."""
        if isinstance(ttl, timedelta):
            ttl = ttl.total_seconds()
        if ttl < 0:
            raise ValueError(f"token TTL must not be negative, got {ttl}")
        with self._ttl_lock:
            self._token_ttl = float(ttl)

    def generate(self, auth_info: AuthInfo) -> str:
        """
        Generate a token carrying auth_info, issued now.

        Raises:
            TokenEncodingError: If auth_info cannot be serialized
            TokenEncryptionError: If encryption fails
        """
        try:
            payload = json.dumps({
                AUTH_INFO_CLAIM: auth_info.model_dump(mode="json", exclude_none=True),
                ISSUED_AT_CLAIM: self.clock(),
            }).encode("utf-8")
        except (AttributeError, TypeError, ValueError) as e:
            raise TokenEncodingError(f"failed to serialize token payload: {e}") from e

        encrypter = self.key_holder.encrypter()
        try:
            return encrypter.encrypt(payload)
        except TokenEncryptionError:
            raise
        except Exception as e:
            raise TokenEncryptionError(f"failed to encrypt token: {e}") from e

    def decrypt(self, token: str) -> AuthInfo:
        """
        Decrypt a token and return its AuthInfo.

        Raises:
            TokenDecryptionError: If the token is malformed, tampered or foreign
            TokenExpiredError: If the token is older than the TTL
        """
        auth_info, issued_at = self._open(token)
        self._validate(issued_at)
        return auth_info

    def refresh(self, token: str) -> str:
        """
        Re-issue a still valid token with a new issue time.

        An expired token can never be refreshed.

        Raises:
            TokenDecryptionError: If the token cannot be decrypted
            TokenExpiredError: If the token is older than the TTL
        """
        auth_info = self.decrypt(token)
        return self.generate(auth_info)

    def _validate(self, issued_at: float) -> None:
        ttl = self.token_ttl
        if ttl > 0 and self.clock() - issued_at > ttl:
            raise TokenExpiredError(issued_at, ttl)

    def _open(self, token: str) -> Tuple[AuthInfo, float]:
        if not token:
            raise TokenDecryptionError("empty token")

        pem = self.key_holder.private_pem()
        try:
            plaintext = jwe.decrypt(token, pem)
        except (JOSEError, ValueError, TypeError) as e:
            raise TokenDecryptionError(f"failed to decrypt token: {e}") from e
        if plaintext is None:
            raise TokenDecryptionError("failed to decrypt token")

        try:
            payload = json.loads(plaintext)
            auth_info = AuthInfo.model_validate(payload[AUTH_INFO_CLAIM])
            issued_at = float(payload[ISSUED_AT_CLAIM])
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            raise TokenDecryptionError(f"invalid token payload: {e}") from e

        return auth_info, issued_at
