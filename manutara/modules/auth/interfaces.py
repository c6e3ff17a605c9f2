"""Authentication interfaces following Black Box Design principles."""
from typing import Protocol

from cryptography.hazmat.primitives.asymmetric import rsa

from .types import AuthInfo, AuthResponse, LoginSpec


class Encrypter(Protocol):
    """Encryption capability bound to a public key."""

    def encrypt(self, plaintext: bytes) -> str:
        """Encrypt plaintext into a compact JWE string."""
        ...


class KeyHolder(Protocol):
    """Owns the key pair used for token encryption and decryption."""

    def encrypter(self) -> Encrypter:
        """Returns an encrypter bound to the current public key."""
        ...

    def key(self) -> rsa.RSAPrivateKey:
        """Returns the current private key."""
        ...

    def private_pem(self) -> bytes:
        """Returns the current private key as PEM."""
        ...

    def refresh(self) -> None:
        """Forces a refresh of the key from the synchronized secret."""
        ...


class Authenticator(Protocol):
    """Authentication method supported by the login endpoint."""

    def get_auth_info(self) -> AuthInfo:
        """
        Build the credential descriptor for this login method.

        Returns:
            AuthInfo usable for cluster client creation
        """
        ...


class AccessChecker(Protocol):
    """Capability that checks a credential against the cluster."""

    def has_access(self, auth_info: AuthInfo) -> None:
        """
        Check access for a credential.

        Raises:
            StatusError: With the status code reported by the cluster
            Exception: Any other failure (network, malformed request)
        """
        ...


class TokenManager(Protocol):
    """Generates and decrypts tokens carrying an AuthInfo payload."""

    def generate(self, auth_info: AuthInfo) -> str:
        ...

    def decrypt(self, token: str) -> AuthInfo:
        ...

    def refresh(self, token: str) -> str:
        ...

    def set_token_ttl(self, ttl: float) -> None:
        ...


class AuthManager(Protocol):
    """User authentication management."""

    def login(self, spec: LoginSpec) -> AuthResponse:
        ...

    def decrypt(self, token: str) -> AuthInfo:
        ...

    def refresh(self, token: str) -> str:
        ...
