"""
RSA key holder.

Owns the key pair used to encrypt and decrypt tokens. The pair is kept as
a single immutable KeyPair and replaced wholesale under a lock, so readers
always see either the old or the new key, never a mix of both.

When bound to a secret synchronizer the holder loads the PEM encoded
private key stored in the secret and follows its updates. Until a key has
been synchronized it serves a locally generated one.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Optional

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import jwe
from jose.constants import ALGORITHMS
from jose.exceptions import JOSEError

from ...sync.types import EventType, SecretSnapshot, WatchEvent
from ..errors import KeyGenerationError, TokenEncryptionError

logger = logging.getLogger(__name__)

KEY_SIZE = 2048
PUBLIC_EXPONENT = 65537

# Secret data keys holding the PEM encoded key pair.
PRIVATE_KEY_FIELD = "priv"
PUBLIC_KEY_FIELD = "pub"


@dataclass(frozen=True)
class KeyPair:
    """Immutable RSA key pair with its PEM encodings."""
    private_key: rsa.RSAPrivateKey
    private_pem: bytes = field(repr=False)
    public_pem: bytes

    @classmethod
    def from_private_key(cls, private_key: rsa.RSAPrivateKey) -> "KeyPair":
        private_pem = private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
        public_pem = private_key.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        return cls(private_key=private_key, private_pem=private_pem, public_pem=public_pem)

    @classmethod
    def from_pem(cls, pem: bytes) -> "KeyPair":
        private_key = serialization.load_pem_private_key(pem, password=None)
        if not isinstance(private_key, rsa.RSAPrivateKey):
            raise ValueError(f"expected an RSA private key, got {type(private_key).__name__}")
        return cls.from_private_key(private_key)

    @classmethod
    def generate(cls) -> "KeyPair":
        try:
            private_key = rsa.generate_private_key(public_exponent=PUBLIC_EXPONENT, key_size=KEY_SIZE)
        except Exception as e:
            raise KeyGenerationError(f"failed to generate {KEY_SIZE}-bit RSA key: {e}") from e
        return cls.from_private_key(private_key)


class JWEEncrypter:
    """Encrypts payloads for the holder of one public key."""

    def __init__(self, public_pem: bytes):
        self.public_pem = public_pem

    def encrypt(self, plaintext: bytes) -> str:
        try:
            token = jwe.encrypt(
                plaintext,
                self.public_pem,
                encryption=ALGORITHMS.A256GCM,
                algorithm=ALGORITHMS.RSA_OAEP_256,
            )
        except (JOSEError, ValueError, TypeError) as e:
            raise TokenEncryptionError(f"failed to encrypt token: {e}") from e
        return token.decode("ascii")


class RSAKeyHolder:
    """
    Key holder backed by a 2048-bit RSA key.

    The lock only guards the reference swap; encryption and decryption run
    outside of it.
    """

    def __init__(self, synchronizer=None):
        """
        Initialize the key holder.

        Args:
            synchronizer: Optional secret synchronizer to follow

        Raises:
            KeyGenerationError: If no key was synchronized and generation fails
        """
        self._lock = threading.Lock()
        self._pair: Optional[KeyPair] = None
        self._synchronizer = None

        if synchronizer is not None:
            self.attach(synchronizer)

        if self._pair is None:
            self._pair = KeyPair.generate()
            logger.info(f"Generated new {KEY_SIZE}-bit encryption key")

    def attach(self, synchronizer) -> None:
        """
        Follow a secret synchronizer.

        Registers for Added/Modified/Deleted events and loads the key from
        the synchronizer's current snapshot, if any.
        """
        self._synchronizer = synchronizer
        synchronizer.register_action_handler(EventType.ADDED, self._on_secret_event)
        synchronizer.register_action_handler(EventType.MODIFIED, self._on_secret_event)
        synchronizer.register_action_handler(EventType.DELETED, self._on_secret_deleted)
        self._update(synchronizer.get())

    def encrypter(self) -> JWEEncrypter:
        """Returns an encrypter bound to the current public key."""
        return JWEEncrypter(self.key_pair().public_pem)

    def key(self) -> rsa.RSAPrivateKey:
        """Returns the current private key."""
        return self.key_pair().private_key

    def private_pem(self) -> bytes:
        """Returns the current private key as PKCS8 PEM."""
        return self.key_pair().private_pem

    def key_pair(self) -> KeyPair:
        with self._lock:
            return self._pair

    def refresh(self) -> None:
        """Synchronously pull the latest secret and swap the key if it changed."""
        if self._synchronizer is None:
            return
        self._synchronizer.refresh()
        self._update(self._synchronizer.get())

    def _on_secret_event(self, event: WatchEvent) -> None:
        self._update(event.payload)

    def _on_secret_deleted(self, event: WatchEvent) -> None:
        logger.warning("Encryption key secret was deleted, keeping current key")

    def _update(self, snapshot: Optional[SecretSnapshot]) -> None:
        if snapshot is None:
            return

        pem = snapshot.data.get(PRIVATE_KEY_FIELD)
        if not pem:
            logger.warning(
                f"Secret {snapshot.namespace}/{snapshot.name} has no '{PRIVATE_KEY_FIELD}' key, "
                "keeping current key"
            )
            return

        current = self.key_pair()
        if current is not None and current.private_pem == pem:
            return

        try:
            pair = KeyPair.from_pem(pem)
        except (ValueError, TypeError) as e:
            logger.error(f"Invalid key material in secret {snapshot.namespace}/{snapshot.name}: {e}")
            return

        with self._lock:
            self._pair = pair
        logger.info(f"Encryption key loaded from secret {snapshot.namespace}/{snapshot.name}")
