"""
Shared pytest fixtures for Manutara tests.

This module provides:
- FakeClock: controllable time source for token expiry
- StubAccessChecker: access-check capability with a configurable failure
- FakeSecretStore: in-memory secret store for the synchronizer
- RSA key fixtures (generated once per session)
"""

import threading
from typing import List, Optional

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from manutara.modules.auth.jwe import JWETokenManager, RSAKeyHolder
from manutara.modules.kube.errors import ResourceNotFoundError
from manutara.modules.sync.types import SecretSnapshot

NAMESPACE = "test"
SECRET_NAME = "test-key-holder"


class FakeClock:
    """Time source that only moves when told to."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubAccessChecker:
    """Access checker that records calls and raises a configured error."""

    def __init__(self, error: Optional[BaseException] = None):
        self.error = error
        self.calls: List = []

    def has_access(self, auth_info) -> None:
        self.calls.append(auth_info)
        if self.error is not None:
            raise self.error


class FakeSecretStore:
    """In-memory secret store; a missing secret is reported as 404."""

    def __init__(self, secret: Optional[SecretSnapshot] = None):
        self.secret = secret
        self.error: Optional[BaseException] = None
        self.calls = 0
        self._lock = threading.Lock()

    def get_secret(self, namespace: str, name: str) -> SecretSnapshot:
        with self._lock:
            self.calls += 1
        if self.error is not None:
            raise self.error
        if self.secret is None:
            raise ResourceNotFoundError(f'secrets "{name}" not found')
        return self.secret


def make_pem() -> bytes:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def secret_with_key(pem: bytes, version: str = "1") -> SecretSnapshot:
    return SecretSnapshot(
        namespace=NAMESPACE,
        name=SECRET_NAME,
        data={"priv": pem},
        resource_version=version,
    )


def public_numbers_of(pem: bytes):
    key = serialization.load_pem_private_key(pem, password=None)
    return key.public_key().public_numbers()


@pytest.fixture(scope="session")
def rsa_pem() -> bytes:
    return make_pem()


@pytest.fixture(scope="session")
def other_rsa_pem() -> bytes:
    return make_pem()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def key_holder() -> RSAKeyHolder:
    return RSAKeyHolder()


@pytest.fixture
def token_manager(key_holder, clock) -> JWETokenManager:
    return JWETokenManager(key_holder, clock=clock)


@pytest.fixture
def secret_store(rsa_pem) -> FakeSecretStore:
    return FakeSecretStore(secret_with_key(rsa_pem))
