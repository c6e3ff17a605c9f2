"""
Tests for the authentication factory and synchronizer supervision.
"""

import threading
import time

from conftest import FakeSecretStore, StubAccessChecker, public_numbers_of, secret_with_key
from manutara.config.provider import KubernetesConfig, SyncConfig, TokenConfig
from manutara.main import SynchronizerSupervisor
from manutara.modules.auth import AuthFactory, AuthInfo, LoginSpec
from manutara.modules.kube.errors import StatusError
from manutara.modules.sync import EventType, SyncState


class StaticConfigProvider:
    """Config provider returning fixed values."""

    def __init__(self, ttl=900, sync_enabled=True):
        self.ttl = ttl
        self.sync_enabled = sync_enabled

    def get_token_config(self):
        return TokenConfig(ttl_seconds=self.ttl)

    def get_sync_config(self):
        return SyncConfig(namespace="test", name="test-key-holder", interval_seconds=3600,
                          enabled=self.sync_enabled)

    def get_kubernetes_config(self):
        return KubernetesConfig(api_url="https://k8s.test", ca_path=None, token_path=None)

    def get_api_config(self):
        raise NotImplementedError


class FakeClusterClient(FakeSecretStore):
    """Cluster client stand-in providing both capabilities."""

    def __init__(self, secret=None):
        super().__init__(secret)
        self.access_checks = []

    def has_access(self, auth_info) -> None:
        self.access_checks.append(auth_info)


def test_build_with_synchronized_key(rsa_pem):
    """Test the stack reuses the key stored in the secret."""
    client = FakeClusterClient(secret_with_key(rsa_pem))

    stack = AuthFactory.build(StaticConfigProvider(ttl=120), client)

    assert stack.synchronizer is not None
    assert stack.synchronizer.state == SyncState.IDLE
    assert stack.token_manager.token_ttl == 120
    assert stack.key_holder.key().public_key().public_numbers() == public_numbers_of(rsa_pem)


def test_build_without_synchronizer():
    """Test a disabled synchronizer leaves a locally generated key."""
    client = FakeClusterClient()

    stack = AuthFactory.build(StaticConfigProvider(sync_enabled=False), client)

    assert stack.synchronizer is None
    assert client.calls == 0
    response = stack.auth_manager.login(LoginSpec(token="abc"))
    assert stack.auth_manager.decrypt(response.jwe_token) == AuthInfo(token="abc")


def test_restart_synchronizer_rebinds_key_holder(rsa_pem, other_rsa_pem):
    """Test a restarted synchronizer keeps feeding the same key holder."""
    store = FakeSecretStore(secret_with_key(rsa_pem))
    stack = AuthFactory.build_for_testing(StubAccessChecker(), store=store)
    first = stack.synchronizer

    store.secret = secret_with_key(other_rsa_pem, version="2")
    expected = public_numbers_of(other_rsa_pem)
    second = stack.restart_synchronizer()
    try:
        for _ in range(500):
            if stack.key_holder.key().public_key().public_numbers() == expected:
                break
            time.sleep(0.01)
    finally:
        stack.stop()
        second.join(timeout=5)

    assert first.state == SyncState.STOPPED
    assert stack.synchronizer is second
    assert stack.key_holder.key().public_key().public_numbers() == public_numbers_of(other_rsa_pem)


def test_supervisor_restarts_failed_synchronizer(rsa_pem):
    """Test an escalated error is followed by a fresh synchronizer."""
    store = FakeSecretStore(secret_with_key(rsa_pem))
    stack = AuthFactory.build_for_testing(StubAccessChecker(), store=store)
    first = stack.synchronizer
    supervisor = SynchronizerSupervisor(stack, restart_delay=0.01)

    store.error = StatusError(500, "InternalError")
    stack.start()
    supervisor.start()
    try:
        for _ in range(500):
            if stack.synchronizer is not first:
                break
            time.sleep(0.01)
        assert stack.synchronizer is not first
        assert first.state == SyncState.STOPPED
    finally:
        supervisor.stop()
        stack.stop()


def test_added_listener_fires_after_factory_refresh(rsa_pem):
    """Test the initial refresh during build does not hide the first poll from listeners."""
    store = FakeSecretStore(secret_with_key(rsa_pem))
    stack = AuthFactory.build_for_testing(StubAccessChecker(), store=store)
    added = []
    delivered = threading.Event()

    def listener(event):
        added.append(event)
        delivered.set()

    stack.synchronizer.register_action_handler(EventType.ADDED, listener)
    stack.start()
    try:
        assert delivered.wait(timeout=5)
    finally:
        stack.stop()
        stack.synchronizer.join(timeout=5)

    assert len(added) == 1
    assert added[0].payload == store.secret
