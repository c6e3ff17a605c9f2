"""
Authentication Factory following Black Box Design principles.

This factory:
- Constructs the authentication stack based on configuration
- Wires dependencies together (synchronizer -> key holder -> token
  manager -> auth manager)
- Returns the assembled AuthStack
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from ...config.provider import ConfigProvider, SyncConfig
from ..sync import SecretStore, SecretSynchronizer
from .interfaces import AccessChecker
from .jwe import JWETokenManager, RSAKeyHolder
from .manager import DefaultAuthManager
from .types import DEFAULT_TOKEN_TTL

logger = logging.getLogger(__name__)


@dataclass
class AuthStack:
    """Assembled authentication components."""
    auth_manager: DefaultAuthManager
    token_manager: JWETokenManager
    key_holder: RSAKeyHolder
    synchronizer: Optional[SecretSynchronizer] = None
    synchronizer_factory: Optional[Callable[[], SecretSynchronizer]] = None

    def start(self) -> None:
        if self.synchronizer is not None:
            self.synchronizer.start()

    def stop(self) -> None:
        if self.synchronizer is not None:
            self.synchronizer.stop()

    def restart_synchronizer(self) -> SecretSynchronizer:
        """
        Replace the synchronizer with a fresh one bound to the same key holder.

        Raises:
            RuntimeError: If the stack was built without a synchronizer
        """
        if self.synchronizer_factory is None:
            raise RuntimeError("authentication stack has no secret synchronizer")
        if self.synchronizer is not None:
            self.synchronizer.stop()

        synchronizer = self.synchronizer_factory()
        self.key_holder.attach(synchronizer)
        self.synchronizer = synchronizer
        synchronizer.start()
        logger.info(f"Secret synchronizer {synchronizer.name()} restarted")
        return synchronizer


class AuthFactory:
    """
    Factory for building the authentication stack.

    This is the composition root that creates all auth components and
    wires them together via dependency injection.
    """

    @staticmethod
    def build(config_provider: ConfigProvider, client) -> AuthStack:
        """
        Build the complete authentication stack.

        Args:
            config_provider: Configuration provider
            client: Cluster client providing get_secret() and has_access()

        Returns:
            AuthStack (synchronizer not started yet)
        """
        token_config = config_provider.get_token_config()
        sync_config = config_provider.get_sync_config()

        synchronizer_factory = None
        if sync_config.enabled:
            logger.info(
                f"Building authentication stack with key synchronized from secret "
                f"{sync_config.namespace}/{sync_config.name}"
            )
            synchronizer_factory = _synchronizer_factory(client, sync_config)
        else:
            logger.info("Building authentication stack with a local key only")

        return AuthFactory._assemble(
            access_checker=client,
            synchronizer_factory=synchronizer_factory,
            token_ttl=token_config.ttl_seconds,
        )

    @staticmethod
    def build_for_testing(
        access_checker: AccessChecker,
        store: Optional[SecretStore] = None,
        sync_config: Optional[SyncConfig] = None,
        token_ttl: float = DEFAULT_TOKEN_TTL,
    ) -> AuthStack:
        """
        Build auth stack from in-memory collaborators.

        Args:
            access_checker: Stub access checker
            store: Optional stub secret store; no synchronizer without it
            sync_config: Synchronizer settings used with store
            token_ttl: Token TTL in seconds
        """
        synchronizer_factory = None
        if store is not None:
            sync_config = sync_config or SyncConfig(namespace="test", name="test-key-holder")
            synchronizer_factory = _synchronizer_factory(store, sync_config)

        return AuthFactory._assemble(access_checker, synchronizer_factory, token_ttl)

    @staticmethod
    def _assemble(
        access_checker: AccessChecker,
        synchronizer_factory: Optional[Callable[[], SecretSynchronizer]],
        token_ttl: float,
    ) -> AuthStack:
        synchronizer = None
        if synchronizer_factory is not None:
            synchronizer = synchronizer_factory()
            # Pick up an existing key before falling back to generating one.
            synchronizer.refresh()

        key_holder = RSAKeyHolder(synchronizer)
        token_manager = JWETokenManager(key_holder, token_ttl=token_ttl)
        auth_manager = DefaultAuthManager(access_checker, token_manager)

        return AuthStack(
            auth_manager=auth_manager,
            token_manager=token_manager,
            key_holder=key_holder,
            synchronizer=synchronizer,
            synchronizer_factory=synchronizer_factory,
        )


def _synchronizer_factory(store: SecretStore, config: SyncConfig) -> Callable[[], SecretSynchronizer]:
    def create() -> SecretSynchronizer:
        return SecretSynchronizer(
            store,
            namespace=config.namespace,
            name=config.name,
            interval=config.interval_seconds,
        )
    return create
