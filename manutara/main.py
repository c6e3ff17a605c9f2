#!/usr/bin/env python3
"""
Manutara - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Builds the authentication stack
3. Supervises the secret synchronizer
4. Runs the login API

All business logic is in the modules, following black box principles.
"""

import logging
import threading
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from manutara import __version__
from manutara.config.provider import ConfigProvider, EnvConfigProvider
from manutara.logging_config import configure_logging
from manutara.modules.api import create_login_router
from manutara.modules.auth import AuthFactory, AuthStack
from manutara.modules.kube import KubernetesClient

logger = logging.getLogger(__name__)


class SynchronizerSupervisor:
    """
    Watches the synchronizer error channel and restarts it after failures.

    The synchronizer never heals itself; every escalated error (or an
    unexpected close) is logged and followed by a fresh synchronizer after
    restart_delay seconds.
    """

    def __init__(self, stack: AuthStack, restart_delay: float):
        self.stack = stack
        self.restart_delay = restart_delay
        self._stopped = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self.stack.synchronizer is None:
            return
        self._thread = threading.Thread(target=self._run, daemon=True, name="secret-sync-supervisor")
        self._thread.start()

    def stop(self) -> None:
        self._stopped.set()

    def _run(self) -> None:
        while not self._stopped.is_set():
            synchronizer = self.stack.synchronizer
            error = synchronizer.errors.get()
            if self._stopped.is_set():
                return

            if error is not None:
                logger.error(f"Secret synchronizer {synchronizer.name()} reported: {error}")
            else:
                logger.warning(f"Secret synchronizer {synchronizer.name()} stopped unexpectedly")

            if self._stopped.wait(self.restart_delay):
                return
            try:
                self.stack.restart_synchronizer()
            except Exception as e:
                logger.error(f"Failed to restart secret synchronizer: {e}")
                return


def create_app(
    config_provider: Optional[ConfigProvider] = None,
    stack: Optional[AuthStack] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        config_provider: Configuration provider (environment by default)
        stack: Prebuilt authentication stack; built from config when omitted
    """
    config_provider = config_provider or EnvConfigProvider()
    state = {"stack": stack}

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting Manutara credential service...")

        client = None
        if state["stack"] is None:
            client = KubernetesClient(config_provider.get_kubernetes_config())
            state["stack"] = AuthFactory.build(config_provider, client)
            logger.info("Authentication stack initialized via factory")

        auth_stack: AuthStack = state["stack"]
        auth_stack.start()
        supervisor = SynchronizerSupervisor(
            auth_stack, restart_delay=config_provider.get_sync_config().interval_seconds
        )
        supervisor.start()

        logger.info("Manutara credential service started successfully")

        yield

        logger.info("Shutting down Manutara credential service...")
        supervisor.stop()
        auth_stack.stop()
        if client is not None:
            client.close()
        logger.info("Manutara credential service shutdown complete")

    app = FastAPI(
        title="Manutara Credential Service",
        version=__version__,
        lifespan=lifespan,
    )

    def get_auth_manager():
        return state["stack"].auth_manager if state["stack"] else None

    app.include_router(create_login_router(get_auth_manager))

    @app.get("/healthz")
    async def healthz():
        auth_stack = state["stack"]
        synchronizer = auth_stack.synchronizer if auth_stack else None
        return {
            "status": "ok" if auth_stack else "starting",
            "version": __version__,
            "synchronizer": synchronizer.state.value if synchronizer else None,
        }

    return app


def main() -> None:
    config_provider = EnvConfigProvider()
    api_config = config_provider.get_api_config()
    configure_logging(api_config.log_level, api_config.sync_log_level)

    uvicorn.run(
        create_app(config_provider),
        host=api_config.host,
        port=api_config.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
