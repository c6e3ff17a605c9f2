"""
Config Module - Black Box Interface

Purpose: Application configuration management
Interface: ConfigProvider, EnvConfigProvider
Hidden: Config sources, environment parsing

Can be replaced with different config systems (files, Consul, etcd).
"""

from .provider import (
    APIConfig,
    ConfigProvider,
    EnvConfigProvider,
    KubernetesConfig,
    SyncConfig,
    TokenConfig,
)

__all__ = [
    "APIConfig",
    "ConfigProvider",
    "EnvConfigProvider",
    "KubernetesConfig",
    "SyncConfig",
    "TokenConfig",
]
