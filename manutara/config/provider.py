"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass
from typing import Optional, Protocol

DEFAULT_TOKEN_TTL = 900
DEFAULT_SYNC_INTERVAL = 300
SERVICE_ACCOUNT_DIR = "/var/run/secrets/kubernetes.io/serviceaccount"


@dataclass
class TokenConfig:
    """Token lifecycle configuration."""
    ttl_seconds: int = DEFAULT_TOKEN_TTL

    @property
    def expires(self) -> bool:
        """A TTL of zero disables token expiry."""
        return self.ttl_seconds > 0


@dataclass
class SyncConfig:
    """Secret synchronizer configuration."""
    namespace: str
    name: str
    interval_seconds: float = DEFAULT_SYNC_INTERVAL
    enabled: bool = True


@dataclass
class KubernetesConfig:
    """Cluster API configuration."""
    api_url: str
    ca_path: Optional[str]
    token_path: Optional[str]
    verify_ssl: bool = True
    timeout_seconds: float = 10.0


@dataclass
class APIConfig:
    """API configuration."""
    port: int
    host: str
    debug: bool
    log_level: str
    sync_log_level: Optional[str] = None


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_token_config(self) -> TokenConfig:
        """Get token configuration."""
        ...

    def get_sync_config(self) -> SyncConfig:
        """Get secret synchronizer configuration."""
        ...

    def get_kubernetes_config(self) -> KubernetesConfig:
        """Get cluster API configuration."""
        ...

    def get_api_config(self) -> APIConfig:
        """Get API configuration."""
        ...


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_number(name: str, default: str, cast=int):
    raw = os.getenv(name, default)
    try:
        value = cast(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {raw!r}")
    return value


def _existing(path: str) -> Optional[str]:
    return path if os.path.exists(path) else None


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_token_config(self) -> TokenConfig:
        """Get token configuration from environment variables."""
        return TokenConfig(ttl_seconds=_env_number("TOKEN_TTL", str(DEFAULT_TOKEN_TTL)))

    def get_sync_config(self) -> SyncConfig:
        """Get secret synchronizer configuration from environment variables."""
        interval = _env_number("SECRET_SYNC_INTERVAL", str(DEFAULT_SYNC_INTERVAL), cast=float)
        if interval == 0:
            raise ValueError("SECRET_SYNC_INTERVAL must be greater than zero")

        return SyncConfig(
            namespace=os.getenv("SECRET_NAMESPACE", "manutara-system"),
            name=os.getenv("SECRET_NAME", "manutara-key-holder"),
            interval_seconds=interval,
            enabled=_env_bool("SECRET_SYNC_ENABLED", "true"),
        )

    def get_kubernetes_config(self) -> KubernetesConfig:
        """Get cluster API configuration from environment variables."""
        return KubernetesConfig(
            api_url=os.getenv("KUBERNETES_API_URL", "https://kubernetes.default.svc").rstrip("/"),
            ca_path=os.getenv("KUBERNETES_CA_PATH") or _existing(f"{SERVICE_ACCOUNT_DIR}/ca.crt"),
            token_path=os.getenv("KUBERNETES_TOKEN_PATH") or _existing(f"{SERVICE_ACCOUNT_DIR}/token"),
            verify_ssl=_env_bool("KUBERNETES_VERIFY_SSL", "true"),
            timeout_seconds=_env_number("KUBERNETES_TIMEOUT", "10", cast=float),
        )

    def get_api_config(self) -> APIConfig:
        """Get API configuration from environment variables."""
        return APIConfig(
            port=_env_number("API_PORT", "8080"),
            host=os.getenv("API_HOST", "0.0.0.0"),
            debug=_env_bool("API_DEBUG", "false"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            sync_log_level=(os.getenv("SYNC_LOG_LEVEL") or "").upper() or None,
        )
