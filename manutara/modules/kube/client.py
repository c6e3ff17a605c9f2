"""
Kubernetes API client.

Provides the two cluster capabilities the credential service consumes:

- reading the secret that holds the token encryption key (using the
  service's own service-account token)
- checking whether a caller's credential is accepted by the API server
  (using the caller's bearer token)
"""

import base64
import binascii
import logging
import ssl
from typing import Optional, Union

import httpx

from ...config.provider import KubernetesConfig
from ..sync.types import SecretSnapshot
from .errors import ResourceNotFoundError, StatusError

logger = logging.getLogger(__name__)

# Any authenticated identity may read the discovery document, so a
# successful request proves the credential itself is accepted.
ACCESS_CHECK_PATH = "/api"


class KubernetesClient:
    """Thin synchronous client for the Kubernetes REST API."""

    def __init__(self, config: KubernetesConfig, transport: Optional[httpx.BaseTransport] = None):
        """
        Initialize the client.

        Args:
            config: Cluster API configuration
            transport: Optional httpx transport (used by tests)
        """
        self.config = config
        verify: Union[bool, ssl.SSLContext] = config.verify_ssl
        if config.verify_ssl and config.ca_path:
            verify = ssl.create_default_context(cafile=config.ca_path)
        self._http = httpx.Client(
            base_url=config.api_url,
            verify=verify,
            timeout=config.timeout_seconds,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def _service_account_token(self) -> Optional[str]:
        if not self.config.token_path:
            return None
        with open(self.config.token_path, "r") as f:
            return f.read().strip()

    @staticmethod
    def _headers(token: Optional[str]) -> dict:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.is_success:
            return

        reason, message = None, None
        try:
            body = response.json()
            reason = body.get("reason")
            message = body.get("message")
        except ValueError:
            pass

        if response.status_code == 404:
            raise ResourceNotFoundError(message)
        raise StatusError(response.status_code, reason, message)

    def get_secret(self, namespace: str, name: str) -> SecretSnapshot:
        """
        Fetch a secret by namespace and name.

        Raises:
            ResourceNotFoundError: If the secret does not exist
            StatusError: If the API server rejects the request
            httpx.HTTPError: On transport failures
        """
        response = self._http.get(
            f"/api/v1/namespaces/{namespace}/secrets/{name}",
            headers=self._headers(self._service_account_token()),
        )
        self._raise_for_status(response)

        body = response.json()
        metadata = body.get("metadata", {})
        data = {}
        for key, value in (body.get("data") or {}).items():
            try:
                data[key] = base64.b64decode(value)
            except (binascii.Error, ValueError):
                logger.warning(f"Secret {namespace}/{name} has undecodable key '{key}', skipping")

        return SecretSnapshot(
            namespace=metadata.get("namespace", namespace),
            name=metadata.get("name", name),
            resource_version=metadata.get("resourceVersion"),
            data=data,
        )

    def has_access(self, auth_info) -> None:
        """
        Check that the API server accepts the given credential.

        Returns None on success.

        Raises:
            StatusError: With code 401/403 when the credential is rejected
            httpx.HTTPError: On transport failures
        """
        headers = self._headers(auth_info.token)
        if auth_info.impersonate:
            headers["Impersonate-User"] = auth_info.impersonate

        auth = None
        if not auth_info.token and auth_info.username:
            auth = (auth_info.username, auth_info.password or "")

        response = self._http.get(ACCESS_CHECK_PATH, headers=headers, auth=auth)
        self._raise_for_status(response)
