"""
Kube Module - Black Box Interface

Purpose: Talk to the Kubernetes API server on behalf of other modules
Interface: KubernetesClient.get_secret(), KubernetesClient.has_access()
Hidden: HTTP transport, service-account credentials, response parsing

Other modules only see the capabilities ("fetch secret", "check access")
and the StatusError family, so the client can be swapped for an in-memory
fake in tests.
"""

from .errors import ResourceNotFoundError, StatusError, is_not_found
from .client import KubernetesClient

__all__ = ["KubernetesClient", "ResourceNotFoundError", "StatusError", "is_not_found"]
