"""
Kubernetes utilities for the secret generator operator.

This module provides Kubernetes client configuration and the fetch/persist
operations used by the reconciler. Secrets are read into decoded
SecretResource objects and written back as full replacements.
"""

import asyncio
import logging

from kubernetes import client, config
from kubernetes.client.rest import ApiException

from ..errors import KubernetesAPIError
from ..models import SecretResource

logger = logging.getLogger(__name__)


def get_kubernetes_client() -> client.ApiClient:
    """
    Get configured Kubernetes API client.

    Tries in-cluster configuration first and falls back to the local
    kubeconfig for development.

    Returns:
        Configured Kubernetes API client
    """
    try:
        # Try in-cluster config first (when running in a pod)
        config.load_incluster_config()
        logger.debug("Loaded in-cluster Kubernetes configuration")
    except config.ConfigException:
        try:
            # Fall back to local kubeconfig (for development)
            config.load_kube_config()
            logger.debug("Loaded kubeconfig from local environment")
        except config.ConfigException as e:
            logger.error(f"Failed to load Kubernetes configuration: {e}")
            raise

    return client.ApiClient()


def _is_retryable(e: ApiException) -> bool:
    # Conflicts resolve on the next pass against a fresh read
    status = getattr(e, "status", None)
    return status is None or status == 409 or status == 429 or status >= 500


class SecretClient:
    """Reads and replaces Secrets through the CoreV1 API."""

    def __init__(self, k8s_client: client.ApiClient | None = None):
        """
        Initialize secret client.

        Args:
            k8s_client: Optional Kubernetes API client
        """
        self.k8s_client = k8s_client
        self._v1: client.CoreV1Api | None = None

    @property
    def v1(self) -> client.CoreV1Api:
        """Get CoreV1Api client."""
        if self._v1 is None:
            if self.k8s_client:
                self._v1 = client.CoreV1Api(self.k8s_client)
            else:
                self._v1 = client.CoreV1Api()
        return self._v1

    async def get_secret(self, name: str, namespace: str) -> SecretResource | None:
        """
        Retrieve a secret.

        Args:
            name: Secret name
            namespace: Secret namespace

        Returns:
            Decoded secret if found, None if not found

        Raises:
            KubernetesAPIError: If read fails for reasons other than 404
        """
        try:
            secret = await asyncio.to_thread(
                self.v1.read_namespaced_secret, name=name, namespace=namespace
            )
        except ApiException as e:
            if e.status == 404:
                return None
            raise KubernetesAPIError(
                f"Failed to read secret {namespace}/{name}: {e.reason}",
                reason=e.reason,
                retryable=_is_retryable(e),
            ) from e

        return SecretResource.from_v1_secret(secret)

    async def update_secret(self, resource: SecretResource) -> SecretResource:
        """
        Replace a secret with the given content.

        Args:
            resource: Secret with the desired annotations and data

        Returns:
            The secret as stored by the API server

        Raises:
            KubernetesAPIError: If the update fails
        """
        try:
            updated = await asyncio.to_thread(
                self.v1.replace_namespaced_secret,
                name=resource.name,
                namespace=resource.namespace,
                body=resource.to_v1_secret(),
            )
        except ApiException as e:
            raise KubernetesAPIError(
                f"Failed to update secret {resource.key}: {e.reason}",
                reason=e.reason,
                retryable=_is_retryable(e),
            ) from e

        logger.debug(f"Replaced secret {resource.key}")
        return SecretResource.from_v1_secret(updated)
