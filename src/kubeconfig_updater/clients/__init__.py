"""Clients for the kubeconfig backend."""

from .kubeconfig_service import ClusterServiceError, KubeconfigServiceClient
from .protocols import ClusterService, CredResolverService

__all__ = [
    "ClusterService",
    "ClusterServiceError",
    "CredResolverService",
    "KubeconfigServiceClient",
]
