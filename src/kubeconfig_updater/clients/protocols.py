"""Capabilities consumed from the backend service.

Any object with these coroutine methods can be plugged in; the bundled
implementation is KubeconfigServiceClient. Failures are raised as exceptions.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from kubeconfig_updater.models import (
    AggregatedClusterMetadata,
    CommonResponse,
    CredResolverConfig,
)


@runtime_checkable
class ClusterService(Protocol):
    """Cluster metadata operations of the backend."""

    async def sync_available_clusters(self) -> CommonResponse:
        """Ask the backend to refresh its own cluster metadata cache."""
        ...

    async def get_available_clusters(self) -> list[AggregatedClusterMetadata]:
        """Return the cluster metadata currently known to the backend."""
        ...


@runtime_checkable
class CredResolverService(Protocol):
    """Credential resolver operations of the backend."""

    async def sync_available_cred_resolvers(self) -> CommonResponse: ...

    async def get_available_cred_resolvers(self) -> list[CredResolverConfig]: ...

    async def set_cred_resolver(self, config: CredResolverConfig) -> CommonResponse: ...

    async def delete_cred_resolver(self, account_id: str) -> CommonResponse: ...
