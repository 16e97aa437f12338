"""Cluster metadata models.

Mirrors the metadata the backend aggregates from its resolvers (kubeconfig
files, cloud accounts) and returns from GetAvailableClusters.
"""

from enum import Enum

from pydantic import Field

from .base import KubeconfigBaseModel


class ClusterInformationStatus(str, Enum):
    """Registration state of a cluster as reported by the backend."""

    SUGGESTION_OK = "SUGGESTION_OK"
    SUGGESTION_NOTOK_NO_CRED_RESOLVER = "SUGGESTION_NOTOK_NO_CRED_RESOLVER"
    SUGGESTION_NOTOK_CRED_RES_NOTOK = "SUGGESTION_NOTOK_CRED_RES_NOTOK"
    REGISTERED_OK = "REGISTERED_OK"
    REGISTERED_NOTOK_NO_CRED_RESOLVER = "REGISTERED_NOTOK_NO_CRED_RESOLVER"
    REGISTERED_NOTOK_CRED_RES_NOTOK = "REGISTERED_NOTOK_CRED_RES_NOTOK"


class ClusterMetadata(KubeconfigBaseModel):
    """Metadata of a single cluster from one resolver."""

    cluster_name: str = Field(min_length=1, description="Cluster name")
    cred_resolver_id: str = Field(
        default="", description="Account id of the credential resolver ('' = none)"
    )
    cluster_tags: dict[str, str] = Field(default_factory=dict)


class AggregatedClusterMetadata(KubeconfigBaseModel):
    """Cluster metadata merged across every resolver that reported it."""

    metadata: ClusterMetadata
    data_resolvers: list[str] = Field(
        default_factory=list, description="Descriptions of the contributing resolvers"
    )
    status: ClusterInformationStatus = ClusterInformationStatus.SUGGESTION_OK

    @property
    def cluster_name(self) -> str:
        return self.metadata.cluster_name

    @property
    def is_registered(self) -> bool:
        """Whether the cluster is already present in the local kubeconfig."""
        return self.status in (
            ClusterInformationStatus.REGISTERED_OK,
            ClusterInformationStatus.REGISTERED_NOTOK_NO_CRED_RESOLVER,
            ClusterInformationStatus.REGISTERED_NOTOK_CRED_RES_NOTOK,
        )

    @property
    def is_ok(self) -> bool:
        return self.status in (
            ClusterInformationStatus.SUGGESTION_OK,
            ClusterInformationStatus.REGISTERED_OK,
        )
