"""Data models for the kubeconfig updater client.

All models follow these conventions:
- Timestamps: timezone-aware, UTC preferred
- Field names: lowercase snake_case, camelCase on the wire
- Enums: uppercase SNAKE_CASE members
"""

# Base
from .base import KubeconfigBaseModel

# Cluster metadata
from .cluster import (
    AggregatedClusterMetadata,
    ClusterInformationStatus,
    ClusterMetadata,
)

# Common types
from .common import CommonResponse, ResultCode

# Credential resolvers
from .credentials import (
    PROFILE_ATTRIBUTE,
    CredentialResolverKind,
    CredentialResolverStatus,
    CredResolverConfig,
    InfraVendor,
)

# Events
from .events import (
    ErrorOccurred,
    Notification,
    NotificationVariant,
    RefreshPhase,
    SyncState,
)

__all__ = [
    # Base
    "KubeconfigBaseModel",
    # Common
    "CommonResponse",
    "ResultCode",
    # Cluster
    "AggregatedClusterMetadata",
    "ClusterInformationStatus",
    "ClusterMetadata",
    # Credentials
    "PROFILE_ATTRIBUTE",
    "CredentialResolverKind",
    "CredentialResolverStatus",
    "CredResolverConfig",
    "InfraVendor",
    # Events
    "ErrorOccurred",
    "Notification",
    "NotificationVariant",
    "RefreshPhase",
    "SyncState",
]
