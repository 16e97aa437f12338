"""Pytest configuration and shared fixtures."""

import os
from datetime import UTC, datetime, timedelta
from typing import Any
from unittest.mock import AsyncMock

import pytest

# Set test environment before importing settings
os.environ["ENV"] = "development"
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["LOG_FORMAT"] = "text"

from kubeconfig_updater.models import AggregatedClusterMetadata, CommonResponse  # noqa: E402
from kubeconfig_updater.storage import InMemoryKeyValueStore  # noqa: E402


class FakeClock:
    """Controllable time source."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 5, 1, 10, 0, 0, tzinfo=UTC))


@pytest.fixture
def memory_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def sample_clusters_data() -> list[dict[str, Any]]:
    """Cluster metadata as returned on the wire, in backend order."""
    return [
        {
            "metadata": {
                "clusterName": "prod-east-01",
                "credResolverId": "123456789012",
                "clusterTags": {"env": "prod"},
            },
            "dataResolvers": ["AWS/123456789012", "kubeconfig"],
            "status": "REGISTERED_OK",
        },
        {
            "metadata": {"clusterName": "dev-west-02", "credResolverId": ""},
            "dataResolvers": ["kubeconfig"],
            "status": "REGISTERED_NOTOK_NO_CRED_RESOLVER",
        },
        {
            "metadata": {"clusterName": "analytics", "credResolverId": "210987654321"},
            "dataResolvers": ["AWS/210987654321"],
            "status": "SUGGESTION_OK",
        },
    ]


@pytest.fixture
def sample_clusters(sample_clusters_data) -> list[AggregatedClusterMetadata]:
    return [AggregatedClusterMetadata.model_validate(item) for item in sample_clusters_data]


@pytest.fixture
def mock_cluster_service(sample_clusters):
    """Cluster service whose calls succeed by default."""
    service = AsyncMock()
    service.sync_available_clusters = AsyncMock(return_value=CommonResponse())
    service.get_available_clusters = AsyncMock(return_value=sample_clusters)
    return service


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line(
        "markers", "integration: Integration tests (require external services)"
    )
    config.addinivalue_line("markers", "slow: Slow tests")
