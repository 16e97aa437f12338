"""Kubeconfig backend client.

Speaks JSON over HTTP to the backend's gateway and implements both the
ClusterService and CredResolverService capabilities.

Routes:
- POST   /api/v1/clusters/sync
- GET    /api/v1/clusters
- POST   /api/v1/cred-resolvers/sync
- GET    /api/v1/cred-resolvers
- PUT    /api/v1/cred-resolvers/{account_id}
- DELETE /api/v1/cred-resolvers/{account_id}
"""

from __future__ import annotations

import time
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from kubeconfig_updater.models import (
    AggregatedClusterMetadata,
    CommonResponse,
    CredResolverConfig,
)
from kubeconfig_updater.observability import (
    get_logger,
    log_external_call_end,
    log_external_call_start,
)

logger = get_logger(__name__)

SERVICE_NAME = "kubeconfig-backend"


class ClusterServiceError(Exception):
    """Raised when a backend call fails or is rejected."""

    def __init__(self, message: str, operation: str, status_code: int | None = None):
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code


class KubeconfigServiceClient:
    """Async client for the kubeconfig backend."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        connect_timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout, connect=self.connect_timeout),
                transport=self._transport,
            )
        return self._client

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Raises:
            ClusterServiceError: On transport errors, non-2xx status or a
                body that is not JSON
        """
        client = self._get_client()
        log_external_call_start(logger, SERVICE_NAME, operation)
        started = time.perf_counter()

        try:
            response = await client.request(method, path, json=json)
        except httpx.HTTPError as e:
            self._log_end(operation, started, success=False, error=str(e))
            raise ClusterServiceError(f"{operation} request failed: {e}", operation) from e

        if not response.is_success:
            detail = response.text.strip() or response.reason_phrase
            self._log_end(operation, started, success=False, error=detail)
            raise ClusterServiceError(
                f"{operation} returned HTTP {response.status_code}: {detail}",
                operation,
                status_code=response.status_code,
            )

        try:
            body = response.json() if response.content else {}
        except ValueError as e:
            self._log_end(operation, started, success=False, error="invalid JSON")
            raise ClusterServiceError(
                f"{operation} returned invalid JSON", operation, response.status_code
            ) from e

        self._log_end(operation, started, success=True)
        return body

    def _log_end(
        self, operation: str, started: float, success: bool, error: str | None = None
    ) -> None:
        duration_ms = (time.perf_counter() - started) * 1000
        log_external_call_end(logger, SERVICE_NAME, operation, success, duration_ms, error)

    async def _command(
        self,
        operation: str,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
    ) -> CommonResponse:
        """Send a command and require a successful CommonResponse."""
        body = await self._request(operation, method, path, json=json)
        result = self._parse(operation, CommonResponse, body or {})
        if not result.ok:
            raise ClusterServiceError(
                f"{operation} failed with {result.status}: {result.message}",
                operation,
            )
        return result

    def _parse(self, operation: str, model: Any, data: Any) -> Any:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise ClusterServiceError(
                f"{operation} returned an unexpected payload: {e}", operation
            ) from e

    def _parse_list(self, operation: str, model: Any, body: Any, field: str) -> list[Any]:
        items = body.get(field, []) if isinstance(body, dict) else body
        if not isinstance(items, list):
            raise ClusterServiceError(f"{operation} returned no '{field}' list", operation)
        return [self._parse(operation, model, item) for item in items]

    # Cluster metadata

    async def sync_available_clusters(self) -> CommonResponse:
        """Ask the backend to resync its cluster metadata cache."""
        return await self._command("SyncAvailableClusters", "POST", "/api/v1/clusters/sync")

    async def get_available_clusters(self) -> list[AggregatedClusterMetadata]:
        """List cluster metadata in backend order."""
        operation = "GetAvailableClusters"
        body = await self._request(operation, "GET", "/api/v1/clusters")
        return self._parse_list(operation, AggregatedClusterMetadata, body, "clusters")

    # Credential resolvers

    async def sync_available_cred_resolvers(self) -> CommonResponse:
        return await self._command(
            "SyncAvailableCredResolvers", "POST", "/api/v1/cred-resolvers/sync"
        )

    async def get_available_cred_resolvers(self) -> list[CredResolverConfig]:
        operation = "GetAvailableCredResolvers"
        body = await self._request(operation, "GET", "/api/v1/cred-resolvers")
        return self._parse_list(operation, CredResolverConfig, body, "configs")

    async def set_cred_resolver(self, config: CredResolverConfig) -> CommonResponse:
        return await self._command(
            "SetCredResolver",
            "PUT",
            f"/api/v1/cred-resolvers/{quote(config.account_id, safe='')}",
            json=config.to_wire(),
        )

    async def delete_cred_resolver(self, account_id: str) -> CommonResponse:
        return await self._command(
            "DeleteCredResolver", "DELETE", f"/api/v1/cred-resolvers/{quote(account_id, safe='')}"
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
