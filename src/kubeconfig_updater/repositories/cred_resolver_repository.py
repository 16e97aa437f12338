"""Repository for credential resolver configurations.

Thin forwarding layer over the backend's credential resolver operations.
"""

from __future__ import annotations

from kubeconfig_updater.clients.protocols import CredResolverService
from kubeconfig_updater.models import CommonResponse, CredResolverConfig
from kubeconfig_updater.observability import get_logger

logger = get_logger(__name__)


class CredResolverRepository:
    """Data access for credential resolvers held by the backend."""

    def __init__(self, service: CredResolverService):
        self.service = service

    async def sync_available_cred_resolvers(self) -> CommonResponse:
        """Ask the backend to rediscover credential resolvers."""
        return await self.service.sync_available_cred_resolvers()

    async def get_cred_resolvers(self) -> list[CredResolverConfig]:
        """List known credential resolvers."""
        return await self.service.get_available_cred_resolvers()

    async def set_cred_resolver(self, config: CredResolverConfig) -> CommonResponse:
        """Create or replace the resolver for config.account_id.

        The request carries a copy of the config, attribute map included, so
        later changes to the caller's object do not leak into it.
        """
        request = CredResolverConfig(
            account_id=config.account_id,
            infra_vendor=config.infra_vendor,
            account_alias=config.account_alias,
            kind=config.kind,
            resolver_attributes=dict(config.resolver_attributes),
        )
        logger.info(
            "Setting credential resolver",
            account_id=request.account_id,
            infra_vendor=request.infra_vendor,
            kind=request.kind,
        )
        return await self.service.set_cred_resolver(request)

    async def delete_cred_resolver(self, account_id: str) -> CommonResponse:
        """Delete the resolver of an account."""
        if not account_id:
            raise ValueError("account_id should not be empty")

        logger.info("Deleting credential resolver", account_id=account_id)
        return await self.service.delete_cred_resolver(account_id)
