"""Repositories over backend-held data."""

from .cred_resolver_repository import CredResolverRepository

__all__ = ["CredResolverRepository"]
