"""Credential resolver models.

A credential resolver tells the backend how to obtain cloud credentials for one
account (default SDK chain, environment, instance metadata or a named profile).
"""

from enum import Enum

from pydantic import Field, model_validator

from .base import KubeconfigBaseModel

PROFILE_ATTRIBUTE = "profile"


class InfraVendor(str, Enum):
    """Cloud vendor hosting the account."""

    AWS = "AWS"
    AZURE = "Azure"
    TENCENT = "Tencent"


class CredentialResolverKind(str, Enum):
    """Credential source used by the backend."""

    DEFAULT = "DEFAULT"
    ENV = "ENV"
    IMDS = "IMDS"
    PROFILE = "PROFILE"


class CredentialResolverStatus(str, Enum):
    """Last known health of a credential resolver."""

    CRED_REGISTERED_OK = "CRED_REGISTERED_OK"
    CRED_REGISTERED_NOT_OK = "CRED_REGISTERED_NOT_OK"
    CRED_SUGGESTION_OK = "CRED_SUGGESTION_OK"


class CredResolverConfig(KubeconfigBaseModel):
    """Credential resolver configuration for one cloud account."""

    account_id: str = Field(min_length=1, description="Cloud account identifier")
    infra_vendor: InfraVendor
    account_alias: str = Field(default="", description="Human-friendly account name")
    kind: CredentialResolverKind = CredentialResolverKind.DEFAULT
    resolver_attributes: dict[str, str] = Field(default_factory=dict)
    status: CredentialResolverStatus | None = None

    @model_validator(mode="after")
    def validate_profile_attribute(self) -> "CredResolverConfig":
        if self.kind == CredentialResolverKind.PROFILE and not self.resolver_attributes.get(
            PROFILE_ATTRIBUTE
        ):
            raise ValueError("PROFILE resolvers require a 'profile' attribute")
        return self
