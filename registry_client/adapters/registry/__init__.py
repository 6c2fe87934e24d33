"""Registry endpoint adapters built on top of the transport."""

from registry_client.adapters.registry.auth_api import (
    AbstractCredentialSource,
    RegistryAuthApi,
    SigningMaterial,
    TokenExchangeResult,
)

__all__ = [
    "AbstractCredentialSource",
    "RegistryAuthApi",
    "SigningMaterial",
    "TokenExchangeResult",
]
