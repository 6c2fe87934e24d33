"""Rate-limited client for the document registration API."""

from registry_client.client import RegistryClient, create_registry_client

__all__ = [
    "RegistryClient",
    "create_registry_client",
]
