"""Signing adapters used by the authentication handshake."""

from registry_client.adapters.signing.base import AbstractSigner
from registry_client.adapters.signing.placeholder import PlaceholderSigner

__all__ = [
    "AbstractSigner",
    "PlaceholderSigner",
]
