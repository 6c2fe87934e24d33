"""Transport adapters - the client's only route to the network."""

from registry_client.adapters.transport.base import AbstractTransport, TransportResponse
from registry_client.adapters.transport.httpx_transport import HttpxTransport

__all__ = [
    "AbstractTransport",
    "HttpxTransport",
    "TransportResponse",
]
