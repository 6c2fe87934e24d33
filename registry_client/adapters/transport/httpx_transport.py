"""httpx-backed transport adapter."""

from __future__ import annotations

from typing import Mapping

import httpx

from registry_client.adapters.transport.base import AbstractTransport, TransportResponse


class HttpxTransport(AbstractTransport):
    """Send requests to the registry API with a pooled ``httpx.Client``.

    ``httpx.Client`` is safe to share between threads, so one instance serves
    every concurrent submission of a client.
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 30.0,
        *,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            base_url: API base URL; request paths are appended to it.
            timeout_seconds: Timeout applied to every request.
            client: Optional preconfigured client (tests pass one built on
                ``httpx.MockTransport``).
        """
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.Client(timeout=timeout_seconds)

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def send(
        self,
        method: str,
        path: str,
        headers: Mapping[str, str] | None = None,
        body: str | None = None,
    ) -> TransportResponse:
        response = self.client.request(
            method,
            self._url(path),
            headers=dict(headers or {}),
            content=body.encode("utf-8") if body is not None else None,
        )
        return TransportResponse(status_code=response.status_code, text=response.text)

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "HttpxTransport":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
