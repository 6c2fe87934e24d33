from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Mapping


@dataclass(frozen=True)
class TransportResponse:
    """Status code and raw body text of one HTTP exchange."""

    status_code: int
    text: str


class AbstractTransport(ABC):
    """Interface for sending a single request to the registry API."""

    @abstractmethod
    def send(
        self,
        method: str,
        path: str,
        headers: Mapping[str, str] | None = None,
        body: str | None = None,
    ) -> TransportResponse:
        """Send one request and return the raw response.

        Args:
            method: HTTP method (e.g., "GET", "POST").
            path: Path relative to the API base URL.
            headers: Optional request headers.
            body: Optional request body, already serialized.

        Returns:
            TransportResponse: Status code and body text.

        Raises:
            Exception: Transport-level failures propagate unchanged.
        """
        ...

    def close(self) -> None:
        """Release network resources. No-op by default."""
