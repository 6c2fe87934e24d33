"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any import that loads settings.
"""

import os
import threading
import time
from typing import Mapping

import pytest

os.environ["REGISTRY_ENV"] = "testing"
os.environ.setdefault("REGISTRY_API_URL", "https://registry.test/api/v3")
os.environ.setdefault("REGISTRY_REQUEST_LIMIT", "100")
os.environ.setdefault("REGISTRY_INTERVAL_SECONDS", "1.0")

from registry_client.adapters.transport.base import AbstractTransport, TransportResponse
from registry_client.core.logging import get_submission_id
from registry_client.schemas.document import Document, Product

KEY_PATH = "/auth/cert/key"
TOKEN_PATH = "/auth/cert/"
DOCUMENT_PATH = "/lk/documents/create"


class FakeClock:
    """Deterministic, thread-safe clock; ``sleep`` advances time instead of blocking."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.current = start
        self.sleeps: list[float] = []
        self._lock = threading.Lock()

    def time(self) -> float:
        with self._lock:
            return self.current

    def sleep(self, seconds: float) -> None:
        with self._lock:
            self.sleeps.append(seconds)
            self.current += seconds

    def advance(self, seconds: float) -> None:
        with self._lock:
            self.current += seconds


class FakeTransport(AbstractTransport):
    """Thread-safe transport answering by path and recording every call."""

    def __init__(self, delay_seconds: float = 0.0) -> None:
        self.responses: dict[str, TransportResponse] = {
            KEY_PATH: TransportResponse(200, '{"uuid":"123","data":"testData"}'),
            TOKEN_PATH: TransportResponse(200, '{"token":"testToken"}'),
            DOCUMENT_PATH: TransportResponse(200, "{}"),
        }
        self.delay_seconds = delay_seconds
        self.calls: list[dict] = []
        self.closed = False
        self._lock = threading.Lock()

    def respond(self, path: str, status_code: int, text: str) -> None:
        self.responses[path] = TransportResponse(status_code, text)

    def send(
        self,
        method: str,
        path: str,
        headers: Mapping[str, str] | None = None,
        body: str | None = None,
    ) -> TransportResponse:
        if self.delay_seconds:
            time.sleep(self.delay_seconds)
        with self._lock:
            self.calls.append(
                {
                    "method": method,
                    "path": path,
                    "headers": dict(headers or {}),
                    "body": body,
                    "submission_id": get_submission_id(),
                }
            )
            return self.responses[path]

    def paths(self) -> list[str]:
        with self._lock:
            return [call["path"] for call in self.calls]

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def sample_document() -> Document:
    return Document(
        participant_inn="1234567890",
        production_date="2023-01-01",
        products=[
            Product(
                certificate_document="CONFORMITY_CERTIFICATE",
                certificate_document_date="2023-01-01",
                certificate_document_number="12345",
                uit="0104650117240408211dmfcZNcM",
            )
        ],
    )
