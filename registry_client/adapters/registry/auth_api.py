"""Authentication endpoints of the registry API.

The handshake has two steps, each a separate outbound call:
1. ``GET /auth/cert/key`` returns an identifier and a challenge.
2. ``POST /auth/cert/`` exchanges the identifier and the signed challenge
   for a bearer token.

Rate limiting is not applied here; the credential cache acquires a permit
before each step.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from pydantic import ValidationError

from registry_client.adapters.transport.base import AbstractTransport
from registry_client.core.errors import ApiError
from registry_client.schemas.document import (
    AuthKeyResponse,
    AuthTokenRequest,
    AuthTokenResponse,
)

logger = logging.getLogger(__name__)

KEY_PATH = "/auth/cert/key"
TOKEN_PATH = "/auth/cert/"
JSON_CONTENT_TYPE = "application/json; charset=UTF-8"


@dataclass(frozen=True)
class SigningMaterial:
    """Identifier and challenge issued by the key request."""

    identifier: str
    challenge: str | None


@dataclass(frozen=True)
class TokenExchangeResult:
    """Outcome of the token exchange.

    Attributes:
        status_code: HTTP status of the exchange.
        body: Raw response body, verbatim.
        token: Parsed token; only set when status_code is 200.
    """

    status_code: int
    body: str
    token: str | None = None


class AbstractCredentialSource(ABC):
    """Interface for the two network steps of the authentication handshake."""

    @abstractmethod
    def request_signing_material(self) -> SigningMaterial:
        """Fetch an identifier and challenge to sign.

        Raises:
            ApiError: If the registry does not answer with 200.
        """
        raise NotImplementedError

    @abstractmethod
    def exchange_for_token(self, identifier: str, signed_challenge: str) -> TokenExchangeResult:
        """Trade the signed challenge for a bearer token.

        Status classification is left to the caller.
        """
        raise NotImplementedError


class RegistryAuthApi(AbstractCredentialSource):
    """Credential source talking to the registry's ``/auth/cert`` endpoints."""

    def __init__(self, transport: AbstractTransport) -> None:
        self.transport = transport

    def request_signing_material(self) -> SigningMaterial:
        response = self.transport.send("GET", KEY_PATH)

        if response.status_code != 200:
            raise ApiError(
                code="registry_key_request_failed",
                message=f"Failed to obtain authentication key. Status: {response.status_code}",
                details={"http_status": response.status_code, "method": "GET", "path": KEY_PATH},
                status_code=response.status_code,
                body=response.text,
            )

        try:
            payload = AuthKeyResponse.model_validate_json(response.text)
        except ValidationError as exc:
            raise ApiError(
                code="registry_invalid_response",
                message="Authentication key response could not be parsed",
                details={"http_status": response.status_code, "path": KEY_PATH},
                status_code=response.status_code,
                body=response.text,
            ) from exc

        return SigningMaterial(identifier=payload.uuid, challenge=payload.data)

    def exchange_for_token(self, identifier: str, signed_challenge: str) -> TokenExchangeResult:
        request_body = AuthTokenRequest(uuid=identifier, data=signed_challenge)
        response = self.transport.send(
            "POST",
            TOKEN_PATH,
            headers={"Content-Type": JSON_CONTENT_TYPE},
            body=request_body.model_dump_json(),
        )

        if response.status_code != 200:
            return TokenExchangeResult(status_code=response.status_code, body=response.text)

        try:
            payload = AuthTokenResponse.model_validate_json(response.text)
        except ValidationError as exc:
            raise ApiError(
                code="registry_invalid_response",
                message="Token response could not be parsed",
                details={"http_status": response.status_code, "path": TOKEN_PATH},
                status_code=response.status_code,
                body=response.text,
            ) from exc

        return TokenExchangeResult(
            status_code=response.status_code,
            body=response.text,
            token=payload.token,
        )
