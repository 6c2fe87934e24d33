"""Placeholder signer.

This is NOT a cryptographic signature. It base64-encodes the challenge so the
handshake can be exercised end to end; a qualified electronic signature
provider must replace it for production traffic.
"""

from __future__ import annotations

import base64

from registry_client.adapters.signing.base import AbstractSigner
from registry_client.core.errors import InvalidInputError


class PlaceholderSigner(AbstractSigner):
    """Base64-encode the UTF-8 bytes of the challenge."""

    def sign(self, challenge: str | None) -> str:
        if not challenge:
            raise InvalidInputError(
                code="signing_empty_challenge",
                message="Data for signing cannot be empty",
            )
        return base64.b64encode(challenge.encode("utf-8")).decode("ascii")
