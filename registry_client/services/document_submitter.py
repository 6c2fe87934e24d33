"""Document submission orchestration.

Each submission takes one rate limit permit, obtains the bearer token (which
may run the two-step handshake, taking two more permits from the same
limiter), sends the document and classifies the response. Failures surface
immediately; nothing is retried here.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass
from typing import Callable

from registry_client.adapters.rate_limit.base import AbstractRateLimiter
from registry_client.adapters.transport.base import AbstractTransport
from registry_client.core.errors import ApiError
from registry_client.core.logging import get_submission_id, set_submission_id
from registry_client.schemas.document import Document, serialize_document
from registry_client.services.credential_cache import CredentialCache

logger = logging.getLogger(__name__)

CREATE_DOCUMENT_PATH = "/lk/documents/create"
JSON_CONTENT_TYPE = "application/json; charset=UTF-8"
SUCCESS_STATUSES = frozenset({200, 201, 202})


@dataclass(frozen=True)
class SubmissionResult:
    """Accepted submission: the registry's status code and raw body."""

    status_code: int
    body: str


class DocumentSubmitter:
    """Send documents to the registry under the shared rate limit."""

    def __init__(
        self,
        *,
        limiter: AbstractRateLimiter,
        credentials: CredentialCache,
        transport: AbstractTransport,
        serializer: Callable[[Document], str] = serialize_document,
    ) -> None:
        self.limiter = limiter
        self.credentials = credentials
        self.transport = transport
        self.serializer = serializer

    def submit(
        self,
        document: Document,
        signature: str,
        cancel: threading.Event | None = None,
    ) -> SubmissionResult:
        """Submit one document.

        Args:
            document: Document to register.
            signature: Caller-computed signature of the document, sent as the
                ``Signature`` header without inspection.
            cancel: Optional event; setting it aborts any pending wait.

        Returns:
            SubmissionResult for statuses 200, 201 and 202.

        Raises:
            ApiError: For any other status, carrying the exact status and body.
            RequestCancelledError: If ``cancel`` is set while waiting.
        """
        previous_id = get_submission_id()
        set_submission_id(uuid.uuid4().hex)
        try:
            return self._submit(document, signature, cancel)
        finally:
            set_submission_id(previous_id)

    def _submit(
        self,
        document: Document,
        signature: str,
        cancel: threading.Event | None,
    ) -> SubmissionResult:
        self.limiter.acquire(cancel)
        token = self.credentials.get_token(cancel)

        headers = {
            "Content-Type": JSON_CONTENT_TYPE,
            "Authorization": f"Bearer {token}",
            "Signature": signature,
        }
        logger.debug(
            "document.sending",
            extra={"method": "POST", "path": CREATE_DOCUMENT_PATH, "headers": headers},
        )
        response = self.transport.send(
            "POST",
            CREATE_DOCUMENT_PATH,
            headers=headers,
            body=self.serializer(document),
        )

        if response.status_code not in SUCCESS_STATUSES:
            logger.warning(
                "document.rejected",
                extra={"http_status": response.status_code, "body_chars": len(response.text)},
            )
            raise ApiError(
                code="registry_document_rejected",
                message=(
                    f"Failed to create document. Status: {response.status_code}, "
                    f"Body: {response.text}"
                ),
                details={
                    "http_status": response.status_code,
                    "method": "POST",
                    "path": CREATE_DOCUMENT_PATH,
                },
                status_code=response.status_code,
                body=response.text,
            )

        logger.info("document.submitted", extra={"http_status": response.status_code})
        return SubmissionResult(status_code=response.status_code, body=response.text)
