"""Client facade and factory.

``create_registry_client`` builds one fully wired client from settings. Each
client owns its own limiter and token cache; share the instance between
threads rather than building several, or the rate limit is multiplied.
"""

from __future__ import annotations

import logging
import threading

from registry_client.adapters.rate_limit.base import AbstractRateLimiter
from registry_client.adapters.rate_limit.windowed import WindowedRateLimiter
from registry_client.adapters.registry.auth_api import RegistryAuthApi
from registry_client.adapters.signing.base import AbstractSigner
from registry_client.adapters.signing.placeholder import PlaceholderSigner
from registry_client.adapters.transport.base import AbstractTransport
from registry_client.adapters.transport.httpx_transport import HttpxTransport
from registry_client.core.config import ClientSettings, get_settings
from registry_client.schemas.document import Document
from registry_client.services.credential_cache import CredentialCache
from registry_client.services.document_submitter import DocumentSubmitter, SubmissionResult

logger = logging.getLogger(__name__)


class RegistryClient:
    """Thread-safe client for registering documents.

    Attributes:
        limiter: Rate limiter shared by every outbound call.
        credentials: Bearer token cache.
        submitter: Document submission orchestrator.
        transport: Transport used for every call.
    """

    def __init__(
        self,
        *,
        limiter: AbstractRateLimiter,
        transport: AbstractTransport,
        signer: AbstractSigner,
    ) -> None:
        self.limiter = limiter
        self.transport = transport
        self.credentials = CredentialCache(
            limiter=limiter,
            source=RegistryAuthApi(transport),
            signer=signer,
        )
        self.submitter = DocumentSubmitter(
            limiter=limiter,
            credentials=self.credentials,
            transport=transport,
        )

    def create_document(
        self,
        document: Document,
        signature: str,
        cancel: threading.Event | None = None,
    ) -> SubmissionResult:
        """Register a document; see ``DocumentSubmitter.submit``."""
        return self.submitter.submit(document, signature, cancel)

    def close(self) -> None:
        self.transport.close()

    def __enter__(self) -> "RegistryClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def create_registry_client(
    client_settings: ClientSettings | None = None,
    *,
    transport: AbstractTransport | None = None,
    signer: AbstractSigner | None = None,
) -> RegistryClient:
    """Build a client from settings.

    Args:
        client_settings: Connection and rate limit settings; defaults to the
            environment-loaded ``get_settings().client``.
        transport: Optional transport; defaults to ``HttpxTransport``.
        signer: Optional signer; defaults to the placeholder signer.

    Returns:
        RegistryClient: Configured client.

    Raises:
        ConfigurationError: If the limit or interval is not positive, whether
            it comes from ``client_settings`` or from the environment.
    """
    cfg = client_settings or get_settings().client

    limiter = WindowedRateLimiter(
        limit=cfg.request_limit,
        interval_seconds=cfg.interval_seconds,
    )
    if transport is None:
        transport = HttpxTransport(cfg.api_url, timeout_seconds=cfg.timeout_seconds)

    logger.info(
        "registry_client.created",
        extra={"limit": cfg.request_limit, "interval_seconds": cfg.interval_seconds},
    )
    return RegistryClient(
        limiter=limiter,
        transport=transport,
        signer=signer or PlaceholderSigner(),
    )
