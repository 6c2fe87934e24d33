"""Single-flight cache for the registry bearer token.

The token is fetched lazily, at most once at a time, and kept for the
lifetime of the owning client. The cache lock stays held for the whole fetch
(both rate limit waits and both network round trips), so concurrent callers
queue behind the first one and then read the stored value. Lock order is
always cache lock, then limiter lock; nothing takes them the other way round.

There is no expiry or refresh: once stored, the token is never replaced.
A failed fetch stores nothing, so the next caller starts the handshake over.
"""

from __future__ import annotations

import logging
import threading

from registry_client.adapters.rate_limit.base import AbstractRateLimiter
from registry_client.adapters.registry.auth_api import AbstractCredentialSource
from registry_client.adapters.signing.base import AbstractSigner
from registry_client.core.errors import ApiError, RequestCancelledError

logger = logging.getLogger(__name__)

# How often a queued caller re-checks its cancel event
CANCEL_POLL_SECONDS = 0.05


class CredentialCache:
    """Lazily obtain and cache one bearer token per client.

    Attributes:
        limiter: Shared limiter; each handshake step takes one permit.
        source: Registry authentication endpoints.
        signer: Signs the challenge returned by the key request.
    """

    def __init__(
        self,
        *,
        limiter: AbstractRateLimiter,
        source: AbstractCredentialSource,
        signer: AbstractSigner,
    ) -> None:
        self.limiter = limiter
        self.source = source
        self.signer = signer
        self._lock = threading.Lock()
        self._value: str | None = None
        self._fetch_attempts = 0
        self._fetch_failures = 0
        self._cache_hits = 0

    @property
    def has_token(self) -> bool:
        return self._value is not None

    def get_token(self, cancel: threading.Event | None = None) -> str:
        """Return the cached token, fetching it first if the cache is empty.

        Args:
            cancel: Optional event; setting it aborts waiting for the cache
                lock or for a rate limit permit.

        Returns:
            The bearer token shared by every caller of this cache.

        Raises:
            ApiError: If either handshake step returns an unexpected status.
            InvalidInputError: If the registry returned an empty challenge.
            RequestCancelledError: If ``cancel`` is set while waiting.
        """
        self._lock_or_cancel(cancel)
        try:
            if self._value is not None:
                self._cache_hits += 1
                logger.debug("credential.cache_hit")
                return self._value

            token = self._fetch_locked(cancel)
            self._value = token
            return token
        finally:
            self._lock.release()

    def _lock_or_cancel(self, cancel: threading.Event | None) -> None:
        if cancel is None:
            self._lock.acquire()
            return

        while not self._lock.acquire(timeout=CANCEL_POLL_SECONDS):
            if cancel.is_set():
                logger.info("credential.wait_cancelled")
                raise RequestCancelledError(
                    code="credential_wait_cancelled",
                    message="Waiting for the in-flight token fetch was cancelled",
                )

    def _fetch_locked(self, cancel: threading.Event | None) -> str:
        self._fetch_attempts += 1
        logger.info("credential.fetch_started", extra={"attempt": self._fetch_attempts})

        try:
            self.limiter.acquire(cancel)
            material = self.source.request_signing_material()
            signed_challenge = self.signer.sign(material.challenge)
            logger.debug(
                "credential.challenge_signed",
                extra={
                    "identifier": material.identifier,
                    "challenge": material.challenge,
                    "signed_challenge": signed_challenge,
                },
            )

            self.limiter.acquire(cancel)
            result = self.source.exchange_for_token(material.identifier, signed_challenge)

            if result.status_code != 200 or not result.token:
                raise ApiError(
                    code="registry_token_request_failed",
                    message=f"Failed to obtain token. Status: {result.status_code}",
                    details={"http_status": result.status_code, "method": "POST"},
                    status_code=result.status_code,
                    body=result.body,
                )
        except Exception as exc:
            self._fetch_failures += 1
            logger.warning(
                "credential.fetch_failed",
                extra={"error_type": type(exc).__name__, "attempt": self._fetch_attempts},
            )
            raise

        logger.info("credential.fetch_succeeded", extra={"attempt": self._fetch_attempts})
        return result.token

    def stats(self) -> dict[str, int | bool]:
        """Return fetch counters. Blocks while a fetch is in flight."""

        with self._lock:
            return {
                "has_token": self._value is not None,
                "fetch_attempts": self._fetch_attempts,
                "fetch_failures": self._fetch_failures,
                "cache_hits": self._cache_hits,
            }
