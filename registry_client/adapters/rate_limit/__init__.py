"""Rate limiting adapters.

One limiter instance is shared by every outbound call a client makes,
authentication handshake included.
"""

from registry_client.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from registry_client.adapters.rate_limit.windowed import WindowedRateLimiter

__all__ = [
    "AbstractRateLimiter",
    "RateLimitResult",
    "WindowedRateLimiter",
]
