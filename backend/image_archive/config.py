"""
Image Archive Configuration

Runtime settings for fetching and archiving, resolved from environment
variables:

- IMAGE_FETCH_TIMEOUT            Per-fetch timeout in seconds (default 30)
- IMAGE_FETCH_MAX_CONCURRENCY    Parallel fetches per batch (default 4)
- IMAGE_FETCH_RELAY_FALLBACK     Retry failed fetches through public relays
- IMAGE_PROXY_CACHE_MAX_AGE      Browser cache for proxied images (default 1 day)
"""

import os
from dataclasses import dataclass


def _env_flag(name: str, default: str = "") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


@dataclass
class ArchiveServiceConfig:
    """Configuration for image fetching, archiving and proxying."""
    # Fetch settings
    fetch_timeout: float = 30.0         # Seconds per upstream request
    max_concurrency: int = 4            # Parallel fetches (< 1 means sequential)
    relay_fallback: bool = False        # Try public relays after a failed direct fetch

    # Proxy settings
    proxy_cache_max_age: int = 86400    # Cache-Control max-age for passthrough

    @property
    def effective_concurrency(self) -> int:
        return self.max_concurrency if self.max_concurrency > 0 else 1

    @classmethod
    def from_env(cls) -> "ArchiveServiceConfig":
        """Build configuration from environment variables."""
        return cls(
            fetch_timeout=float(os.getenv("IMAGE_FETCH_TIMEOUT", "30")),
            max_concurrency=int(os.getenv("IMAGE_FETCH_MAX_CONCURRENCY", "4")),
            relay_fallback=_env_flag("IMAGE_FETCH_RELAY_FALLBACK"),
            proxy_cache_max_age=int(os.getenv("IMAGE_PROXY_CACHE_MAX_AGE", "86400")),
        )
