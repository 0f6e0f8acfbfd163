"""
Remote Image Fetcher

Handles:
- Downloading one remote resource with caching disabled
- Reporting failures as FetchFailure values instead of raising
- Optional fallback through public relay services when the origin blocks us
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Union
from urllib.parse import quote, urlparse

import httpx

from .config import ArchiveServiceConfig

logger = logging.getLogger(__name__)


@dataclass
class FetchSuccess:
    """Bytes and content-type of a retrieved resource."""
    data: bytes
    content_type: str = ""

    @property
    def success(self) -> bool:
        return True


@dataclass
class FetchFailure:
    """Why a fetch did not produce bytes."""
    reason: str
    status_code: Optional[int] = None   # Set only when upstream answered non-2xx

    @property
    def success(self) -> bool:
        return False


FetchOutcome = Union[FetchSuccess, FetchFailure]


def is_fetchable_url(url: str) -> bool:
    """True for absolute http(s) URLs with a host."""
    try:
        parsed = urlparse(url)
    except ValueError:
        # e.g. "Invalid IPv6 URL" for an unbalanced bracket
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def build_relay_urls(url: str) -> List[str]:
    """
    Public relays tried, in order, when a direct fetch fails.

    Only used when relay fallback is enabled in configuration.
    """
    encoded = quote(url, safe="")
    # images.weserv.nl wants the target without protocol or leading slash
    host_path = url.split("://", 1)[-1].lstrip("/")

    return [
        f"https://api.allorigins.win/raw?url={encoded}",
        f"https://images.weserv.nl/?url={quote(host_path, safe='')}",
        f"https://api.codetabs.com/v1/proxy?quest={encoded}",
        f"https://cors.isomorphic-git.org/{url}",
        f"https://thingproxy.freeboard.io/fetch/{url}",
    ]


class RemoteFetcher:
    """
    Fetches remote images, one attempt per URL.

    Usage:
        async with RemoteFetcher(config) as fetcher:
            outcome = await fetcher.fetch(url)
    """

    def __init__(
        self,
        config: Optional[ArchiveServiceConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config or ArchiveServiceConfig()

        # Browser-like headers; many image CDNs reject unknown clients
        self.browser_headers = {
            "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/129.0.0.0 Safari/537.36",
            "Accept": "image/avif,image/webp,image/apng,image/svg+xml,image/*,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
            "Referer": "https://www.google.com/",
            "Cache-Control": "no-cache",
            "Pragma": "no-cache",
        }

        self._owns_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(
            timeout=self.config.fetch_timeout,
            follow_redirects=True,
            headers=self.browser_headers,
        )

    async def close(self):
        """Close HTTP client."""
        if self._owns_client:
            await self.http_client.aclose()

    async def __aenter__(self) -> "RemoteFetcher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def fetch(self, url: str) -> FetchOutcome:
        """
        Retrieve one resource.

        Args:
            url: Absolute http(s) URL

        Returns:
            FetchSuccess with body and content-type, or FetchFailure
        """
        if not is_fetchable_url(url):
            logger.warning(f"[RemoteFetcher] Invalid URL: {url[:60]}")
            return FetchFailure(reason=f"Invalid URL: {url[:60]}")

        outcome = await self._attempt(url)
        if outcome.success or not self.config.relay_fallback:
            return outcome

        logger.warning(f"[RemoteFetcher] Direct fetch failed for {url[:60]}... - {outcome.reason}")
        for relay_url in build_relay_urls(url):
            logger.info(f"[RemoteFetcher] Trying relay: {relay_url[:80]}...")
            relayed = await self._attempt(relay_url)
            if relayed.success:
                return relayed
            logger.warning(f"[RemoteFetcher] Relay failed: {relay_url[:80]}... - {relayed.reason}")

        return outcome

    async def _attempt(self, url: str) -> FetchOutcome:
        try:
            response = await self.http_client.get(url)
        except httpx.TimeoutException:
            logger.error(f"[RemoteFetcher] Timeout: {url[:60]}...")
            return FetchFailure(reason="Download timeout")
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"[RemoteFetcher] Transport error: {url[:60]}... - {e}")
            return FetchFailure(reason=str(e) or type(e).__name__)

        if not response.is_success:
            logger.error(f"[RemoteFetcher] HTTP error: {url[:60]}... - HTTP {response.status_code}")
            return FetchFailure(
                reason=f"HTTP {response.status_code} {response.reason_phrase}".strip(),
                status_code=response.status_code,
            )

        content_type = response.headers.get("content-type", "")
        logger.debug(f"[RemoteFetcher] Fetched {url[:60]}... ({len(response.content)} bytes, {content_type or 'no type'})")
        return FetchSuccess(data=response.content, content_type=content_type)
