"""
Image Proxy API Routes

Provides a passthrough endpoint that re-serves one external image with its
original bytes and content-type, so browsers can load it without CORS
restrictions.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse, Response

from image_archive.config import ArchiveServiceConfig
from image_archive.fetcher import RemoteFetcher, is_fetchable_url
from image_archive.routes_fastapi import CORS_HEADERS, get_config

logger = logging.getLogger(__name__)

FALLBACK_CONTENT_TYPE = "application/octet-stream"
UPSTREAM_FAILURE_STATUS = 502

# ============================================
# Router
# ============================================

router = APIRouter(prefix="/api/images-zip", tags=["Image Proxy"])


# ============================================
# Endpoints
# ============================================

@router.get("")
async def proxy_image(
    url: Optional[str] = Query(None, description="URL of the image to proxy"),
    config: ArchiveServiceConfig = Depends(get_config),
):
    """
    Proxy an external image unmodified.

    Upstream error statuses are forwarded as-is; network failures answer 502.

    Example:
        GET /api/images-zip?url=https://example.com/image.jpg
    """
    if not url:
        return PlainTextResponse("Missing url", status_code=400, headers=CORS_HEADERS)

    if not is_fetchable_url(url):
        logger.warning(f"[ImageProxy] Invalid url: {url[:60]}")
        return PlainTextResponse("Invalid url", status_code=400, headers=CORS_HEADERS)

    logger.info(f"[ImageProxy] Fetching: {url[:80]}...")
    async with RemoteFetcher(config) as fetcher:
        outcome = await fetcher.fetch(url)

    if not outcome.success:
        status_code = outcome.status_code or UPSTREAM_FAILURE_STATUS
        logger.error(f"[ImageProxy] Fetch failed ({status_code}): {url[:60]}... - {outcome.reason}")
        return PlainTextResponse("Fetch failed", status_code=status_code, headers=CORS_HEADERS)

    logger.info(f"[ImageProxy] Proxied: {url[:60]}... ({len(outcome.data)} bytes)")

    # Explicit header keeps the upstream value verbatim (no charset added)
    return Response(
        content=outcome.data,
        headers={
            "Content-Type": outcome.content_type or FALLBACK_CONTENT_TYPE,
            "Cache-Control": f"public, max-age={config.proxy_cache_max_age}",
            **CORS_HEADERS,
        },
    )
