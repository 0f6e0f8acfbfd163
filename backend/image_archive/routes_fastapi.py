"""
Image Archive API Routes

Provides endpoints for:
- Bundling many remote images into one ZIP download
- CORS preflight for browser callers
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, Response

from .archive import ARCHIVE_CONTENT_TYPE
from .config import ArchiveServiceConfig
from .fetcher import RemoteFetcher
from .orchestrator import ArchiveBuilder, InvalidBatchRequest, normalize_request

logger = logging.getLogger(__name__)

# ============================================
# Configuration
# ============================================

_config = ArchiveServiceConfig.from_env()

# Wide-open CORS for browser usage
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def get_config() -> ArchiveServiceConfig:
    """Service configuration, overridable via app.dependency_overrides."""
    return _config


# ============================================
# Router
# ============================================

router = APIRouter(prefix="/api/images-zip", tags=["Image Archive"])


# ============================================
# Endpoints
# ============================================

@router.post("")
async def build_image_archive(
    request: Request,
    config: ArchiveServiceConfig = Depends(get_config),
):
    """
    Download many images and return them as one ZIP file.

    Entries that cannot be fetched are skipped; if none succeed the
    response is an empty ZIP.

    Example:
        POST /api/images-zip
        {
            "files": [
                {"url": "https://example.com/a.png", "filename": "front"},
                {"url": "https://example.com/b.jpg"}
            ]
        }

    Legacy body:
        {"items": [{"imageUrl": "https://example.com/a.png", "itemCode": "SKU-1"}]}
    """
    try:
        body = await request.json()
    except ValueError:
        body = {}

    try:
        targets = normalize_request(body)
    except InvalidBatchRequest as e:
        logger.warning(f"[ImageArchive] Rejected request: {e}")
        return PlainTextResponse("Bad request body", status_code=400, headers=CORS_HEADERS)

    try:
        async with RemoteFetcher(config) as fetcher:
            result = await ArchiveBuilder(fetcher, config).build(targets)
    except Exception:
        logger.exception("[ImageArchive] Zip generation failed")
        return PlainTextResponse("Zip generation failed", status_code=500, headers=CORS_HEADERS)

    return Response(
        content=result.data,
        media_type=ARCHIVE_CONTENT_TYPE,
        headers={
            "Content-Disposition": f"attachment; filename={result.filename}",
            "Cache-Control": "no-store",
            **CORS_HEADERS,
        },
    )


@router.options("")
async def preflight():
    """CORS preflight."""
    return Response(
        status_code=200,
        headers={
            **CORS_HEADERS,
            "Access-Control-Max-Age": "86400",
        },
    )
