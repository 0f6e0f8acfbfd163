"""
Image Archive Module

Bundles remote product images into a single ZIP download.

Features:
- Two request shapes ("files" and legacy "items")
- Bounded parallel download, deterministic naming in input order
- Safe, collision-free entry names with inferred extensions
- Best-effort: failed images are skipped, never fail the batch
"""

from .routes_fastapi import router
from .archive import ArchiveBuildError, ZipArchiveWriter
from .config import ArchiveServiceConfig
from .fetcher import FetchFailure, FetchSuccess, RemoteFetcher
from .orchestrator import ArchiveBuilder, InvalidBatchRequest, normalize_request

__all__ = [
    "router",
    "ArchiveBuildError",
    "ZipArchiveWriter",
    "ArchiveServiceConfig",
    "FetchFailure",
    "FetchSuccess",
    "RemoteFetcher",
    "ArchiveBuilder",
    "InvalidBatchRequest",
    "normalize_request",
]
