"""
Batch Archive Orchestrator

Handles:
- Normalizing "files" and legacy "items" request bodies into fetch targets
- Fetching all targets with a bounded worker pool
- Naming successful downloads in input order and adding them to the archive

Failed entries are dropped; a batch where nothing succeeds still produces
a valid, empty archive.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .archive import ArchiveWriter, ZipArchiveWriter, archive_download_name
from .config import ArchiveServiceConfig
from .fetcher import FetchOutcome, RemoteFetcher
from .naming import (
    NamingContext,
    has_extension,
    infer_extension,
    sanitize_filename,
    strip_extension,
)

logger = logging.getLogger(__name__)

FALLBACK_BASE_NAME = "image"


class InvalidBatchRequest(ValueError):
    """Request body has neither a "files" nor an "items" array."""


# ============================================
# Request Entry Models
# ============================================


def _name_text(value: Any) -> Optional[str]:
    """Any non-empty JSON value can name a file; empty ones name nothing."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else None
    if isinstance(value, (int, float)):
        return str(value)
    return str(value) if value else None


class _EntryModel(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)


class ArchiveFileEntry(_EntryModel):
    """Entry of the "files" list."""
    url: Optional[str] = Field(None, description="Image URL")
    filename: Optional[str] = Field(None, description="Desired name, extension optional")
    name: Optional[str] = Field(None, description="Alternative to filename")

    # Only a bad url rejects the entry
    @field_validator("filename", "name", mode="before")
    @classmethod
    def tolerate_name_values(cls, value: Any) -> Optional[str]:
        return _name_text(value)


class LegacyItemEntry(_EntryModel):
    """Entry of the legacy "items" list."""
    image_url: Optional[str] = Field(None, alias="imageUrl")
    url: Optional[str] = None
    item_code: Optional[str] = Field(None, alias="itemCode")
    barcode: Optional[str] = None
    id: Optional[str] = None
    filename: Optional[str] = None

    @field_validator("item_code", "barcode", "id", "filename", mode="before")
    @classmethod
    def tolerate_name_values(cls, value: Any) -> Optional[str]:
        return _name_text(value)


@dataclass
class FetchTarget:
    """
    One image to fetch and how to name it.

    keep_extension is set for "files" entries: a caller name that already
    ends in an extension is used verbatim. Legacy "items" entries carry an
    extensionless base and always get an inferred extension.
    """
    source_url: str
    suggested_name: Optional[str] = None
    keep_extension: bool = False    # Use a suggested name's own extension verbatim


@dataclass
class BuildResult:
    """Serialized archive plus counts for logging."""
    data: bytes
    filename: str
    requested: int
    entry_names: List[str] = field(default_factory=list)

    @property
    def archived(self) -> int:
        return len(self.entry_names)

    @property
    def skipped(self) -> int:
        return self.requested - self.archived


# ============================================
# Normalization
# ============================================


def _target_from_file(entry: Any) -> Optional[FetchTarget]:
    parsed = ArchiveFileEntry.model_validate(entry)
    if not parsed.url:
        return None

    provided = parsed.filename if parsed.filename is not None else parsed.name
    return FetchTarget(
        source_url=parsed.url,
        suggested_name=provided or None,
        keep_extension=True,
    )


def _target_from_item(entry: Any) -> Optional[FetchTarget]:
    parsed = LegacyItemEntry.model_validate(entry)
    url = parsed.image_url or parsed.url
    if not url:
        return None

    base = (
        (strip_extension(parsed.filename) if parsed.filename else None)
        or parsed.item_code
        or parsed.barcode
        or parsed.id
    )
    return FetchTarget(source_url=url, suggested_name=base or None)


def normalize_request(body: Any) -> List[FetchTarget]:
    """
    Convert a request body into fetch targets.

    Accepts {"files": [...]} or the legacy {"items": [...]}; "files" wins
    when both are present. Entries without a usable URL are skipped.

    Raises:
        InvalidBatchRequest: If neither list is present
    """
    files = body.get("files") if isinstance(body, dict) else None
    items = body.get("items") if isinstance(body, dict) else None

    if isinstance(files, list):
        entries, convert = files, _target_from_file
    elif isinstance(items, list):
        entries, convert = items, _target_from_item
    else:
        raise InvalidBatchRequest("Request body must contain a 'files' or 'items' array")

    targets = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            logger.warning(f"[ImageArchive] Skipping entry {index}: not an object")
            continue
        try:
            target = convert(entry)
        except ValidationError as e:
            logger.warning(f"[ImageArchive] Skipping entry {index}: {e.error_count()} invalid field(s)")
            continue
        if target is None:
            logger.warning(f"[ImageArchive] Skipping entry {index}: missing url")
            continue
        targets.append(target)

    return targets


def resolve_entry_name(
    target: FetchTarget,
    content_type: str,
    context: NamingContext,
) -> str:
    """
    Final, unique archive name for a fetched target.

    A caller-supplied name that already ends in an extension is kept as is
    (for "files" entries); otherwise the extension is inferred from the
    content-type or URL.
    """
    if target.suggested_name:
        base = sanitize_filename(target.suggested_name)
        if target.keep_extension and has_extension(base):
            return context.claim(base)
    else:
        base = FALLBACK_BASE_NAME

    return context.claim(base + infer_extension(content_type, target.source_url))


# ============================================
# Builder
# ============================================


class ArchiveBuilder:
    """
    Fetches a batch of images and bundles them into one archive.

    Usage:
        async with RemoteFetcher(config) as fetcher:
            result = await ArchiveBuilder(fetcher, config).build(targets)
    """

    def __init__(
        self,
        fetcher: RemoteFetcher,
        config: Optional[ArchiveServiceConfig] = None,
        writer_factory: Callable[[], ArchiveWriter] = ZipArchiveWriter,
    ):
        self.fetcher = fetcher
        self.config = config or ArchiveServiceConfig()
        self.writer_factory = writer_factory

    async def _fetch_all(self, targets: List[FetchTarget]) -> List[Any]:
        semaphore = asyncio.Semaphore(self.config.effective_concurrency)

        async def fetch_one(target: FetchTarget) -> FetchOutcome:
            async with semaphore:
                return await self.fetcher.fetch(target.source_url)

        # Results come back in input order regardless of completion order
        return await asyncio.gather(
            *(fetch_one(target) for target in targets),
            return_exceptions=True,
        )

    async def build(self, targets: List[FetchTarget]) -> BuildResult:
        """
        Fetch every target and serialize the successful ones.

        Naming runs as a single pass in input order after all fetches
        complete, so identical input always produces identical names.

        Raises:
            ArchiveBuildError: If the archive cannot be serialized
        """
        logger.info(f"[ImageArchive] Starting batch of {len(targets)} images")

        outcomes = await self._fetch_all(targets)

        context = NamingContext()
        writer = self.writer_factory()
        entry_names: List[str] = []

        for target, outcome in zip(targets, outcomes):
            url = target.source_url
            if isinstance(outcome, BaseException):
                logger.error(f"[ImageArchive] Unexpected error fetching {url[:60]}... - {outcome!r}")
                continue
            if not outcome.success:
                logger.warning(f"[ImageArchive] Dropping {url[:60]}... - {outcome.reason}")
                continue

            try:
                filename = resolve_entry_name(target, outcome.content_type, context)
                writer.add(filename, outcome.data)
            except Exception as e:
                logger.error(f"[ImageArchive] Failed to add {url[:60]}... - {e}")
                continue
            entry_names.append(filename)

        data = writer.serialize()

        result = BuildResult(
            data=data,
            filename=archive_download_name(),
            requested=len(targets),
            entry_names=entry_names,
        )
        logger.info(
            f"[ImageArchive] Batch complete: {result.archived}/{result.requested} archived, "
            f"{len(data) // 1024}KB"
        )
        return result
