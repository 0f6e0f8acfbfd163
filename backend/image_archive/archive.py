"""
Archive Assembly

Collects named byte blobs and serializes them into a single ZIP stream.
The orchestrator only depends on the ArchiveWriter protocol, so the
concrete container format can change without touching it.
"""

import logging
import zipfile
from dataclasses import dataclass
from datetime import date, datetime, timezone
from io import BytesIO
from typing import List, Optional, Protocol

logger = logging.getLogger(__name__)

ARCHIVE_CONTENT_TYPE = "application/zip"
COMPRESSION_LEVEL = 6   # DEFLATE level, balances speed and size


class ArchiveBuildError(RuntimeError):
    """Raised when the archive cannot be serialized."""


@dataclass
class ArchiveEntry:
    """One named file inside the archive."""
    filename: str
    data: bytes


class ArchiveWriter(Protocol):
    """Minimal capability needed to build an archive."""

    def add(self, name: str, data: bytes) -> None:
        ...

    def serialize(self) -> bytes:
        ...


class ZipArchiveWriter:
    """In-memory ZIP writer; entries keep insertion order."""

    def __init__(self):
        self.entries: List[ArchiveEntry] = []

    def __len__(self) -> int:
        return len(self.entries)

    def add(self, name: str, data: bytes) -> None:
        self.entries.append(ArchiveEntry(filename=name, data=data))

    def serialize(self) -> bytes:
        """
        Write all entries to a DEFLATE-compressed ZIP.

        Raises:
            ArchiveBuildError: If any entry cannot be written
        """
        buffer = BytesIO()
        try:
            with zipfile.ZipFile(
                buffer,
                "w",
                compression=zipfile.ZIP_DEFLATED,
                compresslevel=COMPRESSION_LEVEL,
            ) as zf:
                for entry in self.entries:
                    zf.writestr(entry.filename, entry.data)
        except (zipfile.BadZipFile, OSError, ValueError) as e:
            raise ArchiveBuildError(f"Failed to write archive: {e}") from e

        logger.debug(f"[ImageArchive] Serialized {len(self.entries)} entries ({buffer.tell()} bytes)")
        return buffer.getvalue()


def archive_download_name(today: Optional[date] = None) -> str:
    """Suggested download name, e.g. product-images-2024-05-01.zip"""
    today = today or datetime.now(timezone.utc).date()
    return f"product-images-{today.isoformat()}.zip"
