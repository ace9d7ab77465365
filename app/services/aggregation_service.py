"""
Content aggregation: Drive folder → one knowledge text.

Responsibility: List the folder, fetch and extract every file concurrently,
and join the per-file texts in listing order. A file that cannot be fetched or
parsed becomes an error placeholder; only a failed listing aborts the run.
No HTTP or FastAPI here.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from app.core.config import DRIVE_MAX_CONCURRENCY, SEGMENT_DELIMITER
from app.ingest.loader import FileKind, classify, extract_text
from app.services.drive_client import FileRecord

logger = logging.getLogger(__name__)


class DriveSource(Protocol):
    def list_files(self, folder_id: str) -> list[FileRecord]: ...

    def download(self, file_id: str) -> bytes: ...


def error_placeholder(file_name: str) -> str:
    return f"[Error reading file: {file_name}]"


@dataclass(frozen=True)
class FileSegment:
    """Extraction outcome for one file."""

    name: str
    text: str
    ok: bool
    supported: bool = True

    @property
    def has_text(self) -> bool:
        """True when a parser actually produced non-blank text for this file."""
        return self.ok and self.supported and bool(self.text.strip())

    def render(self) -> str:
        if not self.ok:
            return error_placeholder(self.name)
        return f"[Content from file: {self.name}]\n{self.text}"


def _fetch_and_extract(drive: DriveSource, record: FileRecord) -> str:
    raw = drive.download(record.id)
    return extract_text(raw, record.mime_type, record.name)


async def collect_segments(
    drive: DriveSource,
    folder_id: str,
    max_concurrency: int = DRIVE_MAX_CONCURRENCY,
) -> list[FileSegment]:
    """
    Fetch and extract every file in the folder, one segment per file.

    Raises:
        UpstreamFetchError: If the folder listing fails.
    """
    files = await asyncio.to_thread(drive.list_files, folder_id)
    logger.info("[aggregation:collect_segments] IN  folder=%s files=%d", folder_id, len(files))
    if not files:
        return []

    semaphore = asyncio.Semaphore(max(1, max_concurrency))

    async def run(record: FileRecord) -> str:
        async with semaphore:
            return await asyncio.to_thread(_fetch_and_extract, drive, record)

    results = await asyncio.gather(*(run(f) for f in files), return_exceptions=True)

    segments: list[FileSegment] = []
    for record, result in zip(files, results):
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            logger.warning("Failed to read %s (%s): %s", record.name, record.mime_type, result)
            segments.append(FileSegment(name=record.name, text="", ok=False))
        else:
            supported = classify(record.mime_type) is not FileKind.UNSUPPORTED
            segments.append(FileSegment(name=record.name, text=result, ok=True, supported=supported))
    failed = sum(1 for s in segments if not s.ok)
    logger.info("[aggregation:collect_segments] OUT segments=%d failed=%d", len(segments), failed)
    return segments


def join_segments(segments: list[FileSegment]) -> str:
    return SEGMENT_DELIMITER.join(s.render() for s in segments)


async def aggregate(drive: DriveSource, folder_id: str) -> str:
    """Aggregated knowledge text for the folder; empty string when the folder is empty."""
    return join_segments(await collect_segments(drive, folder_id))
