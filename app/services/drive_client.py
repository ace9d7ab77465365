"""
Google Drive client: service-account auth, folder listing, and file download.

Responsibility: The only module that talks to the Drive API. Everything is
synchronous (googleapiclient); async callers push calls onto worker threads.
"""

import io
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseDownload

from app.core.config import DRIVE_SCOPES
from app.core.errors import ConfigurationError, UpstreamFetchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileRecord:
    """One entry of a Drive folder listing."""

    id: str
    name: str
    mime_type: str


class DriveClient:
    """
    Thin wrapper over the Drive v3 files resource.

    The underlying HTTP object is not thread-safe, so each worker thread gets
    its own service built from service_factory.
    """

    def __init__(self, service_factory: Callable[[], Any]) -> None:
        self._service_factory = service_factory
        self._local = threading.local()

    @property
    def service(self) -> Any:
        service = getattr(self._local, "service", None)
        if service is None:
            service = self._local.service = self._service_factory()
        return service

    @classmethod
    def from_credentials(cls, info: dict[str, Any]) -> "DriveClient":
        """Build an authorised client from a parsed service-account payload."""
        try:
            credentials = service_account.Credentials.from_service_account_info(
                info, scopes=DRIVE_SCOPES
            )
        except (ValueError, KeyError) as e:
            raise ConfigurationError(
                f"Server configuration error: invalid Drive credentials ({e})"
            ) from e
        return cls(lambda: build("drive", "v3", credentials=credentials, cache_discovery=False))

    def list_files(self, folder_id: str) -> list[FileRecord]:
        """
        List non-trashed files directly inside folder_id, in the order Drive returns them.

        Only the first page is read; knowledge folders are expected to be small.
        """
        query = f"'{folder_id}' in parents and trashed = false"
        try:
            result = self.service.files().list(
                q=query, fields="files(id, name, mimeType)"
            ).execute()
        except HttpError as e:
            raise UpstreamFetchError(f"Failed to list Drive folder {folder_id}: {e}") from e
        except OSError as e:
            raise UpstreamFetchError(f"Drive is unreachable: {e}") from e
        files = [
            FileRecord(id=f["id"], name=f.get("name", ""), mime_type=f.get("mimeType", ""))
            for f in result.get("files", [])
        ]
        logger.info("[drive:list_files] folder=%s OUT files=%d", folder_id, len(files))
        return files

    def download(self, file_id: str) -> bytes:
        """Download a file's raw bytes."""
        try:
            request = self.service.files().get_media(fileId=file_id)
            buffer = io.BytesIO()
            downloader = MediaIoBaseDownload(buffer, request)
            done = False
            while not done:
                _, done = downloader.next_chunk()
        except HttpError as e:
            raise UpstreamFetchError(f"Failed to download Drive file {file_id}: {e}") from e
        except OSError as e:
            raise UpstreamFetchError(f"Drive is unreachable: {e}") from e
        data = buffer.getvalue()
        logger.debug("[drive:download] file=%s bytes=%d", file_id, len(data))
        return data
