"""
Google Drive remote source.

Read-only access through a service account. Folder listings are paginated and
every page is requested with the same query until no continuation token is
returned.
"""

from __future__ import annotations

import io
import json
from typing import Any

from docmirror.exceptions import ConfigurationError, DownloadError, ListingError
from docmirror.sync.types import ListPage, RemoteEntry
from docmirror.utils.logging import get_logger

logger = get_logger("docmirror.connections.drive")

DRIVE_READONLY_SCOPE = "https://www.googleapis.com/auth/drive.readonly"
FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
NATIVE_MIME_PREFIX = "application/vnd.google-apps."
LIST_FIELDS = "nextPageToken, files(id, name, mimeType, size)"


def parse_service_account(blob: str) -> dict[str, Any]:
    """
    Parse and validate a service-account JSON credential.

    Raises:
        ConfigurationError: If the blob is empty, not JSON, or lacks required keys
    """
    if not blob or not blob.strip():
        raise ConfigurationError("Service account credential is missing (set GOOGLE_SERVICE_ACCOUNT_JSON)")
    try:
        info = json.loads(blob)
    except json.JSONDecodeError as e:
        raise ConfigurationError("Service account credential is not valid JSON") from e
    if not isinstance(info, dict):
        raise ConfigurationError("Service account credential must be a JSON object")
    missing = [key for key in ("client_email", "private_key") if not info.get(key)]
    if missing:
        raise ConfigurationError(
            f"Service account JSON missing {' and '.join(missing)}",
            details={"missing": missing},
        )
    return info


class GoogleDriveConnection:
    """
    Remote source backed by the Drive v3 API.

    Config example::

        source:
          type: google_drive
          root_folder_id: ${DRIVE_ROOT_FOLDER_ID}
          credentials_json: ${GOOGLE_SERVICE_ACCOUNT_JSON}
          page_size: 1000
    """

    provider = "google_drive"

    def __init__(self, name: str, config: dict[str, Any], *, service: Any | None = None):
        self.name = name
        self.config = config
        self.page_size = int(config.get("page_size", 1000))
        # Injected services (tests) skip credential handling entirely
        self._service = service
        self._info: dict[str, Any] | None = None
        if service is None:
            self._info = parse_service_account(str(config.get("credentials_json") or ""))

    @property
    def client_email(self) -> str | None:
        return self._info.get("client_email") if self._info else None

    @property
    def service(self) -> Any:
        """Drive API resource (lazy initialization)."""
        if self._service is None:
            from google.oauth2 import service_account
            from googleapiclient.discovery import build

            credentials = service_account.Credentials.from_service_account_info(
                self._info, scopes=[DRIVE_READONLY_SCOPE]
            )
            self._service = build("drive", "v3", credentials=credentials, cache_discovery=False)
            logger.info(f"Service account: {self.client_email}")
        return self._service

    def list_children(self, folder_id: str, page_token: str | None = None) -> ListPage:
        """
        Fetch one page of a folder's non-trashed children.

        Raises:
            ListingError: If the API call fails
        """
        query = f"'{_escape_query(folder_id)}' in parents and trashed=false"
        try:
            response = (
                self.service.files()
                .list(
                    q=query,
                    fields=LIST_FIELDS,
                    pageSize=self.page_size,
                    pageToken=page_token,
                    supportsAllDrives=True,
                    includeItemsFromAllDrives=True,
                )
                .execute()
            )
        except Exception as e:
            raise ListingError(folder_id, str(e), cause=e) from e

        entries = [self._entry(item) for item in response.get("files", [])]
        return ListPage(entries=entries, next_page_token=response.get("nextPageToken") or None)

    def download_bytes(self, remote_id: str) -> bytes:
        """
        Download the full content of a binary file.

        Raises:
            DownloadError: If the download fails
        """
        from googleapiclient.http import MediaIoBaseDownload

        buffer = io.BytesIO()
        try:
            request = self.service.files().get_media(fileId=remote_id, supportsAllDrives=True)
            downloader = MediaIoBaseDownload(buffer, request)
            done = False
            while not done:
                _, done = downloader.next_chunk()
        except Exception as e:
            raise DownloadError(f"Download failed: {e}", remote_id=remote_id, cause=e) from e
        return buffer.getvalue()

    @staticmethod
    def _entry(item: dict[str, Any]) -> RemoteEntry:
        mime_type = item.get("mimeType") or ""
        size = item.get("size")
        return RemoteEntry(
            remote_id=item["id"],
            name=item.get("name") or item["id"],
            mime_type=mime_type,
            # Drive reports size as a string, and not at all for native documents
            size_bytes=int(size) if size is not None else None,
            is_folder=mime_type == FOLDER_MIME_TYPE,
            is_native=mime_type.startswith(NATIVE_MIME_PREFIX) and mime_type != FOLDER_MIME_TYPE,
        )

    def close(self) -> None:
        if self._service is not None and hasattr(self._service, "close"):
            try:
                self._service.close()
            except Exception as e:
                logger.debug(f"Error closing Drive service: {e}")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}')"


def _escape_query(value: str) -> str:
    """Escape a literal for the Drive query language."""
    return value.replace("\\", "\\\\").replace("'", "\\'")
