"""
S3 object store for mirrored documents.

Works with AWS S3 and S3-compatible services (MinIO, Supabase Storage,
Cloudflare R2) through ``endpoint_url``.
"""

from __future__ import annotations

from typing import Any, Optional

from docmirror.connections.storage import BaseStorageConnection
from docmirror.exceptions import ConfigurationError, UploadError


class S3Connection(BaseStorageConnection):
    """
    S3 connection wrapper for mirrored-object writes.

    Provides lazy-initialized boto3 client with credential management.
    Supports AWS credentials from config, environment, or IAM role.

    Config example:
        storage:
          type: s3
          config:
            bucket: manuals
            region: us-east-1
            access_key_id: AKIA...   # Optional, uses env/IAM if not set
            secret_access_key: ...   # Optional
            endpoint_url: ...        # Optional (for S3-compatible services)
            base_path: mirror        # Optional prefix for all keys
    """

    def __init__(self, name: str, config: dict[str, Any]):
        super().__init__(name, config)
        self._client = None
        if not self._cfg.get("bucket"):
            raise ConfigurationError(
                f"S3 storage '{name}' requires 'bucket' in config (set MIRROR_BUCKET)",
                details={"connection": name},
            )

    @property
    def _cfg(self) -> dict[str, Any]:
        """Get nested config dict."""
        return self.config.get("config", {}) or {}

    @property
    def bucket(self) -> str:
        return self._cfg["bucket"]

    @property
    def region(self) -> Optional[str]:
        return self._cfg.get("region") or None

    @property
    def endpoint_url(self) -> Optional[str]:
        """Custom endpoint URL for S3-compatible services."""
        return self._cfg.get("endpoint_url") or None

    def _get_client_kwargs(self) -> dict[str, Any]:
        """Build kwargs for boto3 client initialization."""
        kwargs: dict[str, Any] = {}

        if self.region:
            kwargs["region_name"] = self.region

        if self.endpoint_url:
            kwargs["endpoint_url"] = self.endpoint_url

        # Explicit credentials from config override env/IAM
        access_key = self._cfg.get("access_key_id")
        secret_key = self._cfg.get("secret_access_key")
        session_token = self._cfg.get("session_token")

        if access_key and secret_key:
            kwargs["aws_access_key_id"] = access_key
            kwargs["aws_secret_access_key"] = secret_key
            if session_token:
                kwargs["aws_session_token"] = session_token

        return kwargs

    @property
    def client(self):
        """
        Get boto3 S3 client (lazy initialization).

        Returns:
            boto3.client('s3') instance
        """
        if self._client is None:
            import boto3

            self._client = boto3.client("s3", **self._get_client_kwargs())
        return self._client

    def _full_key(self, path: str) -> str:
        """Prepend base_path to key if configured."""
        if self.base_path:
            return f"{self.base_path.strip('/')}/{path.lstrip('/')}"
        return path.lstrip("/")

    def upload(self, path: str, content: bytes, content_type: str) -> str:
        """
        Put the object at ``path`` (overwrite-if-exists).

        A single PutObject is atomic in S3: readers see the old or the new
        object, never a partial one.

        Returns:
            ``path`` as given (the catalog's storage_path)

        Raises:
            UploadError: If the put fails
        """
        full_key = self._full_key(path)
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=full_key,
                Body=content,
                ContentType=content_type,
            )
        except Exception as e:
            raise UploadError(f"Upload to s3://{self.bucket}/{full_key} failed: {e}", cause=e) from e
        return path

    def close(self) -> None:
        """boto3 clients need no explicit close; drop the handle."""
        self._client = None
