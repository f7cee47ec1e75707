"""
Object storage for uploaded images (Google Cloud Storage)
"""

import asyncio
from typing import Optional
from urllib.parse import quote

import structlog
from google.cloud import storage

from ..utils.exceptions import StorageError


class StorageService:
    """
    Public bucket keyed by content hash. Writes of the same key carry the
    same bytes, so concurrent uploads are idempotent.
    """

    def __init__(
        self,
        bucket_name: str,
        project: Optional[str] = None,
        client: Optional[storage.Client] = None
    ):
        """
        Args:
            bucket_name: Bucket holding uploaded images
            project: Google Cloud project, defaults to the ambient one
            client: Preconfigured client; created lazily when omitted
        """
        self.bucket_name = bucket_name
        self.project = project
        self._client = client
        self._bucket = None
        self.logger = structlog.get_logger("service.storage")

    @property
    def bucket(self) -> storage.Bucket:
        if self._bucket is None:
            if self._client is None:
                self._client = storage.Client(project=self.project)
            self._bucket = self._client.bucket(self.bucket_name)
        return self._bucket

    async def upload(self, key: str, data: bytes, content_type: str) -> None:
        """
        Upload bytes under key

        Raises:
            StorageError: If the upload fails
        """
        try:
            blob = self.bucket.blob(key)
            await asyncio.to_thread(
                blob.upload_from_string,
                data,
                content_type=content_type
            )
        except Exception as e:
            self.logger.error(
                "Image upload failed",
                bucket=self.bucket_name,
                key=key,
                error=str(e),
                exc_info=True
            )
            raise StorageError(
                message="Failed to store image",
                bucket=self.bucket_name,
                key=key,
                original_error=str(e)
            ) from e

        self.logger.debug(
            "Image uploaded",
            bucket=self.bucket_name,
            key=key,
            content_type=content_type,
            size_bytes=len(data)
        )

    def public_url(self, key: str) -> str:
        """Public URL of an object in the bucket"""
        return f"https://storage.googleapis.com/{self.bucket_name}/{quote(key)}"
