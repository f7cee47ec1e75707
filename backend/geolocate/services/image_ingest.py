"""
Image ingestion: validates the submitted image, hashes it and stores uploads
"""

import base64
import binascii
import hashlib
import re
from dataclasses import dataclass
from typing import Optional

import structlog

from ..utils.exceptions import InvalidArgumentError
from .storage import StorageService


DEFAULT_MAX_IMAGE_SIZE = 50 * 1024 * 1024  # 50 MiB

DEFAULT_CONTENT_TYPE = "image/jpeg"

EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}

_DATA_URL_PREFIX = re.compile(r"^data:[\w.+-]+/[\w.+-]+;base64,", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class IngestedImage:
    """Image reference handed to the model"""
    resolved_image_url: str
    image_hash: str
    content_type: Optional[str] = None
    size_bytes: Optional[int] = None
    uploaded: bool = False


def detect_content_type(data: bytes) -> str:
    """
    Detect the image MIME type from its leading bytes

    Args:
        data: Raw image bytes

    Returns:
        MIME type, image/jpeg when the signature is not recognised
    """
    if data[:4] == b"\x89PNG":
        return "image/png"
    if data[:3] == b"\xff\xd8\xff":
        return "image/jpeg"
    if data[:3] == b"GIF":
        return "image/gif"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return DEFAULT_CONTENT_TYPE


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def decode_image_data(image_data: str, max_size_bytes: int = DEFAULT_MAX_IMAGE_SIZE) -> bytes:
    """
    Strictly decode a base64 image payload

    The payload must survive a decode/re-encode round trip unchanged, so
    stray characters, broken padding and non-canonical trailing bits are
    all rejected.

    Args:
        image_data: Base64 text, optionally a data URL
        max_size_bytes: Largest accepted decoded size

    Returns:
        Decoded bytes

    Raises:
        InvalidArgumentError: If the payload is not valid, empty or too large
    """
    normalized = _WHITESPACE.sub("", image_data)
    normalized = _DATA_URL_PREFIX.sub("", normalized, count=1)

    try:
        decoded = base64.b64decode(normalized, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidArgumentError(
            message="Invalid base64 image data",
            field="imageData",
            details={"reason": str(e)}
        ) from e

    reencoded = base64.b64encode(decoded).decode("ascii")
    if reencoded != normalized:
        raise InvalidArgumentError(
            message="Invalid base64 image data",
            field="imageData"
        )

    if not decoded:
        raise InvalidArgumentError(
            message="Image data is empty",
            field="imageData"
        )

    if len(decoded) > max_size_bytes:
        raise InvalidArgumentError(
            message=f"Image too large: {len(decoded)} bytes (max: {max_size_bytes})",
            field="imageData",
            details={"size_bytes": len(decoded), "max_size_bytes": max_size_bytes}
        )

    return decoded


class ImageIngestService:
    """
    Turns an analysis request's image fields into a URL the model can read
    """

    def __init__(
        self,
        storage: StorageService,
        max_size_bytes: int = DEFAULT_MAX_IMAGE_SIZE
    ):
        self.storage = storage
        self.max_size_bytes = max_size_bytes
        self.logger = structlog.get_logger("service.image_ingest")

    async def ingest(
        self,
        image_url: Optional[str] = None,
        image_data: Optional[str] = None
    ) -> IngestedImage:
        """
        Resolve the image reference for an analysis

        imageData takes precedence when both fields are supplied.

        Args:
            image_url: Public image URL
            image_data: Base64 encoded image

        Returns:
            Resolved image URL and content hash

        Raises:
            InvalidArgumentError: If no image is supplied or the payload is invalid
            StorageError: If the upload fails
        """
        if not image_url and not image_data:
            raise InvalidArgumentError(
                message="Either imageUrl or imageData must be provided"
            )

        if image_data:
            if image_url:
                self.logger.warning(
                    "Both imageUrl and imageData supplied, using imageData"
                )
            return await self._ingest_upload(image_data)

        # The URL is hashed as a string; it is never fetched here
        image_hash = sha256_hex(image_url.encode("utf-8"))
        self.logger.debug("Using image URL", image_hash=image_hash)
        return IngestedImage(resolved_image_url=image_url, image_hash=image_hash)

    async def _ingest_upload(self, image_data: str) -> IngestedImage:
        decoded = decode_image_data(image_data, self.max_size_bytes)
        content_type = detect_content_type(decoded)
        image_hash = sha256_hex(decoded)
        key = f"{image_hash}.{EXTENSIONS[content_type]}"

        await self.storage.upload(key, decoded, content_type)

        self.logger.info(
            "Image stored",
            image_hash=image_hash,
            content_type=content_type,
            size_bytes=len(decoded)
        )

        return IngestedImage(
            resolved_image_url=self.storage.public_url(key),
            image_hash=image_hash,
            content_type=content_type,
            size_bytes=len(decoded),
            uploaded=True
        )
