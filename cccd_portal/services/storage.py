"""Storage gateway: time-limited upload/download grants against object storage.

Bytes never pass through this service. Clients PUT directly to the presigned
URL and afterwards report the object key via ``/api/upload/complete``.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable
from urllib.parse import quote

import boto3
from botocore.config import Config

from ..config import Settings
from ..models.models import utcnow
from ..utils.file_handler import make_object_key, validate_upload

logger = logging.getLogger(__name__)


@dataclass
class UploadGrant:
    upload_url: str
    object_key: str
    expires_in: int


class StorageGateway(ABC):
    def __init__(
        self,
        max_file_size: int,
        allowed_mime_types: Iterable[str],
        upload_expires: int = 300,
        download_expires: int = 3600,
    ):
        self.max_file_size = max_file_size
        self.allowed_mime_types = tuple(allowed_mime_types)
        self.upload_expires = upload_expires
        self.download_expires = download_expires

    def generate_upload_grant(
        self, user_id: str, file_name: str, mime_type: str, file_size: int
    ) -> UploadGrant:
        validate_upload(
            file_name,
            mime_type,
            file_size,
            self.max_file_size,
            self.allowed_mime_types,
        )
        key = make_object_key(user_id, file_name)
        url = self._presign_put(key, mime_type, file_size, user_id)
        logger.info("Issued upload grant for %s (%d bytes)", key, file_size)
        return UploadGrant(
            upload_url=url, object_key=key, expires_in=self.upload_expires
        )

    def generate_download_grant(self, object_key: str) -> str:
        # Ownership is checked by the caller
        return self._presign_get(object_key)

    @abstractmethod
    def _presign_put(
        self, key: str, mime_type: str, file_size: int, user_id: str
    ) -> str: ...

    @abstractmethod
    def _presign_get(self, key: str) -> str: ...


class S3StorageGateway(StorageGateway):
    def __init__(self, client, bucket: str, **kwargs):
        super().__init__(**kwargs)
        if not bucket:
            raise ValueError("S3 bucket name is required")
        self.client = client
        self.bucket = bucket

    def _presign_put(self, key, mime_type, file_size, user_id):
        return self.client.generate_presigned_url(
            "put_object",
            Params={
                "Bucket": self.bucket,
                "Key": key,
                "ContentType": mime_type,
                "ContentLength": file_size,
                "Metadata": {
                    "userId": user_id,
                    "uploadedAt": utcnow().isoformat(),
                },
            },
            ExpiresIn=self.upload_expires,
        )

    def _presign_get(self, key):
        return self.client.generate_presigned_url(
            "get_object",
            Params={"Bucket": self.bucket, "Key": key},
            ExpiresIn=self.download_expires,
        )


class MockStorageGateway(StorageGateway):
    """Fake grants for local development and tests; nothing is signed."""

    base_url = "https://mock-s3-bucket.s3.amazonaws.com"

    def _mock_url(self, key: str, expires: int) -> str:
        return (
            f"{self.base_url}/{quote(key)}"
            f"?X-Amz-Algorithm=AWS4-HMAC-SHA256&X-Amz-Credential=mock"
            f"&X-Amz-Expires={expires}&X-Amz-Signature=mock-signature"
        )

    def _presign_put(self, key, mime_type, file_size, user_id):
        return self._mock_url(key, self.upload_expires)

    def _presign_get(self, key):
        return self._mock_url(key, self.download_expires)


def build_storage_gateway(settings: Settings) -> StorageGateway:
    limits = dict(
        max_file_size=settings.max_file_size,
        allowed_mime_types=settings.allowed_mime_types,
        upload_expires=settings.upload_url_expires,
        download_expires=settings.download_url_expires,
    )
    provider = settings.storage_provider.lower()
    if provider == "s3":
        client = boto3.client(
            "s3",
            endpoint_url=settings.s3_endpoint_url,
            region_name=settings.s3_region,
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            config=Config(signature_version="s3v4"),
        )
        return S3StorageGateway(client, settings.s3_bucket, **limits)
    if provider == "mock":
        return MockStorageGateway(**limits)
    raise ValueError(f"Unsupported storage provider: {settings.storage_provider}")
