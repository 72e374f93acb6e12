"""
S3 upload adapter for recording audio.

Objects are written under ``<key prefix>/<filename>`` and addressed by their
virtual-hosted public URL. The bucket must be readable through a bucket policy;
no ACL is set on the object.
"""

from __future__ import annotations

from typing import Any, Optional

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from callarchive.config import get_settings
from callarchive.domain.errors import UploadError
from callarchive.media.abstract import DEFAULT_CONTENT_TYPE
from callarchive.utils.logging import get_logger

log = get_logger(__name__)


class S3MediaUploader:
    """
    Upload audio with ``put_object`` and return its public URL.

    Any argument left as None is read from settings. `client` lets callers
    supply a preconfigured (or stubbed) boto3 S3 client.
    """

    def __init__(
        self,
        bucket: Optional[str] = None,
        region: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        key_prefix: Optional[str] = None,
        client: Optional[Any] = None,
    ) -> None:
        settings = get_settings()
        self.bucket = bucket or settings.aws_bucket_name
        self.region = region or settings.aws_region
        self.endpoint_url = endpoint_url or settings.s3_endpoint
        self.key_prefix = settings.upload_key_prefix if key_prefix is None else key_prefix
        self._access_key_id = access_key_id or settings.aws_access_key_id
        self._secret_access_key = secret_access_key or settings.aws_secret_access_key
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            # endpoint_url stays unset for AWS-managed S3
            kwargs = {}
            if self.endpoint_url:
                kwargs["endpoint_url"] = self.endpoint_url
            if self.region:
                kwargs["region_name"] = self.region
            self._client = boto3.client(
                "s3",
                aws_access_key_id=self._access_key_id,
                aws_secret_access_key=self._secret_access_key,
                config=Config(signature_version="s3v4", s3={"addressing_style": "virtual"}),
                **kwargs,
            )
        return self._client

    def object_key(self, filename: str) -> str:
        prefix = self.key_prefix.strip("/")
        return f"{prefix}/{filename}" if prefix else filename

    def public_url(self, key: str) -> str:
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    def upload(self, data: bytes, filename: str, content_type: str = DEFAULT_CONTENT_TYPE) -> str:
        """
        Store the audio and return its URL.

        Raises
        ------
        UploadError
            If the bucket or region is not configured, or S3 rejects the upload.
        """
        if not self.bucket:
            raise UploadError("Failed to upload audio file: AWS bucket name is not configured")
        if not self.region and not self.endpoint_url:
            raise UploadError("Failed to upload audio file: AWS region is not configured")

        key = self.object_key(filename)
        try:
            self._get_client().put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type or DEFAULT_CONTENT_TYPE,
            )
        except (BotoCoreError, ClientError) as exc:
            log.error("S3 upload failed", extra={"bucket": self.bucket, "key": key, "error": str(exc)})
            raise UploadError(f"Failed to upload audio file: {exc}") from exc

        url = self.public_url(key)
        log.info("Uploaded recording audio", extra={"key": key, "bytes": len(data)})
        return url


__all__ = ["S3MediaUploader"]
