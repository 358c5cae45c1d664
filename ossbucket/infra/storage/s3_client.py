"""S3-compatible object store client implementation.

Aliyun OSS exposes an S3-compatible API, so the same client works against
OSS, AWS S3, MinIO and other S3-compatible services.

Dependencies:
    - boto3
    - botocore
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, BinaryIO, Sequence

from ossbucket.infra.storage.client import (
    ByteRange,
    CompletedPart,
    ListingPage,
    MultipartUpload,
    ObjectHead,
    ServiceError,
    StorageError,
)

if TYPE_CHECKING:
    from ossbucket.common.config import BucketConfig

logger = logging.getLogger("objstore")


def _normalize_endpoint(endpoint: str) -> str:
    endpoint = endpoint.strip().rstrip("/")
    if "://" not in endpoint:
        return f"https://{endpoint}"
    return endpoint


def _translate_error(exc: Exception, message: str) -> StorageError:
    """Map a botocore failure onto the storage error types."""
    response = getattr(exc, "response", None)
    if isinstance(response, dict):
        metadata = response.get("ResponseMetadata") or {}
        status = metadata.get("HTTPStatusCode")
        if status is not None:
            error = response.get("Error") or {}
            return ServiceError(
                f"{message}: {exc}",
                status_code=int(status),
                code=error.get("Code"),
                request_id=metadata.get("RequestId"),
            )
    return StorageError(f"{message}: {exc}")


class S3StorageClient:
    """S3-compatible object store client bound to one bucket.

    Uses boto3 for all storage operations.
    """

    def __init__(self, *, config: "BucketConfig", client: Any | None = None) -> None:
        """Initialize the S3 client from bucket configuration.

        Args:
            config: Validated bucket configuration.
            client: Pre-built boto3 client, mainly for tests.

        Raises:
            StorageError: If boto3 is not installed.
        """
        self._config = config
        self._client = client if client is not None else self._build_client(config)

    @staticmethod
    def _build_client(config: "BucketConfig") -> Any:
        """Create a boto3 S3 client from configuration."""
        try:
            import boto3
            from botocore.config import Config
        except ImportError as exc:
            raise StorageError(
                "boto3 and botocore are required for the object store client. "
                "Install with: pip install boto3"
            ) from exc

        addressing_style = (config.addressing_style or "virtual").strip().lower()
        return boto3.client(
            "s3",
            endpoint_url=_normalize_endpoint(config.endpoint),
            region_name=config.region,
            aws_access_key_id=config.access_key_id,
            aws_secret_access_key=config.access_key_secret,
            config=Config(
                signature_version="s3v4",
                s3={"addressing_style": addressing_style},
            ),
        )

    @property
    def bucket(self) -> str:
        return self._config.bucket

    def put_object(self, *, object_key: str, body: BinaryIO) -> None:
        """Upload a body as a single object."""
        try:
            self._client.put_object(Bucket=self.bucket, Key=object_key, Body=body)
        except Exception as exc:
            raise _translate_error(exc, "Failed to put object") from exc

    def initiate_multipart_upload(self, *, object_key: str) -> MultipartUpload:
        """Initialize a multipart upload session."""
        try:
            response = self._client.create_multipart_upload(
                Bucket=self.bucket, Key=object_key
            )
        except Exception as exc:
            raise _translate_error(exc, "Failed to create multipart upload") from exc

        upload_id = response.get("UploadId")
        if not upload_id:
            raise StorageError("S3 response missing UploadId")

        return MultipartUpload(
            upload_id=str(upload_id),
            bucket=self.bucket,
            object_key=object_key,
        )

    def upload_part(
        self,
        *,
        upload: MultipartUpload,
        data: bytes,
        part_number: int,
    ) -> CompletedPart:
        """Upload one part and return the descriptor the service acknowledged."""
        try:
            response = self._client.upload_part(
                Bucket=upload.bucket,
                Key=upload.object_key,
                UploadId=upload.upload_id,
                PartNumber=int(part_number),
                Body=data,
                ContentLength=len(data),
            )
        except Exception as exc:
            raise _translate_error(exc, "Failed to upload part") from exc

        etag = response.get("ETag")
        if not etag:
            raise StorageError("S3 response missing ETag")
        return CompletedPart(part_number=int(part_number), etag=str(etag))

    def complete_multipart_upload(
        self,
        *,
        upload: MultipartUpload,
        parts: Sequence[CompletedPart],
    ) -> None:
        """Complete a multipart upload by combining all parts."""
        multipart_payload = {
            "Parts": [
                {"ETag": part.etag, "PartNumber": int(part.part_number)}
                for part in parts
            ]
        }

        try:
            self._client.complete_multipart_upload(
                Bucket=upload.bucket,
                Key=upload.object_key,
                UploadId=upload.upload_id,
                MultipartUpload=multipart_payload,
            )
        except Exception as exc:
            raise _translate_error(exc, "Failed to complete multipart upload") from exc

    def abort_multipart_upload(self, *, upload: MultipartUpload) -> None:
        """Abort a multipart upload and clean up uploaded parts."""
        try:
            self._client.abort_multipart_upload(
                Bucket=upload.bucket,
                Key=upload.object_key,
                UploadId=upload.upload_id,
            )
        except Exception as exc:
            raise _translate_error(exc, "Failed to abort multipart upload") from exc

    def list_objects(
        self,
        *,
        prefix: str,
        delimiter: str,
        cursor: str | None,
    ) -> ListingPage:
        """Fetch one page of a delimiter-grouped listing."""
        params: dict[str, Any] = {
            "Bucket": self.bucket,
            "Prefix": prefix,
            "Delimiter": delimiter,
        }
        if cursor:
            params["ContinuationToken"] = cursor

        try:
            response = self._client.list_objects_v2(**params)
        except Exception as exc:
            raise _translate_error(exc, "Failed to list objects") from exc

        return ListingPage(
            objects=tuple(item["Key"] for item in response.get("Contents") or ()),
            common_prefixes=tuple(
                item["Prefix"] for item in response.get("CommonPrefixes") or ()
            ),
            next_cursor=response.get("NextContinuationToken"),
            is_truncated=bool(response.get("IsTruncated")),
        )

    def get_object_meta(self, *, object_key: str) -> ObjectHead:
        """Get object metadata without downloading the content."""
        try:
            response = self._client.head_object(Bucket=self.bucket, Key=object_key)
        except Exception as exc:
            raise _translate_error(exc, "Failed to get object metadata") from exc

        size = response.get("ContentLength")
        if size is None:
            raise StorageError("S3 response missing ContentLength")
        return ObjectHead(
            size_bytes=int(size),
            etag=response.get("ETag"),
            content_type=response.get("ContentType"),
        )

    def get_object(
        self,
        *,
        object_key: str,
        byte_range: ByteRange | None = None,
    ) -> BinaryIO:
        """Open a streaming body over the object or a range of it."""
        params: dict[str, Any] = {"Bucket": self.bucket, "Key": object_key}
        if byte_range is not None:
            params["Range"] = byte_range.header()

        try:
            response = self._client.get_object(**params)
        except Exception as exc:
            raise _translate_error(exc, "Failed to get object") from exc
        return response["Body"]

    def delete_object(self, *, object_key: str) -> None:
        """Delete an object from storage."""
        try:
            self._client.delete_object(Bucket=self.bucket, Key=object_key)
        except Exception as exc:
            raise _translate_error(exc, "Failed to delete object") from exc

    def object_exists(self, *, object_key: str) -> bool:
        """Check object existence with a HEAD request."""
        try:
            self._client.head_object(Bucket=self.bucket, Key=object_key)
        except Exception as exc:
            error = _translate_error(exc, "Failed to check object")
            if isinstance(error, ServiceError) and error.status_code == 404:
                return False
            raise error from exc
        return True

    def create_bucket(self) -> None:
        """Create the configured bucket. Only used to provision test buckets."""
        try:
            self._client.create_bucket(Bucket=self.bucket)
        except Exception as exc:
            raise _translate_error(exc, "Failed to create bucket") from exc
        logger.info(
            "bucket_created bucket=%s",
            self.bucket,
            extra={"extra": {"bucket": self.bucket}},
        )

    def delete_bucket(self) -> None:
        """Delete the configured bucket; it must already be empty."""
        try:
            self._client.delete_bucket(Bucket=self.bucket)
        except Exception as exc:
            raise _translate_error(exc, "Failed to delete bucket") from exc
        logger.info(
            "bucket_deleted bucket=%s",
            self.bucket,
            extra={"extra": {"bucket": self.bucket}},
        )
