"""Object storage abstraction layer.

This module provides a protocol-based abstraction for object storage backends,
with an S3-compatible implementation that talks to Aliyun OSS.
"""

from .client import (
    ByteRange,
    CompletedPart,
    ListingPage,
    MultipartUpload,
    ObjectHead,
    ObjectStoreClient,
    ServiceError,
    StorageError,
    is_not_found,
)

__all__ = [
    "ByteRange",
    "CompletedPart",
    "ListingPage",
    "MultipartUpload",
    "ObjectHead",
    "ObjectStoreClient",
    "ServiceError",
    "StorageError",
    "is_not_found",
]
