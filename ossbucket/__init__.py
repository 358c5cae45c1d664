"""Aliyun OSS bucket adapter."""

from ossbucket.bucket import Bucket, new_bucket
from ossbucket.common.cancellation import Cancellation
from ossbucket.common.config import BucketConfig
from ossbucket.common.errors import (
    AbortFailedError,
    BucketError,
    CancelledError,
    ConfigInvalidError,
    EmptyNameError,
    InvalidRangeError,
    ListingFailedError,
    UnsupportedSourceError,
    UploadPartFailedError,
    VisitorFailedError,
)
from ossbucket.infra.storage import ServiceError, StorageError, is_not_found
from ossbucket.services.chunking import PART_SIZE

__all__ = [
    "AbortFailedError",
    "Bucket",
    "BucketConfig",
    "BucketError",
    "Cancellation",
    "CancelledError",
    "ConfigInvalidError",
    "EmptyNameError",
    "InvalidRangeError",
    "ListingFailedError",
    "PART_SIZE",
    "ServiceError",
    "StorageError",
    "UnsupportedSourceError",
    "UploadPartFailedError",
    "VisitorFailedError",
    "is_not_found",
    "new_bucket",
]
