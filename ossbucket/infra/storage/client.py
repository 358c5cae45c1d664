"""Object store client protocol and data types.

This module defines the capability the bucket adapter consumes from the
remote object store: single puts, the multipart upload lifecycle, paginated
listing, metadata lookups, (ranged) reads, deletes and existence checks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import BinaryIO, Protocol, Sequence


class StorageError(RuntimeError):
    """Raised when object storage operations fail."""


class ServiceError(StorageError):
    """Structured error reported by the storage service itself.

    Carries the HTTP status and the service error code, as opposed to
    transport failures (connection resets, timeouts) which surface as plain
    ``StorageError``.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        code: str | None = None,
        request_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.request_id = request_id


def is_not_found(err: BaseException | None) -> bool:
    """Return True if ``err`` means the service reported the object missing.

    Only a ``ServiceError`` with a 404 status counts. The ``__cause__`` chain
    is followed so errors wrapped with operation context still classify.
    """
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        seen.add(id(err))
        if isinstance(err, ServiceError) and err.status_code == 404:
            return True
        err = err.__cause__
    return False


@dataclass(frozen=True, slots=True)
class CompletedPart:
    """Represents a completed part in a multipart upload."""

    part_number: int
    etag: str


@dataclass(frozen=True, slots=True)
class MultipartUpload:
    """Result of initiating a multipart upload."""

    upload_id: str
    bucket: str
    object_key: str


@dataclass(frozen=True, slots=True)
class ObjectHead:
    """Metadata from a HEAD object request."""

    size_bytes: int
    etag: str | None
    content_type: str | None


@dataclass(frozen=True, slots=True)
class ListingPage:
    """One page of a delimiter-grouped listing."""

    objects: Sequence[str] = field(default_factory=tuple)
    common_prefixes: Sequence[str] = field(default_factory=tuple)
    next_cursor: str | None = None
    is_truncated: bool = False


@dataclass(frozen=True, slots=True)
class ByteRange:
    """Inclusive byte range ``[start, end]``."""

    start: int
    end: int

    def header(self) -> str:
        return f"bytes={self.start}-{self.end}"


class ObjectStoreClient(Protocol):
    """Protocol defining the interface for object storage backends.

    Implementations are bound to a single bucket and must raise
    ``StorageError`` (or ``ServiceError`` for service-reported failures).
    """

    @property
    def bucket(self) -> str:
        """Name of the bucket this client operates on."""
        ...

    def put_object(self, *, object_key: str, body: BinaryIO) -> None:
        """Upload ``body`` as a single object.

        Raises:
            StorageError: If the operation fails.
        """
        ...

    def initiate_multipart_upload(self, *, object_key: str) -> MultipartUpload:
        """Initialize a multipart upload session.

        Args:
            object_key: Object key (path) in the bucket.

        Returns:
            MultipartUpload containing the upload_id for subsequent operations.

        Raises:
            StorageError: If the operation fails.
        """
        ...

    def upload_part(
        self,
        *,
        upload: MultipartUpload,
        data: bytes,
        part_number: int,
    ) -> CompletedPart:
        """Upload one part of a multipart session.

        Args:
            upload: Session returned by initiate_multipart_upload.
            data: Part payload; its length is the part size.
            part_number: Part number (1-based, max 10000).

        Returns:
            CompletedPart as acknowledged by the service.

        Raises:
            StorageError: If the operation fails.
        """
        ...

    def complete_multipart_upload(
        self,
        *,
        upload: MultipartUpload,
        parts: Sequence[CompletedPart],
    ) -> None:
        """Complete a multipart upload by combining all parts.

        Raises:
            StorageError: If the operation fails.
        """
        ...

    def abort_multipart_upload(self, *, upload: MultipartUpload) -> None:
        """Abort a multipart upload and clean up uploaded parts.

        Raises:
            StorageError: If the operation fails.
        """
        ...

    def list_objects(
        self,
        *,
        prefix: str,
        delimiter: str,
        cursor: str | None,
    ) -> ListingPage:
        """Fetch one listing page starting after ``cursor``.

        Raises:
            StorageError: If the operation fails.
        """
        ...

    def get_object_meta(self, *, object_key: str) -> ObjectHead:
        """Get object metadata without downloading the content.

        Raises:
            StorageError: If the object doesn't exist or operation fails.
        """
        ...

    def get_object(
        self,
        *,
        object_key: str,
        byte_range: ByteRange | None = None,
    ) -> BinaryIO:
        """Open a readable stream over the object, or over ``byte_range`` of it.

        Raises:
            StorageError: If the object doesn't exist or operation fails.
        """
        ...

    def delete_object(self, *, object_key: str) -> None:
        """Delete an object from storage.

        Raises:
            StorageError: If the operation fails.
        """
        ...

    def object_exists(self, *, object_key: str) -> bool:
        """Check whether an object exists.

        Raises:
            StorageError: If the check itself fails.
        """
        ...
