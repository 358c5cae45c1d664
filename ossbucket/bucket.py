"""Bucket adapter exposing an OSS bucket through the generic bucket interface.

Bucket holds only immutable references (name, configuration, client), so a
single instance can serve concurrent callers; every piece of mutable state
(multipart session, listing cursor, read position) lives inside one call.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Any, BinaryIO, Generator

from ossbucket.common.cancellation import Cancellation
from ossbucket.common.config import BucketConfig
from ossbucket.common.errors import EmptyNameError
from ossbucket.infra.observability.metrics import (
    MULTIPART_PARTS,
    OPERATION_DURATION,
    OPERATION_FAILURES,
    OPERATIONS,
)
from ossbucket.infra.storage.client import ObjectStoreClient, StorageError, is_not_found
from ossbucket.infra.storage.s3_client import S3StorageClient
from ossbucket.services import listing, multipart, ranges
from ossbucket.services.chunking import PART_SIZE, as_sized_source

logger = logging.getLogger("objstore")


class Bucket:
    """Generic bucket interface backed by an object store client."""

    def __init__(
        self,
        client: ObjectStoreClient,
        *,
        config: BucketConfig | None = None,
        part_size: int = PART_SIZE,
    ) -> None:
        self._client = client
        self._config = config
        self._name = client.bucket
        self._part_size = part_size

    @classmethod
    def from_config(
        cls,
        config: BucketConfig,
        *,
        client: ObjectStoreClient | None = None,
        part_size: int = PART_SIZE,
    ) -> "Bucket":
        """Validate ``config`` and build a bucket on top of an S3 client."""
        config.validate()
        if client is None:
            try:
                client = S3StorageClient(config=config)
            except StorageError as exc:
                raise StorageError("create aliyun oss client failed") from exc
        return cls(client, config=config, part_size=part_size)

    @property
    def name(self) -> str:
        return self._name

    @property
    def client(self) -> ObjectStoreClient:
        return self._client

    @contextmanager
    def _instrument(
        self, operation: str, *, not_found_ok: bool = False
    ) -> Generator[None, None, None]:
        OPERATIONS.labels(bucket=self._name, operation=operation).inc()
        start = time.perf_counter()
        try:
            yield
        except Exception as exc:
            if not (not_found_ok and is_not_found(exc)):
                OPERATION_FAILURES.labels(bucket=self._name, operation=operation).inc()
            raise
        finally:
            OPERATION_DURATION.labels(bucket=self._name, operation=operation).observe(
                time.perf_counter() - start
            )

    def upload(self, name: str, source: Any, *, cancel: Cancellation | None = None) -> None:
        """Upload the contents of ``source`` as object ``name``.

        ``source`` must have a knowable length: bytes, an in-memory buffer, a
        regular file opened in binary mode, or any object implementing
        ``total_size()`` and ``read()``.
        """
        if not name:
            raise EmptyNameError("given object name should not be empty")
        with self._instrument("upload"):
            parts = multipart.upload(
                self._client,
                name,
                as_sized_source(source),
                part_size=self._part_size,
                cancel=cancel,
            )
        if parts:
            MULTIPART_PARTS.labels(bucket=self._name).inc(len(parts))
        logger.info(
            "object_uploaded bucket=%s key=%s parts=%s",
            self._name,
            name,
            len(parts),
            extra={"extra": {"bucket": self._name, "key": name, "parts": len(parts)}},
        )

    def delete(self, name: str) -> None:
        """Remove the object with the given name."""
        with self._instrument("delete"):
            try:
                self._client.delete_object(object_key=name)
            except StorageError as exc:
                raise StorageError(f"delete oss object {name}") from exc
        logger.debug("object_deleted bucket=%s key=%s", self._name, name)

    def _get_range(self, operation: str, name: str, offset: int, length: int) -> BinaryIO:
        with self._instrument(operation, not_found_ok=True):
            byte_range = ranges.resolve(self._client, name, offset, length)
            try:
                return self._client.get_object(object_key=name, byte_range=byte_range)
            except StorageError as exc:
                raise StorageError(f"get oss object {name}") from exc

    def get(self, name: str) -> BinaryIO:
        """Return a reader for the given object name. The caller closes it."""
        return self._get_range("get", name, 0, ranges.READ_TO_END)

    def get_range(self, name: str, offset: int, length: int) -> BinaryIO:
        """Return a reader for ``length`` bytes from ``offset``; -1 reads to the end.

        An offset at or beyond the object size raises InvalidRangeError. That
        includes offset 0 on an empty object, which needs ``length=-1``.
        """
        return self._get_range("get_range", name, offset, length)

    def exists(self, name: str) -> bool:
        """Check if the given object exists in the bucket."""
        with self._instrument("exists"):
            try:
                return self._client.object_exists(object_key=name)
            except StorageError as exc:
                if self.is_obj_not_found_err(exc):
                    return False
                raise StorageError(f"could not check if object {name} exists") from exc

    def iter(
        self,
        directory: str,
        visit: listing.Visitor,
        *,
        cancel: Cancellation | None = None,
    ) -> None:
        """Call ``visit`` for each entry in ``directory`` (not recursive).

        The argument to ``visit`` is the full object name including the
        directory prefix; sub-directories are reported with a trailing
        delimiter.
        """
        with self._instrument("iter"):
            listing.iterate(self._client, directory, visit, cancel=cancel)

    def is_obj_not_found_err(self, err: BaseException | None) -> bool:
        """Return True if ``err`` means the object was not found."""
        return is_not_found(err)

    def close(self) -> None:
        logger.debug("bucket_closed bucket=%s", self._name)


def new_bucket(conf: str | bytes, *, client: ObjectStoreClient | None = None) -> Bucket:
    """Build a bucket from a YAML configuration document."""
    return Bucket.from_config(BucketConfig.from_yaml(conf), client=client)
