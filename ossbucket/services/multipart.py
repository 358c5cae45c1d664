"""Upload orchestration: single put for small objects, multipart otherwise.

A multipart upload runs initiate, then every part in order, then complete.
Any part failure aborts the session before the error surfaces, so a partial
upload is never finalized. Parts share one forward-only cursor over the
source and are therefore uploaded strictly one after another.
"""

from __future__ import annotations

import io
import logging

from ossbucket.common.cancellation import Cancellation
from ossbucket.common.errors import (
    AbortFailedError,
    CancelledError,
    UploadPartFailedError,
)
from ossbucket.infra.storage.client import (
    CompletedPart,
    MultipartUpload,
    ObjectStoreClient,
    StorageError,
)
from ossbucket.services.chunking import PART_SIZE, SizedSource, plan

logger = logging.getLogger("objstore")


def _read_exact(source: SizedSource, size: int) -> bytes:
    chunks: list[bytes] = []
    remaining = size
    while remaining > 0:
        chunk = source.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    if remaining:
        raise StorageError(
            f"upload source ended after {size - remaining} of {size} bytes"
        )
    return b"".join(chunks)


def _part_sizes(full_part_count: int, remainder_bytes: int, part_size: int) -> list[int]:
    sizes = [part_size] * full_part_count
    if remainder_bytes:
        sizes.append(remainder_bytes)
    return sizes


def _abort(
    client: ObjectStoreClient,
    session: MultipartUpload,
    *,
    part_number: int,
    cause: BaseException,
) -> None:
    try:
        client.abort_multipart_upload(upload=session)
    except Exception as exc:
        # The abort failure replaces the part failure; keep the latter visible.
        logger.warning(
            "multipart_part_failure_masked key=%s upload_id=%s part=%s error=%s",
            session.object_key,
            session.upload_id,
            part_number,
            cause,
            extra={
                "extra": {
                    "key": session.object_key,
                    "upload_id": session.upload_id,
                    "part_number": part_number,
                }
            },
        )
        raise AbortFailedError(
            f"failed to abort multi-part upload of {session.object_key} "
            f"after part {part_number} failed",
            object_key=session.object_key,
            part_number=part_number,
        ) from exc
    logger.info(
        "multipart_aborted key=%s upload_id=%s part=%s",
        session.object_key,
        session.upload_id,
        part_number,
    )


def _upload_part(
    client: ObjectStoreClient,
    session: MultipartUpload,
    source: SizedSource,
    *,
    size: int,
    part_number: int,
    part_count: int,
    cancel: Cancellation | None,
) -> CompletedPart:
    try:
        if cancel is not None and cancel.cancelled():
            raise CancelledError(
                f"{cancel.reason()} while uploading {session.object_key} "
                f"at part {part_number}"
            )
        data = _read_exact(source, size)
        part = client.upload_part(upload=session, data=data, part_number=part_number)
    except Exception as exc:
        _abort(client, session, part_number=part_number, cause=exc)
        if isinstance(exc, CancelledError):
            raise
        raise UploadPartFailedError(
            f"failed to upload multi-part chunk {part_number} of {part_count} "
            f"for {session.object_key}",
            object_key=session.object_key,
            part_number=part_number,
        ) from exc
    logger.debug(
        "multipart_part_uploaded key=%s part=%s size=%s",
        session.object_key,
        part_number,
        size,
    )
    return part


def upload(
    client: ObjectStoreClient,
    name: str,
    source: SizedSource,
    *,
    part_size: int = PART_SIZE,
    cancel: Cancellation | None = None,
) -> list[CompletedPart]:
    """Upload ``source`` as object ``name``.

    Returns the part descriptors passed to completion, or an empty list when
    the object went up in a single put.
    """
    upload_plan = plan(source, part_size)

    if upload_plan.is_single_put:
        try:
            data = _read_exact(source, upload_plan.remainder_bytes)
            client.put_object(object_key=name, body=io.BytesIO(data))
        except StorageError as exc:
            raise StorageError(f"failed to upload oss object {name}") from exc
        return []

    try:
        session = client.initiate_multipart_upload(object_key=name)
    except StorageError as exc:
        raise StorageError(f"failed to initiate multi-part upload for {name}") from exc

    sizes = _part_sizes(
        upload_plan.full_part_count, upload_plan.remainder_bytes, part_size
    )
    logger.info(
        "multipart_started key=%s upload_id=%s parts=%s",
        name,
        session.upload_id,
        len(sizes),
        extra={
            "extra": {
                "key": name,
                "upload_id": session.upload_id,
                "parts": len(sizes),
            }
        },
    )

    parts: list[CompletedPart] = []
    for part_number, size in enumerate(sizes, start=1):
        parts.append(
            _upload_part(
                client,
                session,
                source,
                size=size,
                part_number=part_number,
                part_count=len(sizes),
                cancel=cancel,
            )
        )

    try:
        client.complete_multipart_upload(upload=session, parts=parts)
    except StorageError as exc:
        raise StorageError(f"failed to complete multi-part upload of {name}") from exc
    return parts
