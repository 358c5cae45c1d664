from __future__ import annotations

from ossbucket.common.errors import EmptyNameError, InvalidRangeError
from ossbucket.infra.storage.client import ByteRange, ObjectStoreClient

# Length sentinel meaning "read to the end of the object".
READ_TO_END = -1


def resolve(
    client: ObjectStoreClient,
    name: str,
    offset: int,
    length: int,
) -> ByteRange | None:
    """Translate ``(offset, length)`` into an inclusive byte range.

    Returns ``None`` when the whole object should be fetched. The end of the
    range is clamped to the last byte of the object, which costs one
    metadata lookup; its failure propagates unchanged.
    """
    if not name:
        raise EmptyNameError("given object name should not be empty")
    if length == READ_TO_END:
        return None

    end = offset + length - 1
    if offset < 0 or end < offset:
        raise InvalidRangeError(
            f"invalid range specified: start={offset} end={end}"
        )

    size = client.get_object_meta(object_key=name).size_bytes
    if end >= size:
        end = size - 1
    if end < offset:
        raise InvalidRangeError(
            f"invalid range specified: start={offset} is beyond the end of "
            f"{name} (size={size})"
        )
    return ByteRange(start=offset, end=end)
