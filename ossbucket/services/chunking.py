"""Upload planning: how many fixed-size parts a byte source splits into."""

from __future__ import annotations

import io
import os
import stat
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from ossbucket.common.errors import UnsupportedSourceError

# Part size for multipart upload.
PART_SIZE = 128 * 1024 * 1024


@runtime_checkable
class SizedSource(Protocol):
    """Readable byte source that knows how many bytes remain."""

    def total_size(self) -> int: ...

    def read(self, size: int = -1) -> bytes: ...


@dataclass(frozen=True, slots=True)
class UploadPlan:
    full_part_count: int
    remainder_bytes: int

    @property
    def is_single_put(self) -> bool:
        return self.full_part_count == 0


class _BufferSource:
    """In-memory stream with a fixed length (BytesIO and friends)."""

    def __init__(self, stream: Any) -> None:
        self._stream = stream

    def total_size(self) -> int:
        return self._stream.getbuffer().nbytes - self._stream.tell()

    def read(self, size: int = -1) -> bytes:
        return self._stream.read(size)


class _FileSource:
    """File-backed stream sized through ``fstat``."""

    def __init__(self, stream: Any) -> None:
        self._stream = stream

    def total_size(self) -> int:
        size = os.fstat(self._stream.fileno()).st_size
        return max(size - self._stream.tell(), 0)

    def read(self, size: int = -1) -> bytes:
        return self._stream.read(size)


def as_sized_source(obj: Any) -> SizedSource:
    """Adapt ``obj`` to :class:`SizedSource` by the capabilities it exposes.

    Raises:
        UnsupportedSourceError: The total length cannot be determined.
    """
    if isinstance(obj, SizedSource):
        return obj
    if isinstance(obj, io.TextIOBase) or "b" not in getattr(obj, "mode", "b"):
        raise UnsupportedSourceError(
            f"unsupported upload source {type(obj).__name__}: text streams "
            "are not byte sources"
        )
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return _BufferSource(io.BytesIO(bytes(obj)))
    if callable(getattr(obj, "getbuffer", None)) and callable(getattr(obj, "tell", None)):
        return _BufferSource(obj)
    fileno = getattr(obj, "fileno", None)
    if callable(fileno) and callable(getattr(obj, "tell", None)):
        try:
            is_regular = stat.S_ISREG(os.fstat(fileno()).st_mode)
        except (OSError, ValueError) as exc:
            raise UnsupportedSourceError(
                f"unsupported upload source {type(obj).__name__}: {exc}"
            ) from exc
        if is_regular:
            return _FileSource(obj)
    raise UnsupportedSourceError(
        f"unsupported upload source {type(obj).__name__}: total size is unknown"
    )


def plan(source: SizedSource, part_size: int = PART_SIZE) -> UploadPlan:
    """Split ``source`` into full parts of ``part_size`` plus a remainder."""
    if part_size <= 0:
        raise ValueError("part_size must be positive")
    total_size = source.total_size()
    if total_size < 0:
        raise UnsupportedSourceError("upload source reported a negative size")
    full_part_count, remainder_bytes = divmod(total_size, part_size)
    return UploadPlan(full_part_count=full_part_count, remainder_bytes=remainder_bytes)
