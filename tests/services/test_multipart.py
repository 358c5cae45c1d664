"""Tests for multipart upload orchestration."""

from __future__ import annotations

import pytest

from ossbucket.common.cancellation import Cancellation
from ossbucket.common.errors import (
    AbortFailedError,
    CancelledError,
    UploadPartFailedError,
)
from ossbucket.infra.storage.client import CompletedPart, StorageError
from ossbucket.services.chunking import as_sized_source
from ossbucket.services.multipart import upload
from tests.services.mock_storage import BrokenStorageError, MockObjectStoreClient

PART = 4


@pytest.fixture()
def client():
    return MockObjectStoreClient()


def _operations(client):
    return [name for name, _ in client.calls]


class TestSinglePut:
    def test_small_object_uses_single_put(self, client):
        parts = upload(client, "obj", as_sized_source(b"abc"), part_size=PART)

        assert parts == []
        assert _operations(client) == ["put_object"]
        assert client.objects["obj"] == b"abc"

    def test_empty_object_uses_single_put(self, client):
        upload(client, "empty", as_sized_source(b""), part_size=PART)

        assert _operations(client) == ["put_object"]
        assert client.objects["empty"] == b""
        assert client.uploads == {}

    def test_put_failure_is_wrapped(self, client):
        client.failures["put_object"] = BrokenStorageError("boom")

        with pytest.raises(StorageError, match="failed to upload oss object obj") as info:
            upload(client, "obj", as_sized_source(b"abc"), part_size=PART)

        assert isinstance(info.value.__cause__, BrokenStorageError)

    def test_short_source_is_wrapped_with_name(self, client):
        class Short:
            def total_size(self):
                return 3

            def read(self, size=-1):
                return b""

        with pytest.raises(StorageError, match="failed to upload oss object obj") as info:
            upload(client, "obj", Short(), part_size=PART)

        assert "ended after 0 of 3 bytes" in str(info.value.__cause__)
        assert client.count("put_object") == 0


class TestMultipart:
    def test_exact_multiple_uploads_no_remainder_part(self, client):
        parts = upload(client, "obj", as_sized_source(b"abcd"), part_size=PART)

        assert [p.part_number for p in parts] == [1]
        assert client.count("upload_part") == 1
        assert client.objects["obj"] == b"abcd"

    def test_parts_in_order_with_remainder(self, client):
        parts = upload(client, "obj", as_sized_source(b"abcdefghij"), part_size=PART)

        sizes = [args for name, args in client.calls if name == "upload_part"]
        assert sizes == [(1, 4), (2, 4), (3, 2)]
        assert [p.part_number for p in parts] == [1, 2, 3]
        assert client.objects["obj"] == b"abcdefghij"

    def test_completion_receives_acknowledged_descriptors(self, client):
        parts = upload(client, "obj", as_sized_source(b"abcdefgh"), part_size=PART)

        completed = [args for name, args in client.calls if name == "complete_multipart_upload"]
        assert completed == [parts]
        assert parts == [
            CompletedPart(part_number=1, etag="etag-mock-upload-1-1"),
            CompletedPart(part_number=2, etag="etag-mock-upload-1-2"),
        ]

    def test_operation_sequence(self, client):
        upload(client, "obj", as_sized_source(b"abcdefghi"), part_size=PART)

        assert _operations(client) == [
            "initiate_multipart_upload",
            "upload_part",
            "upload_part",
            "upload_part",
            "complete_multipart_upload",
        ]

    def test_initiate_failure_is_wrapped(self, client):
        client.failures["initiate_multipart_upload"] = BrokenStorageError("down")

        with pytest.raises(StorageError, match="failed to initiate multi-part upload"):
            upload(client, "obj", as_sized_source(b"abcdefgh"), part_size=PART)

        assert client.count("upload_part") == 0

    def test_complete_failure_is_wrapped(self, client):
        client.failures["complete_multipart_upload"] = BrokenStorageError("down")

        with pytest.raises(StorageError, match="failed to complete multi-part upload"):
            upload(client, "obj", as_sized_source(b"abcdefgh"), part_size=PART)


class TestPartFailure:
    def test_failing_middle_part_aborts_once_and_never_completes(self, client):
        client.failures[("upload_part", 2)] = BrokenStorageError("part lost")

        with pytest.raises(UploadPartFailedError) as info:
            upload(client, "obj", as_sized_source(b"abcdefghij"), part_size=PART)

        assert info.value.part_number == 2
        assert "chunk 2 of 3" in str(info.value)
        assert isinstance(info.value.__cause__, BrokenStorageError)
        assert client.count("abort_multipart_upload") == 1
        assert client.count("complete_multipart_upload") == 0
        assert client.count("upload_part") == 2
        assert client.uploads["mock-upload-1"]["aborted"] is True
        assert "obj" not in client.objects

    def test_abort_failure_masks_part_failure(self, client):
        client.failures[("upload_part", 1)] = BrokenStorageError("part lost")
        client.failures["abort_multipart_upload"] = BrokenStorageError("abort lost")

        with pytest.raises(AbortFailedError) as info:
            upload(client, "obj", as_sized_source(b"abcdefgh"), part_size=PART)

        assert info.value.part_number == 1
        assert str(info.value.__cause__) == "abort lost"
        assert str(info.value.__cause__.__context__) == "part lost"
        assert client.count("complete_multipart_upload") == 0

    def test_short_source_is_a_part_failure(self, client):
        class Shrinking:
            def __init__(self):
                self._data = b"abcdef"

            def total_size(self):
                return 12

            def read(self, size=-1):
                chunk, self._data = self._data[:size], self._data[size:]
                return chunk

        with pytest.raises(UploadPartFailedError) as info:
            upload(client, "obj", Shrinking(), part_size=PART)

        assert info.value.part_number == 2
        assert client.count("abort_multipart_upload") == 1

    def test_cancelled_before_part_aborts(self, client):
        cancel = Cancellation()
        cancel.cancel()

        with pytest.raises(CancelledError):
            upload(client, "obj", as_sized_source(b"abcdefgh"), part_size=PART, cancel=cancel)

        assert client.count("upload_part") == 0
        assert client.count("abort_multipart_upload") == 1
