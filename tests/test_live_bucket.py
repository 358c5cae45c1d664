"""Acceptance checks against a real OSS endpoint.

Skipped unless ALIYUNOSS_ENDPOINT, ALIYUNOSS_ACCESS_KEY_ID and
ALIYUNOSS_ACCESS_KEY_SECRET are set.
"""

from __future__ import annotations

import os

import pytest

from ossbucket.testing import new_test_bucket

pytestmark = [
    pytest.mark.live,
    pytest.mark.skipif(
        not all(
            os.environ.get(key)
            for key in (
                "ALIYUNOSS_ENDPOINT",
                "ALIYUNOSS_ACCESS_KEY_ID",
                "ALIYUNOSS_ACCESS_KEY_SECRET",
            )
        ),
        reason="aliyun oss credentials are not configured",
    ),
]


@pytest.fixture()
def live_bucket(request):
    bucket, cleanup = new_test_bucket(request.node.name)
    yield bucket
    cleanup()


def test_upload_read_iterate_delete(live_bucket):
    live_bucket.upload("id1/obj_1.some", b"@test-data@")
    live_bucket.upload("id1/sub/obj_2.some", b"@test-data2@")

    assert live_bucket.exists("id1/obj_1.some")
    with live_bucket.get("id1/obj_1.some") as reader:
        assert reader.read() == b"@test-data@"
    with live_bucket.get_range("id1/obj_1.some", 1, 3) as reader:
        assert reader.read() == b"tes"
    with live_bucket.get_range("id1/obj_1.some", 3, 100) as reader:
        assert reader.read() == b"st-data@"

    seen = []
    live_bucket.iter("id1", seen.append)
    assert sorted(seen) == ["id1/obj_1.some", "id1/sub/"]

    live_bucket.delete("id1/obj_1.some")
    assert not live_bucket.exists("id1/obj_1.some")


def test_missing_object_is_not_found(live_bucket):
    with pytest.raises(Exception) as info:
        live_bucket.get("does/not/exist")

    assert live_bucket.is_obj_not_found_err(info.value)
