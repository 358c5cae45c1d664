from __future__ import annotations

import os

import pytest

from ossbucket.bucket import Bucket
from ossbucket.common.config import BucketConfig
from tests.services.mock_storage import MockObjectStoreClient

# Small part size so multipart paths run on a few bytes.
TEST_PART_SIZE = 8


@pytest.fixture()
def mock_client():
    return MockObjectStoreClient()


@pytest.fixture()
def bucket_config():
    return BucketConfig(
        endpoint="oss-cn-hangzhou.aliyuncs.com",
        bucket="test-bucket",
        access_key_id="test-key",
        access_key_secret="test-secret",
    )


@pytest.fixture()
def bucket(mock_client, bucket_config):
    return Bucket.from_config(
        bucket_config, client=mock_client, part_size=TEST_PART_SIZE
    )


ENV_KEYS = (
    "ALIYUNOSS_ENDPOINT",
    "ALIYUNOSS_BUCKET",
    "ALIYUNOSS_ACCESS_KEY_ID",
    "ALIYUNOSS_ACCESS_KEY_SECRET",
    "ALIYUNOSS_REGION",
    "ALIYUNOSS_ADDRESSING_STYLE",
)


@pytest.fixture(autouse=True)
def isolated_environment(request, monkeypatch, tmp_path):
    """Keep ALIYUNOSS_* variables and any local .env out of tests."""
    if request.node.get_closest_marker("live"):
        yield
        return
    absent = [key for key in ENV_KEYS if key not in os.environ]
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    yield
    # values loaded from a test's .env file go straight into os.environ
    for key in absent:
        os.environ.pop(key, None)
