"""Provisioning of isolated buckets for tests that talk to a live service."""

from __future__ import annotations

import logging
import os
import random
import re
import time
from typing import Callable

from ossbucket.bucket import Bucket
from ossbucket.common.config import BucketConfig
from ossbucket.common.errors import ConfigInvalidError
from ossbucket.infra.storage.client import StorageError
from ossbucket.infra.storage.s3_client import S3StorageClient

ALLOW_EXISTING_BUCKET_ENV = "OSSBUCKET_ALLOW_EXISTING_BUCKET_USE"
MAX_BUCKET_NAME_LENGTH = 63

logger = logging.getLogger("objstore")


def _bucket_name_for(test_name: str) -> str:
    suffix = f"{random.Random(time.time_ns()).getrandbits(63):x}"
    slug = re.sub(r"[^a-z0-9-]", "-", f"test-{test_name.lower()}-{suffix}")
    return slug[:MAX_BUCKET_NAME_LENGTH].rstrip("-")


def empty_bucket(bucket: Bucket) -> None:
    """Delete every object in ``bucket``, descending into sub-directories."""
    pending = [""]
    while pending:
        directory = pending.pop()
        found: list[str] = []
        bucket.iter(directory, found.append)
        for name in found:
            if name.endswith("/"):
                pending.append(name)
            else:
                bucket.delete(name)


def new_test_bucket(test_name: str) -> tuple[Bucket, Callable[[], None]]:
    """Return a bucket for ``test_name`` and a cleanup callable.

    Without ``ALIYUNOSS_BUCKET`` a temporary bucket is created and the cleanup
    empties and deletes it. A named bucket is only reused when
    ``OSSBUCKET_ALLOW_EXISTING_BUCKET_USE=true`` and it is empty; cleanup is
    then left to the operator.
    """
    config = BucketConfig.from_environment()
    missing = [name for name in config.missing_fields() if name != "bucket"]
    if missing:
        raise ConfigInvalidError(
            "aliyun oss " + " or ".join(missing) + " is not present in environment"
        )

    if config.bucket:
        if os.environ.get(ALLOW_EXISTING_BUCKET_ENV) != "true":
            raise ConfigInvalidError(
                "ALIYUNOSS_BUCKET is defined. Unset it to let tests create a "
                f"temporary bucket, or set {ALLOW_EXISTING_BUCKET_ENV}=true to run "
                "against the provided (empty) bucket."
            )
        bucket = Bucket.from_config(config)

        def reject(name: str) -> None:
            raise StorageError(f"bucket {config.bucket} is not empty")

        bucket.iter("", reject)
        logger.warning(
            "reusing_bucket bucket=%s manual cleanup afterwards is required",
            config.bucket,
        )
        return bucket, lambda: None

    config = config.with_bucket(_bucket_name_for(test_name))
    client = S3StorageClient(config=config)
    client.create_bucket()
    bucket = Bucket.from_config(config, client=client)

    def cleanup() -> None:
        empty_bucket(bucket)
        try:
            client.delete_bucket()
        except StorageError as exc:
            logger.warning("deleting bucket %s failed: %s", config.bucket, exc)

    return bucket, cleanup
