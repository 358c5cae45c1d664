from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping

import yaml

from ossbucket.common.errors import ConfigInvalidError

ENV_FILE = Path(".env")

ENV_PREFIX = "ALIYUNOSS_"

REQUIRED_FIELDS: tuple[str, ...] = (
    "endpoint",
    "bucket",
    "access_key_id",
    "access_key_secret",
)


def _load_env_file() -> None:
    if not ENV_FILE.exists():
        return
    for raw_line in ENV_FILE.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key and key not in os.environ:
            os.environ[key] = value


@dataclass(frozen=True)
class BucketConfig:
    endpoint: str = ""
    bucket: str = ""
    access_key_id: str = field(default="", repr=False)
    access_key_secret: str = field(default="", repr=False)
    region: str | None = None
    addressing_style: str = "virtual"

    def missing_fields(self) -> list[str]:
        return [name for name in REQUIRED_FIELDS if not getattr(self, name)]

    def validate(self) -> "BucketConfig":
        missing = self.missing_fields()
        if missing:
            raise ConfigInvalidError(
                "aliyun oss " + " or ".join(missing) + " is not present in config"
            )
        return self

    def with_bucket(self, bucket: str) -> "BucketConfig":
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values["bucket"] = bucket
        return BucketConfig(**values)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "BucketConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigInvalidError(f"unknown config fields: {', '.join(unknown)}")
        values = {
            key: "" if value is None and key in REQUIRED_FIELDS else value
            for key, value in data.items()
        }
        for name in REQUIRED_FIELDS:
            if not isinstance(values.get(name, ""), str):
                raise ConfigInvalidError(f"config field {name} must be a string")
        return cls(**values)

    @classmethod
    def from_yaml(cls, conf: str | bytes) -> "BucketConfig":
        try:
            data = yaml.safe_load(conf)
        except yaml.YAMLError as exc:
            raise ConfigInvalidError("parse aliyun oss config file failed") from exc
        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise ConfigInvalidError("aliyun oss config must be a mapping")
        return cls.from_mapping(data)

    @classmethod
    def from_environment(cls) -> "BucketConfig":
        _load_env_file()
        return cls(
            endpoint=os.environ.get(f"{ENV_PREFIX}ENDPOINT", ""),
            bucket=os.environ.get(f"{ENV_PREFIX}BUCKET", ""),
            access_key_id=os.environ.get(f"{ENV_PREFIX}ACCESS_KEY_ID", ""),
            access_key_secret=os.environ.get(f"{ENV_PREFIX}ACCESS_KEY_SECRET", ""),
            region=os.environ.get(f"{ENV_PREFIX}REGION") or None,
            addressing_style=os.environ.get(
                f"{ENV_PREFIX}ADDRESSING_STYLE", cls.addressing_style
            ),
        )
