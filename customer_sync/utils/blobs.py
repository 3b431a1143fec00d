"""Write-only storage for debug artifacts and unrecognized exports."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

import boto3

logger = logging.getLogger(__name__)

SAFE_NAME_RE = re.compile(r"[^A-Za-z0-9._-]+")


class BlobSink:
    def __init__(self, directory: Path, *, bucket: str | None = None, prefix: str = "") -> None:
        self.directory = directory
        self.bucket = bucket if bucket is not None else os.environ.get("AWS_S3_BUCKET")
        self.prefix = prefix

    def put(self, name: str, payload: bytes | str, content_type: str = "application/octet-stream") -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        safe_name = SAFE_NAME_RE.sub("_", name).strip("_") or "blob"
        path = self.directory / safe_name
        data = payload.encode("utf-8") if isinstance(payload, str) else payload
        path.write_bytes(data)
        logger.info("Saved %s (%s, %s bytes)", path, content_type, len(data))
        if self.bucket:
            self._upload(path, content_type)
        return path

    def _upload(self, path: Path, content_type: str) -> None:
        endpoint = os.environ.get("AWS_S3_ENDPOINT")
        session = boto3.session.Session()
        client = session.client(
            "s3",
            endpoint_url=endpoint,
            aws_access_key_id=os.environ.get("AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=os.environ.get("AWS_SECRET_ACCESS_KEY"),
        )
        key = f"{self.prefix}{path.name}"
        client.upload_file(str(path), self.bucket, key, ExtraArgs={"ContentType": content_type})
