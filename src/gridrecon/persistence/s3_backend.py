"""S3 backend implementing ISnapshotStore as one JSON document per project."""

from __future__ import annotations

import logging

import boto3
from botocore.exceptions import ClientError
from pydantic import ValidationError

from gridrecon.core.exceptions import StoreError
from gridrecon.models.dataset import DatasetSnapshot

logger = logging.getLogger(__name__)


class S3SnapshotStore:
    """Production ISnapshotStore backed by S3."""

    def __init__(self, bucket: str, prefix: str = "projects/", region: str = "us-east-1",
                 endpoint_url: str | None = None) -> None:
        self._bucket = bucket
        self._prefix = prefix
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._client = boto3.client("s3", **kwargs)

    def key_for(self, project_id: str) -> str:
        return f"{self._prefix}{project_id}/snapshot.json"

    def load(self, project_id: str) -> DatasetSnapshot:
        """Stored snapshot, or an empty one when the project has none yet."""
        key = self.key_for(project_id)
        try:
            resp = self._client.get_object(Bucket=self._bucket, Key=key)
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                logger.debug("No snapshot at s3://%s/%s, starting empty", self._bucket, key)
                return DatasetSnapshot()
            raise StoreError(f"S3 read failed for {key!r}: {exc}") from exc
        try:
            return DatasetSnapshot.model_validate_json(resp["Body"].read())
        except ValidationError as exc:
            raise StoreError(f"Snapshot at {key!r} is not a valid dataset snapshot: {exc}") from exc

    def save(self, project_id: str, snapshot: DatasetSnapshot) -> None:
        key = self.key_for(project_id)
        try:
            self._client.put_object(
                Bucket=self._bucket, Key=key,
                Body=snapshot.model_dump_json().encode("utf-8"),
                ContentType="application/json",
            )
        except ClientError as exc:
            raise StoreError(f"S3 write failed for {key!r}: {exc}") from exc
