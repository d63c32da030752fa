"""
Thin wrapper around boto3 for storing the simplified timeseries.

Objects land at ``private/{identity_id}/{key}``. The key itself comes from
a key-generator callable so callers (and tests) decide how keys are made.
"""
import logging
import uuid
from typing import Callable, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ridetrace.errors import ActivityError
from ridetrace.models.output import TimeseriesPayload

logger = logging.getLogger(__name__)

KeyGenerator = Callable[[], str]


class SinkFailure(ActivityError):
    """Raised when the payload could not be written to the object store."""


def make_key_generator(prefix: str = "timeseries") -> KeyGenerator:
    """Keys like ``timeseries/<uuid4>.json``."""
    def generate() -> str:
        return f"{prefix}/{uuid.uuid4()}.json"
    return generate


def object_path(identity_id: str, key: str) -> str:
    return f"private/{identity_id}/{key}"


class S3TimeseriesSink:
    """Writes TimeseriesPayload JSON documents to one S3 bucket."""

    def __init__(self, bucket: str, region: str = "us-east-1", client=None):
        """
        Args:
            bucket: Target bucket name.
            region: AWS region for the default client.
            client: Pre-built S3 client (or MagicMock in tests).
        """
        self._bucket = bucket
        self._client = client or boto3.client("s3", region_name=region)

    @property
    def bucket(self) -> str:
        return self._bucket

    def upload(self, payload: TimeseriesPayload, identity_id: str, key: str) -> str:
        """
        Store `payload` and return the full object path.

        Raises:
            SinkFailure: on any boto3/botocore error.
        """
        path = object_path(identity_id, key)
        body = payload.model_dump_json(by_alias=True).encode("utf-8")
        logger.info("Uploading %d bytes to s3://%s/%s", len(body), self._bucket, path)
        try:
            self._client.put_object(
                Bucket=self._bucket,
                Key=path,
                Body=body,
                ContentType="application/json",
            )
        except (BotoCoreError, ClientError) as exc:
            raise SinkFailure(f"failed to upload s3://{self._bucket}/{path}: {exc}") from exc
        return path


def build_sink(bucket: str, region: str) -> Optional[S3TimeseriesSink]:
    """Sink for the configured bucket, or None when no bucket is set."""
    if not bucket:
        return None
    return S3TimeseriesSink(bucket=bucket, region=region)
