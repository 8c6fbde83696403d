"""S3 bucket fixture exposing object read/write and clear primitives."""

from __future__ import annotations

from typing import Any

import boto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from .environment_errors import BucketFixtureError
from .interfaces import BucketFixturePort

logger = structlog.get_logger(__name__)


class S3BucketFixture(BucketFixturePort):
    """Object storage fixture rooted at a `bucket/path` location.

    Keys passed to the file primitives are relative to the location path, and
    clearing only removes objects under that path.
    """

    def __init__(
        self,
        location: str,
        region: str | None = None,
        endpoint_url: str | None = None,
        client: Any | None = None,
    ):
        """Initialize bucket fixture.

        Args:
            location: `bucket` or `bucket/path` the fixture operates under.
            region: Optional AWS region for the default client.
            endpoint_url: Optional endpoint override (for example a local S3 emulator).
            client: Optional preconfigured S3 client, built with boto3 when omitted.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when location does not name a bucket.
        """

        bucket, _, prefix = location.strip().strip("/").partition("/")
        if not bucket:
            raise ValueError("location must name a bucket")
        self._bucket = bucket
        self._prefix = prefix
        self._client = client or boto3.client("s3", region_name=region, endpoint_url=endpoint_url)

    def adapter_location(self) -> str:
        return f"{self._bucket}/{self._prefix}" if self._prefix else self._bucket

    def adapter_write_file(self, path: str, content: str) -> None:
        self._adapter_request(
            "put_object",
            Bucket=self._bucket,
            Key=self._adapter_object_key(path),
            Body=content.encode("utf-8"),
        )

    def adapter_read_file(self, path: str) -> str:
        response = self._adapter_request("get_object", Bucket=self._bucket, Key=self._adapter_object_key(path))
        return response["Body"].read().decode("utf-8")

    def adapter_clear_bucket(self) -> int:
        """Delete every object under the fixture location, one listing page at a time.

        Returns:
            int: Number of deleted objects.

        Raises:
            BucketFixtureError: Raised when listing fails or any object cannot be deleted.
        """

        deleted_count = 0
        try:
            pages = self._client.get_paginator("list_objects_v2").paginate(Bucket=self._bucket, Prefix=self._prefix)
            for page in pages:
                object_keys = [{"Key": item["Key"]} for item in page.get("Contents", [])]
                if not object_keys:
                    continue
                response = self._client.delete_objects(
                    Bucket=self._bucket,
                    Delete={"Objects": object_keys, "Quiet": True},
                )
                failed_deletes = response.get("Errors", [])
                if failed_deletes:
                    first_failure = failed_deletes[0]
                    raise BucketFixtureError(
                        self._bucket,
                        f"could not delete {len(failed_deletes)} object(s), first '{first_failure.get('Key')}': "
                        f"{first_failure.get('Message', '')}",
                        error_code=first_failure.get("Code"),
                    )
                deleted_count += len(object_keys)
        except ClientError as error:
            raise _bucket_error_from_client_error(self._bucket, error) from error
        except BotoCoreError as error:
            raise BucketFixtureError(self._bucket, str(error)) from error

        logger.info("bucket_cleared", location=self.adapter_location(), deleted=deleted_count)
        return deleted_count

    def _adapter_object_key(self, path: str) -> str:
        relative_key = path.lstrip("/")
        if not relative_key:
            raise ValueError("path must not be blank")
        return f"{self._prefix}/{relative_key}" if self._prefix else relative_key

    def _adapter_request(self, operation_name: str, **request: Any) -> dict[str, Any]:
        try:
            return getattr(self._client, operation_name)(**request)
        except ClientError as error:
            raise _bucket_error_from_client_error(self._bucket, error) from error
        except BotoCoreError as error:
            raise BucketFixtureError(self._bucket, str(error)) from error


def _bucket_error_from_client_error(bucket: str, error: ClientError) -> BucketFixtureError:
    error_payload = error.response.get("Error", {})
    return BucketFixtureError(
        bucket,
        error_payload.get("Message") or str(error),
        error_code=error_payload.get("Code"),
    )
