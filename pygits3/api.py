"""S3 client wrapper used as the sync target."""

from __future__ import annotations

import logging
from typing import Any

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from .config import config
from .exceptions import (
    ConfigurationError,
    RemoteDeleteError,
    RemoteError,
    RemoteListingError,
    RemoteReadError,
    RemoteWriteError,
)
from .models import ObjectInfo, ObjectListingPage
from .utils import DEFAULT_PAGE_SIZE

logger = logging.getLogger(__name__)


def create_session(
    region: str | None = None, profile: str | None = None
) -> boto3.session.Session:
    """Create a boto3 session from the optional region/profile settings."""
    session_kwargs: dict[str, Any] = {}
    if profile:
        session_kwargs["profile_name"] = profile
    if region:
        session_kwargs["region_name"] = region
    return boto3.session.Session(**session_kwargs)


class S3Client:
    """Thin client for one S3 bucket.

    Every botocore failure is translated into the matching
    :class:`~pygits3.exceptions.RemoteError` subclass. Retries for transient
    failures are left to botocore's own retry handler.
    """

    def __init__(
        self,
        bucket: str | None = None,
        region: str | None = None,
        profile: str | None = None,
        endpoint_url: str | None = None,
        max_attempts: int = 5,
        timeout: float = 60.0,
        client: Any | None = None,
    ):
        """Initialize S3 client.

        Args:
            bucket: Bucket name (uses config if not provided)
            region: AWS region (uses config if not provided)
            profile: AWS profile name (uses config if not provided)
            endpoint_url: Endpoint for S3-compatible stores (uses config if not
                provided)
            max_attempts: Attempts per call for botocore's retry handler
            timeout: Connect/read timeout in seconds
            client: Pre-built boto3 S3 client (mainly for tests)
        """
        self.bucket = bucket or config.bucket
        if not self.bucket:
            raise ConfigurationError(
                "Bucket not configured. Use --bucket or set PYGITS3_BUCKET."
            )
        self.region = region or config.region
        self.profile = profile or config.profile
        self.endpoint_url = endpoint_url or config.endpoint_url

        if client is None:
            session = create_session(self.region, self.profile)
            client = session.client(
                "s3",
                endpoint_url=self.endpoint_url,
                config=BotoConfig(
                    connect_timeout=timeout,
                    read_timeout=timeout,
                    retries={"max_attempts": max_attempts, "mode": "standard"},
                ),
            )
        self._client = client

    @property
    def uri(self) -> str:
        """URI identifying the bucket (e.g. ``s3://my-bucket``)."""
        return f"s3://{self.bucket}"

    def _translate_error(
        self,
        e: Exception,
        error_class: type[RemoteError],
        action: str,
        key: str | None = None,
    ) -> RemoteError:
        """Build a RemoteError from a botocore exception.

        Args:
            e: The botocore exception
            error_class: RemoteError subclass to build
            action: Short description of the failed call
            key: Object key involved, if any

        Returns:
            Exception instance ready to be raised
        """
        target = f"{self.uri}/{key}" if key else self.uri
        if isinstance(e, ClientError):
            error = e.response.get("Error", {})
            code = error.get("Code", "Unknown")
            message = error.get("Message") or str(e)
            return error_class(
                f"{action} failed for {target} ({code}): {message}", key
            )
        return error_class(f"{action} failed for {target}: {e}", key)

    def list_objects_page(
        self,
        continuation_token: str | None = None,
        max_keys: int = DEFAULT_PAGE_SIZE,
    ) -> ObjectListingPage:
        """Fetch one page of the bucket listing.

        Args:
            continuation_token: Token from the previous page (None for the first)
            max_keys: Maximum number of keys in the page

        Returns:
            ObjectListingPage with entries and the continuation token

        Raises:
            RemoteListingError: If the request fails
        """
        params: dict[str, Any] = {"Bucket": self.bucket, "MaxKeys": max_keys}
        if continuation_token:
            params["ContinuationToken"] = continuation_token
        try:
            response = self._client.list_objects_v2(**params)
        except (ClientError, BotoCoreError) as e:
            raise self._translate_error(e, RemoteListingError, "Listing") from e
        return ObjectListingPage.from_api_response(response)

    def head_object(self, key: str) -> ObjectInfo:
        """Fetch metadata of a single object.

        Raises:
            RemoteReadError: If the object is missing or the request fails
        """
        try:
            response = self._client.head_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise self._translate_error(e, RemoteReadError, "Reading", key) from e
        return ObjectInfo.from_api_response(key, response)

    def put_object(
        self,
        key: str,
        body: bytes,
        content_md5: str,
        content_type: str,
        acl: str | None = None,
    ) -> dict[str, Any]:
        """Upload an object.

        Args:
            key: Object key
            body: Full object content
            content_md5: Base64-encoded MD5 digest of the body
            content_type: Media type stored with the object
            acl: Canned ACL (e.g. ``public-read``); omitted when None

        Returns:
            Raw ``put_object`` response

        Raises:
            RemoteWriteError: If the upload fails
        """
        params: dict[str, Any] = {
            "Bucket": self.bucket,
            "Key": key,
            "Body": body,
            "ContentLength": len(body),
            "ContentMD5": content_md5,
            "ContentType": content_type,
        }
        if acl:
            params["ACL"] = acl
        try:
            return self._client.put_object(**params)
        except (ClientError, BotoCoreError) as e:
            raise self._translate_error(e, RemoteWriteError, "Upload", key) from e

    def delete_object(self, key: str) -> None:
        """Delete an object.

        Raises:
            RemoteDeleteError: If the delete fails
        """
        try:
            self._client.delete_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise self._translate_error(e, RemoteDeleteError, "Delete", key) from e
