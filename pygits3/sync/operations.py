"""Sync operations wrapper for the upload/delete calls of a pass."""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from ..api import S3Client
from ..content_type import ContentTypeDetector
from ..models import RemoteEntry
from ..utils import DEFAULT_ACL, basename, content_md5_header

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadRequest:
    """Everything needed to upload one snapshot file."""

    key: str
    """Target object key"""

    content: bytes
    """Full file content"""

    fingerprint: str
    """MD5 hex digest of the content"""

    content_md5: str
    """Base64 MD5 digest for the Content-MD5 header"""

    content_type: str
    """Detected media type"""

    acl: Optional[str] = None
    """Canned ACL (None to omit)"""

    @property
    def content_length(self) -> int:
        return len(self.content)


class SyncOperations:
    """Builds upload metadata and performs the remote calls of a pass."""

    def __init__(
        self,
        client: S3Client,
        detector: Optional[ContentTypeDetector] = None,
        acl: Optional[str] = DEFAULT_ACL,
    ):
        """Initialize sync operations.

        Args:
            client: S3 client for the target bucket
            detector: Content type detector (a default one if not provided)
            acl: Canned ACL for uploads, None to omit the header
        """
        self.client = client
        self.detector = detector or ContentTypeDetector()
        self.acl = acl

    def prepare_upload(
        self, path: str, content: bytes, raw_digest: bytes
    ) -> UploadRequest:
        """Build the upload request for a snapshot file.

        Args:
            path: Snapshot-relative path (the object key)
            content: Full file content
            raw_digest: Raw MD5 digest of the content

        Returns:
            UploadRequest with content type and checksum headers filled in
        """
        # Give the detector the file name as a hint
        content_type = self.detector.detect(content, hint=basename(path))
        return UploadRequest(
            key=path,
            content=content,
            fingerprint=raw_digest.hex(),
            content_md5=content_md5_header(raw_digest),
            content_type=content_type,
            acl=self.acl,
        )

    def upload(self, request: UploadRequest) -> Any:
        """Upload a prepared request.

        Returns:
            Upload response from S3
        """
        logger.debug(
            "Uploading %s (md5 %s, %d bytes, %s)",
            request.key,
            request.fingerprint,
            request.content_length,
            request.content_type,
        )
        return self.client.put_object(
            key=request.key,
            body=request.content,
            content_md5=request.content_md5,
            content_type=request.content_type,
            acl=request.acl,
        )

    def delete_remote(self, remote_entry: RemoteEntry) -> None:
        """Delete a remote object."""
        self.client.delete_object(remote_entry.key)
