"""Data models for S3 listing responses."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from .utils import normalize_etag


@dataclass(frozen=True)
class RemoteEntry:
    """Represents one object of the bucket."""

    key: str
    """Object key (slash-separated, no leading slash)"""

    fingerprint: str
    """Opaque content fingerprint (the object's ETag without quotes)"""

    size: int = 0
    """Object size in bytes"""

    last_modified: Optional[datetime] = None
    """Last modification time reported by S3"""

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "RemoteEntry":
        """Create a RemoteEntry from one item of a ``Contents`` list.

        Args:
            data: Object summary as returned by ``list_objects_v2``

        Returns:
            RemoteEntry instance
        """
        return cls(
            key=data["Key"],
            fingerprint=normalize_etag(data.get("ETag")),
            size=int(data.get("Size", 0) or 0),
            last_modified=data.get("LastModified"),
        )


@dataclass
class ObjectListingPage:
    """One page of a bucket listing."""

    entries: list[RemoteEntry] = field(default_factory=list)
    """Objects on this page"""

    is_truncated: bool = False
    """Whether more pages follow"""

    next_continuation_token: Optional[str] = None
    """Token to request the next page with"""

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "ObjectListingPage":
        """Create an ObjectListingPage from a ``list_objects_v2`` response.

        Args:
            data: Raw response dictionary

        Returns:
            ObjectListingPage instance
        """
        entries = [
            RemoteEntry.from_api_response(item) for item in data.get("Contents", [])
        ]
        return cls(
            entries=entries,
            is_truncated=bool(data.get("IsTruncated", False)),
            next_continuation_token=data.get("NextContinuationToken"),
        )


@dataclass(frozen=True)
class ObjectInfo:
    """Metadata of a single object as returned by ``head_object``."""

    key: str
    fingerprint: str
    size: int
    content_type: Optional[str] = None
    last_modified: Optional[datetime] = None

    @classmethod
    def from_api_response(cls, key: str, data: dict[str, Any]) -> "ObjectInfo":
        return cls(
            key=key,
            fingerprint=normalize_etag(data.get("ETag")),
            size=int(data.get("ContentLength", 0) or 0),
            content_type=data.get("ContentType"),
            last_modified=data.get("LastModified"),
        )
