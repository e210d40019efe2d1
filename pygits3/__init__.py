"""PyGitS3 - mirror a git branch onto an S3 bucket behind CloudFront."""

from .api import S3Client
from .cloudfront import CloudFrontInvalidator
from .content_type import ContentTypeDetector
from .exceptions import (
    ConfigurationError,
    ContentReadError,
    GitS3Error,
    InvalidationError,
    RemoteDeleteError,
    RemoteError,
    RemoteListingError,
    RemoteReadError,
    RemoteWriteError,
    SnapshotResolutionError,
)
from .models import ObjectInfo, ObjectListingPage, RemoteEntry

__version__ = "0.1.0"

__all__ = [
    "S3Client",
    "CloudFrontInvalidator",
    "ContentTypeDetector",
    "GitS3Error",
    "ConfigurationError",
    "ContentReadError",
    "InvalidationError",
    "RemoteDeleteError",
    "RemoteError",
    "RemoteListingError",
    "RemoteReadError",
    "RemoteWriteError",
    "SnapshotResolutionError",
    "ObjectInfo",
    "ObjectListingPage",
    "RemoteEntry",
]
