"""Custom exceptions for PyGitS3."""


class GitS3Error(Exception):
    """Base exception for all PyGitS3 errors."""


class ConfigurationError(GitS3Error):
    """Missing or invalid configuration (bucket, distribution, prefixes)."""


class SnapshotResolutionError(GitS3Error):
    """The requested branch or reference cannot be resolved to a tree."""


class ContentReadError(GitS3Error):
    """A file of the snapshot could not be read completely."""


class RemoteError(GitS3Error):
    """Base exception for failed calls against the remote store."""

    def __init__(self, message: str, key: str | None = None):
        super().__init__(message)
        self.key = key


class RemoteListingError(RemoteError):
    """Listing the bucket failed or returned an incomplete listing."""


class RemoteReadError(RemoteError):
    """Reading object metadata from the bucket failed."""


class RemoteWriteError(RemoteError):
    """Uploading an object failed."""


class RemoteDeleteError(RemoteError):
    """Deleting an object failed."""


class InvalidationError(RemoteError):
    """Creating the edge cache invalidation failed."""
