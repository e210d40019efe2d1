"""Utility functions for PyGitS3."""

import base64
import hashlib
from collections.abc import Iterable
from typing import Optional

# =============================================================================
# Constants for sync operations
# =============================================================================

# Key prefixes that are never listed, uploaded or deleted
DEFAULT_EXCLUDED_PREFIXES: tuple[str, ...] = (".git", ".ssh")

# S3 returns at most 1000 keys per listing request
DEFAULT_PAGE_SIZE: int = 1000

# Canned ACL applied to uploaded objects
DEFAULT_ACL: str = "public-read"

# Paths requested from CloudFront after every pass
WILDCARD_INVALIDATION_PATH: str = "/*"

# Fallback content type when detection yields nothing
DEFAULT_CONTENT_TYPE: str = "application/octet-stream"


# =============================================================================
# Fingerprint utilities
# =============================================================================


def read_with_digest(chunks: Iterable[bytes]) -> tuple[bytes, "hashlib._Hash"]:
    """Read a chunk stream completely while feeding an MD5 digest.

    The bytes are only traversed once; the digest is updated as each chunk
    arrives.

    Args:
        chunks: Iterable of byte chunks

    Returns:
        Tuple of (full content, md5 digest object)
    """
    digest = hashlib.md5()
    parts: list[bytes] = []
    for chunk in chunks:
        digest.update(chunk)
        parts.append(chunk)
    return b"".join(parts), digest


def normalize_etag(etag: Optional[str]) -> str:
    """Strip the quotes S3 puts around ETag values.

    Args:
        etag: Raw ETag as returned by S3 (e.g. '"9e107d9d372bb6826bd81d3542a419d6"')

    Returns:
        ETag without surrounding quotes, or an empty string

    Examples:
        >>> normalize_etag('"abc"')
        'abc'
        >>> normalize_etag(None)
        ''
    """
    if not etag:
        return ""
    return etag.strip().strip('"')


def content_md5_header(raw_digest: bytes) -> str:
    """Encode a raw MD5 digest for the Content-MD5 request header.

    Examples:
        >>> content_md5_header(hashlib.md5(b"").digest())
        '1B2M2Y8AsgTpgAmY7PhCfg=='
    """
    return base64.b64encode(raw_digest).decode("ascii")


def basename(path: str) -> str:
    """Return the last component of a slash-separated path.

    Examples:
        >>> basename("docs/index.html")
        'index.html'
        >>> basename("README.md")
        'README.md'
    """
    return path.rstrip("/").rsplit("/", 1)[-1]


# =============================================================================
# Size formatting utilities
# =============================================================================


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB", "256 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.1f} MB"
    else:
        return f"{size_bytes / 1024 / 1024 / 1024:.1f} GB"
