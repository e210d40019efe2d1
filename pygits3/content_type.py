"""Content type detection for uploaded objects."""

import logging
import mimetypes
from typing import Optional

from .utils import DEFAULT_CONTENT_TYPE

logger = logging.getLogger(__name__)

# Results libmagic falls back to when it cannot tell more
_GENERIC_TYPES = {"application/octet-stream", "text/plain", "inode/x-empty"}


class ContentTypeDetector:
    """Detects the media type of a file from its bytes and name.

    libmagic inspects the content first. When it can only report a generic
    type, the file name hint decides (``style.css`` is plain text to libmagic
    but must be served as ``text/css``).
    """

    def __init__(self, sniff_bytes: int = 8192):
        """Initialize the detector.

        Args:
            sniff_bytes: Number of leading bytes handed to libmagic
        """
        self.sniff_bytes = sniff_bytes

    def _detect_from_content(self, content: bytes) -> Optional[str]:
        try:
            import magic
        except ImportError as e:
            # python-magic or libmagic not installed
            logger.debug("libmagic unavailable, using file name only: %s", e)
            return None

        try:
            return magic.from_buffer(content[: self.sniff_bytes], mime=True)
        except Exception as e:
            logger.debug("libmagic failed to classify content: %s", e)
            return None

    def detect(self, content: bytes, hint: Optional[str] = None) -> str:
        """Detect the media type.

        Args:
            content: Full file content
            hint: File name (base name of the path) used as a hint

        Returns:
            Media type string, ``application/octet-stream`` if unknown
        """
        mime_type = self._detect_from_content(content) if content else None

        if not mime_type or mime_type in _GENERIC_TYPES:
            guessed = None
            if hint:
                guessed, _ = mimetypes.guess_type(hint, strict=False)
            if guessed:
                mime_type = guessed

        return mime_type or DEFAULT_CONTENT_TYPE
