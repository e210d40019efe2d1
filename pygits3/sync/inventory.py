"""In-memory index of the bucket built from a fully paginated listing."""

import logging
import time
from collections.abc import Iterator
from typing import Optional

from ..api import S3Client
from ..exceptions import RemoteListingError
from ..models import RemoteEntry
from ..utils import DEFAULT_PAGE_SIZE
from .filters import PathFilter

logger = logging.getLogger(__name__)


class RemoteInventory:
    """Index of remote objects keyed by path.

    Each entry can be claimed exactly once. After every snapshot file has
    claimed its path, the unclaimed residue is the set of orphans to delete.
    """

    def __init__(
        self,
        entries: Optional[dict[str, RemoteEntry]] = None,
        excluded_count: int = 0,
    ):
        """Initialize the inventory.

        Args:
            entries: Mapping from key to RemoteEntry
            excluded_count: Number of listed keys that were filtered out
        """
        self._entries: dict[str, RemoteEntry] = dict(entries or {})
        self.excluded_count = excluded_count

    @classmethod
    def load(
        cls,
        client: S3Client,
        path_filter: Optional[PathFilter] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> "RemoteInventory":
        """List the complete bucket, following continuation tokens.

        Args:
            client: S3 client for the target bucket
            path_filter: Filter for reserved keys (defaults to ``.git``/``.ssh``)
            page_size: Maximum number of keys requested per page

        Returns:
            RemoteInventory holding every non-excluded key

        Raises:
            RemoteListingError: If a page request fails or a truncated page
                carries no continuation token
        """
        if path_filter is None:
            path_filter = PathFilter()

        start = time.time()
        entries: dict[str, RemoteEntry] = {}
        excluded = 0
        pages = 0
        token: Optional[str] = None

        while True:
            page = client.list_objects_page(
                continuation_token=token, max_keys=page_size
            )
            pages += 1
            for entry in page.entries:
                if path_filter.is_excluded(entry.key):
                    excluded += 1
                    continue
                entries[entry.key] = entry

            if not page.is_truncated:
                break
            if not page.next_continuation_token:
                raise RemoteListingError(
                    f"Listing of {client.uri} is truncated after page {pages} "
                    "but has no continuation token"
                )
            token = page.next_continuation_token

        logger.debug(
            "Listed %d key(s) (%d excluded) in %d page(s) in %.2fs",
            len(entries),
            excluded,
            pages,
            time.time() - start,
        )
        return cls(entries, excluded_count=excluded)

    def claim(self, path: str) -> Optional[RemoteEntry]:
        """Remove and return the entry for a path.

        Args:
            path: Snapshot-relative path (equal to the object key)

        Returns:
            The entry if the key was listed and not yet claimed, else None
        """
        return self._entries.pop(path, None)

    def residue(self) -> list[RemoteEntry]:
        """Return every unclaimed entry, sorted by key."""
        return [self._entries[key] for key in sorted(self._entries)]

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._entries))
