"""Observability hooks for reconciliation passes.

The reconciler reports every decision to a reporter instead of writing to
a global logger, so callers choose where decisions end up.
"""

import logging
from typing import Optional

from ..utils import format_size

logger = logging.getLogger(__name__)


class SyncReporter:
    """Receives sync events. All hooks are no-ops by default."""

    def on_listing(self, remote_count: int, excluded_count: int) -> None:
        """Called once the remote listing is complete."""

    def on_skip(self, path: str, reason: str) -> None:
        """Called for a snapshot file whose remote copy is current."""

    def on_upload(self, path: str, size: int, content_type: str, reason: str) -> None:
        """Called after a file was uploaded (or would be, in a dry run)."""

    def on_delete(self, key: str) -> None:
        """Called after an orphan was deleted (or would be, in a dry run)."""

    def on_invalidate(self, distribution_id: str, invalidation_id: str) -> None:
        """Called after the edge cache invalidation was requested."""


class LoggingReporter(SyncReporter):
    """Writes sync events to the standard logging system."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logger

    def on_listing(self, remote_count: int, excluded_count: int) -> None:
        self.log.info(
            "Remote listing complete: %d object(s), %d excluded",
            remote_count,
            excluded_count,
        )

    def on_skip(self, path: str, reason: str) -> None:
        self.log.debug("Skipping file (%s): %s", reason.lower(), path)

    def on_upload(self, path: str, size: int, content_type: str, reason: str) -> None:
        self.log.info(
            "Uploaded file: %s (%s, %s, %s)",
            path,
            format_size(size),
            content_type,
            reason.lower(),
        )

    def on_delete(self, key: str) -> None:
        self.log.info("Deleted file: %s", key)

    def on_invalidate(self, distribution_id: str, invalidation_id: str) -> None:
        self.log.info(
            "Requested invalidation %s for distribution %s",
            invalidation_id,
            distribution_id,
        )


class CompositeReporter(SyncReporter):
    """Forwards every event to several reporters."""

    def __init__(self, *reporters: SyncReporter):
        self.reporters = list(reporters)

    def on_listing(self, remote_count: int, excluded_count: int) -> None:
        for reporter in self.reporters:
            reporter.on_listing(remote_count, excluded_count)

    def on_skip(self, path: str, reason: str) -> None:
        for reporter in self.reporters:
            reporter.on_skip(path, reason)

    def on_upload(self, path: str, size: int, content_type: str, reason: str) -> None:
        for reporter in self.reporters:
            reporter.on_upload(path, size, content_type, reason)

    def on_delete(self, key: str) -> None:
        for reporter in self.reporters:
            reporter.on_delete(key)

    def on_invalidate(self, distribution_id: str, invalidation_id: str) -> None:
        for reporter in self.reporters:
            reporter.on_invalidate(distribution_id, invalidation_id)
