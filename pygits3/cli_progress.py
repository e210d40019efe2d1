"""CLI progress display for reconciliation passes.

This module provides a Rich-based progress display that plugs into the
reconciler as a :class:`~pygits3.sync.reporter.SyncReporter`.
"""

from typing import Optional

from rich.progress import (
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from .sync.reporter import SyncReporter
from .utils import format_size


class SyncProgressDisplay(SyncReporter):
    """Rich-based progress display for a reconciliation pass.

    Shows a spinner with the running counts of uploaded, skipped and
    deleted files and the number of bytes uploaded so far.
    """

    def __init__(self) -> None:
        """Initialize the progress display."""
        self._progress: Optional[Progress] = None
        self._task: Optional[TaskID] = None
        self.uploads = 0
        self.skips = 0
        self.deletes = 0
        self.bytes_uploaded = 0

    def _format_counts(self) -> str:
        """Format the running counts.

        Returns:
            Formatted string like "3 uploaded (1.5 MB), 10 skipped, 1 deleted"
        """
        return (
            f"{self.uploads} uploaded ({format_size(self.bytes_uploaded)}), "
            f"{self.skips} skipped, {self.deletes} deleted"
        )

    def _refresh(self, description: Optional[str] = None) -> None:
        if self._progress is None or self._task is None:
            return
        fields = {"counts": self._format_counts()}
        if description is not None:
            self._progress.update(self._task, description=description, **fields)
        else:
            self._progress.update(self._task, **fields)

    def on_listing(self, remote_count: int, excluded_count: int) -> None:
        self._refresh(f"Syncing ({remote_count} remote file(s))")

    def on_skip(self, path: str, reason: str) -> None:
        self.skips += 1
        self._refresh()

    def on_upload(self, path: str, size: int, content_type: str, reason: str) -> None:
        self.uploads += 1
        self.bytes_uploaded += size
        self._refresh()

    def on_delete(self, key: str) -> None:
        self.deletes += 1
        self._refresh("Deleting orphaned files")

    def on_invalidate(self, distribution_id: str, invalidation_id: str) -> None:
        self._refresh(f"Invalidated {distribution_id}")

    def __enter__(self) -> "SyncProgressDisplay":
        """Enter context manager - start progress display."""
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            TextColumn("[cyan]{task.fields[counts]}"),
            TimeElapsedColumn(),
            transient=True,
            refresh_per_second=4,
        )
        self._progress.__enter__()
        self._task = self._progress.add_task(
            "Listing remote files...",
            total=None,
            counts=self._format_counts(),
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager - stop progress display."""
        if self._progress is not None:
            self._progress.__exit__(exc_type, exc_val, exc_tb)
            self._progress = None
            self._task = None
