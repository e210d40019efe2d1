"""Core reconciliation engine: converge a bucket to a git snapshot."""

import logging
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Any, Optional

from dulwich.errors import ChecksumMismatch, ObjectFormatException
from dulwich.objects import Tree

from ..api import S3Client
from ..cloudfront import CloudFrontInvalidator
from ..content_type import ContentTypeDetector
from ..exceptions import ConfigurationError, ContentReadError
from ..utils import DEFAULT_ACL, DEFAULT_PAGE_SIZE, read_with_digest
from .comparator import FingerprintComparator, SyncAction, SyncDecision
from .filters import PathFilter
from .inventory import RemoteInventory
from .operations import SyncOperations, UploadRequest
from .reporter import LoggingReporter, SyncReporter
from .scanner import SnapshotFile, TreeWalker

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Outcome of a successful reconciliation pass."""

    uri: str
    """Target bucket URI"""

    branch: str
    """Branch or reference that was mirrored"""

    uploaded: list[str] = field(default_factory=list)
    """Keys uploaded (new or changed files)"""

    skipped: list[str] = field(default_factory=list)
    """Keys whose remote copy was already current"""

    deleted: list[str] = field(default_factory=list)
    """Orphaned keys deleted from the bucket"""

    invalidation_id: Optional[str] = None
    """ID of the edge cache invalidation (None in dry runs)"""

    dry_run: bool = False
    """Whether no changes were actually made"""

    @property
    def stats(self) -> dict[str, int]:
        """Counts per action."""
        return {
            "uploads": len(self.uploaded),
            "skips": len(self.skipped),
            "deletes": len(self.deleted),
        }

    @property
    def total_actions(self) -> int:
        return len(self.uploaded) + len(self.deleted)

    def to_dict(self) -> dict[str, Any]:
        return {
            "uri": self.uri,
            "branch": self.branch,
            "dry_run": self.dry_run,
            "stats": self.stats,
            "uploaded": sorted(self.uploaded),
            "deleted": sorted(self.deleted),
            "invalidation_id": self.invalidation_id,
        }


class Reconciler:
    """Mirrors the regular files of one branch onto an S3 bucket.

    A pass lists the complete bucket, walks the snapshot, uploads every file
    whose fingerprint differs from the listed ETag, deletes every listed key
    the snapshot did not claim and finally invalidates the CloudFront
    distribution. Any failure aborts the pass; already applied uploads and
    deletes stay in place and a re-run converges the bucket.
    """

    def __init__(
        self,
        client: S3Client,
        walker: TreeWalker,
        invalidator: CloudFrontInvalidator,
        detector: Optional[ContentTypeDetector] = None,
        path_filter: Optional[PathFilter] = None,
        reporter: Optional[SyncReporter] = None,
        acl: Optional[str] = DEFAULT_ACL,
        max_workers: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        """Initialize the reconciler.

        Args:
            client: S3 client for the target bucket
            walker: Tree walker for the source branch
            invalidator: CloudFront invalidator notified after every pass
            detector: Content type detector for uploads
            path_filter: Reserved key prefixes (defaults to ``.git``/``.ssh``)
            reporter: Receiver of sync events (logs them if not provided)
            acl: Canned ACL for uploaded objects, None to omit
            max_workers: Number of parallel upload workers (default: 1)
            page_size: Keys requested per listing page

        Raises:
            ConfigurationError: If max_workers is less than 1
        """
        if max_workers < 1:
            raise ConfigurationError("max_workers must be at least 1")

        self.client = client
        self.walker = walker
        self.invalidator = invalidator
        self.path_filter = path_filter or PathFilter()
        self.reporter = reporter or LoggingReporter()
        self.max_workers = max_workers
        self.page_size = page_size
        self.operations = SyncOperations(client, detector, acl)
        self.comparator = FingerprintComparator()

    @property
    def uri(self) -> str:
        """URI of the mirrored bucket."""
        return self.client.uri

    def reconcile(self, dry_run: bool = False) -> SyncResult:
        """Run one reconciliation pass.

        Args:
            dry_run: If True, classify everything but upload, delete and
                invalidate nothing

        Returns:
            SyncResult describing what was (or would be) changed

        Raises:
            SnapshotResolutionError: If the branch cannot be resolved
            RemoteListingError: If the bucket cannot be listed completely
            ContentReadError: If a snapshot file cannot be read
            RemoteWriteError: If an upload fails
            RemoteDeleteError: If a delete fails
            InvalidationError: If the invalidation request fails

        Examples:
            >>> reconciler = Reconciler(client, walker, invalidator)
            >>> result = reconciler.reconcile()
            >>> print(f"Uploaded {result.stats['uploads']} files")
        """
        start_time = time.time()
        logger.debug(
            "Starting pass %s -> %s (dry_run=%s, workers=%d)",
            self.walker.branch,
            self.uri,
            dry_run,
            self.max_workers,
        )

        # Step 1: Resolve the snapshot before touching the bucket
        tree = self.walker.resolve_tree()

        # Step 2: List the complete bucket
        inventory = RemoteInventory.load(self.client, self.path_filter, self.page_size)
        self.reporter.on_listing(len(inventory), inventory.excluded_count)

        result = SyncResult(uri=self.uri, branch=self.walker.branch, dry_run=dry_run)

        # Step 3: Walk the snapshot, uploading as files are encountered
        if self.max_workers > 1 and not dry_run:
            self._process_snapshot_parallel(tree, inventory, result)
        else:
            self._process_snapshot(tree, inventory, result, dry_run)

        # Step 4: Remaining objects are not in the snapshot anymore
        self._delete_orphans(inventory, result, dry_run)

        # Step 5: Invalidate edge caches, even when nothing changed
        if not dry_run:
            result.invalidation_id = self.invalidator.invalidate()
            self.reporter.on_invalidate(
                self.invalidator.distribution_id, result.invalidation_id
            )

        logger.debug(
            "Pass finished in %.2fs: %s", time.time() - start_time, result.stats
        )
        return result

    def _read(self, snapshot_file: SnapshotFile) -> tuple[bytes, Any]:
        """Read a file completely, hashing it on the way.

        Raises:
            ContentReadError: If the content stream fails
        """
        try:
            return read_with_digest(snapshot_file.iter_chunks())
        except (KeyError, OSError, ObjectFormatException, ChecksumMismatch) as e:
            raise ContentReadError(
                f"Cannot read {snapshot_file.path} ({snapshot_file.object_id}): {e}"
            ) from e

    def _classify(
        self,
        snapshot_file: SnapshotFile,
        inventory: RemoteInventory,
        result: SyncResult,
    ) -> Optional[tuple[UploadRequest, SyncDecision]]:
        """Read, claim and compare a single snapshot file.

        Returns:
            The upload request and decision, or None if the file is skipped
        """
        path = snapshot_file.path
        logger.debug("Start processing file: %s", path)

        content, digest = self._read(snapshot_file)
        existing = inventory.claim(path)
        decision = self.comparator.decide(existing, path, digest.hexdigest())

        if decision.action == SyncAction.SKIP:
            result.skipped.append(path)
            self.reporter.on_skip(path, decision.reason)
            return None

        request = self.operations.prepare_upload(path, content, digest.digest())
        return request, decision

    def _record_upload(
        self, request: UploadRequest, decision: SyncDecision, result: SyncResult
    ) -> None:
        result.uploaded.append(request.key)
        self.reporter.on_upload(
            request.key,
            request.content_length,
            request.content_type,
            decision.reason,
        )

    def _process_snapshot(
        self,
        tree: Tree,
        inventory: RemoteInventory,
        result: SyncResult,
        dry_run: bool,
    ) -> None:
        """Sequentially classify and upload every snapshot file."""
        for snapshot_file in self.walker.walk(tree):
            planned = self._classify(snapshot_file, inventory, result)
            if planned is None:
                continue
            request, decision = planned
            if not dry_run:
                action_start = time.time()
                self.operations.upload(request)
                logger.debug(
                    "Upload of %s took %.2fs", request.key, time.time() - action_start
                )
            self._record_upload(request, decision, result)

    def _process_snapshot_parallel(
        self,
        tree: Tree,
        inventory: RemoteInventory,
        result: SyncResult,
    ) -> None:
        """Classify on the calling thread, upload on a bounded worker pool.

        At most ``2 * max_workers`` uploads are queued at any time, which
        bounds the amount of file content held in memory.
        """
        max_pending = self.max_workers * 2
        pending: set[Future] = set()

        def collect(done: set[Future]) -> None:
            for future in done:
                # Re-raises the upload's exception
                request, decision = future.result()
                self._record_upload(request, decision, result)

        def upload(
            request: UploadRequest, decision: SyncDecision
        ) -> tuple[UploadRequest, SyncDecision]:
            start = time.time()
            self.operations.upload(request)
            logger.debug("Upload of %s took %.2fs", request.key, time.time() - start)
            return request, decision

        logger.debug("Uploading with %d workers", self.max_workers)
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            try:
                for snapshot_file in self.walker.walk(tree):
                    planned = self._classify(snapshot_file, inventory, result)
                    if planned is None:
                        continue
                    if len(pending) >= max_pending:
                        done, pending = wait(pending, return_when=FIRST_COMPLETED)
                        collect(done)
                    pending.add(executor.submit(upload, *planned))

                done, pending = wait(pending)
                collect(done)
            except BaseException:
                for future in pending:
                    future.cancel()
                raise

    def _delete_orphans(
        self, inventory: RemoteInventory, result: SyncResult, dry_run: bool
    ) -> None:
        """Delete every remote entry no snapshot file claimed."""
        for entry in inventory.residue():
            logger.debug("Deleting file: %s", entry.key)
            if not dry_run:
                self.operations.delete_remote(entry)
            result.deleted.append(entry.key)
            self.reporter.on_delete(entry.key)
