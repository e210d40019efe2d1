"""Sync engine for PyGitS3 - mirror a git branch onto an S3 bucket."""

from .comparator import (
    FingerprintComparator,
    FingerprintMatch,
    SyncAction,
    SyncDecision,
)
from .engine import Reconciler, SyncResult
from .filters import PathFilter
from .inventory import RemoteInventory
from .operations import SyncOperations, UploadRequest
from .reporter import CompositeReporter, LoggingReporter, SyncReporter
from .scanner import SnapshotFile, TreeWalker

__all__ = [
    "Reconciler",
    "SyncResult",
    "SyncOperations",
    "UploadRequest",
    "FingerprintComparator",
    "FingerprintMatch",
    "SyncAction",
    "SyncDecision",
    "PathFilter",
    "RemoteInventory",
    "SnapshotFile",
    "TreeWalker",
    "SyncReporter",
    "LoggingReporter",
    "CompositeReporter",
]
