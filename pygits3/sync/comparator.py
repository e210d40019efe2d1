"""Fingerprint comparison logic for sync operations."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..models import RemoteEntry


class SyncAction(str, Enum):
    """Actions the comparator can decide for a snapshot file."""

    UPLOAD = "upload"
    """Upload snapshot file to the bucket"""

    SKIP = "skip"
    """Skip file (remote copy is current)"""


class FingerprintMatch(str, Enum):
    """Outcome of comparing a computed fingerprint with a remote entry."""

    ABSENT = "absent"
    """No remote object exists for the path"""

    MALFORMED = "malformed"
    """The computed fingerprint is missing or empty"""

    MISMATCHED = "mismatched"
    """Remote object has a different fingerprint"""

    MATCHED = "matched"
    """Remote object has the same fingerprint"""


@dataclass
class SyncDecision:
    """Represents a decision about how to sync a file."""

    action: SyncAction
    """Action to take"""

    match: FingerprintMatch
    """Comparison outcome that led to the action"""

    reason: str
    """Human-readable reason for this decision"""

    relative_path: str
    """Relative path of the file"""

    remote_entry: Optional[RemoteEntry] = None
    """Claimed remote entry (if one existed)"""


_REASONS = {
    FingerprintMatch.ABSENT: "New file",
    FingerprintMatch.MALFORMED: "Fingerprint unavailable, uploading to be safe",
    FingerprintMatch.MISMATCHED: "Content changed",
    FingerprintMatch.MATCHED: "Same checksum",
}


class FingerprintComparator:
    """Decides whether a remote copy is stale and must be re-uploaded."""

    def classify(
        self, existing: Optional[RemoteEntry], computed: Optional[str]
    ) -> FingerprintMatch:
        """Classify a remote entry against a computed fingerprint.

        Args:
            existing: Claimed remote entry (None if the key was not listed)
            computed: Fingerprint of the snapshot content

        Returns:
            FingerprintMatch describing the comparison
        """
        if existing is None:
            return FingerprintMatch.ABSENT
        if computed is None or len(computed) == 0:
            return FingerprintMatch.MALFORMED
        if computed != existing.fingerprint:
            return FingerprintMatch.MISMATCHED
        return FingerprintMatch.MATCHED

    def decide(
        self,
        existing: Optional[RemoteEntry],
        path: str,
        computed: Optional[str],
    ) -> SyncDecision:
        """Build the sync decision for a single snapshot file.

        Args:
            existing: Claimed remote entry (None if the key was not listed)
            path: Snapshot-relative path
            computed: Fingerprint of the snapshot content

        Returns:
            SyncDecision with UPLOAD for anything but a proven match
        """
        match = self.classify(existing, computed)
        if match == FingerprintMatch.MATCHED:
            action = SyncAction.SKIP
        else:
            action = SyncAction.UPLOAD
        return SyncDecision(
            action=action,
            match=match,
            reason=_REASONS[match],
            relative_path=path,
            remote_entry=existing,
        )

    def needs_upload(
        self,
        existing: Optional[RemoteEntry],
        path: str,
        computed: Optional[str],
    ) -> bool:
        """Check whether a snapshot file must be uploaded."""
        return self.decide(existing, path, computed).action == SyncAction.UPLOAD
