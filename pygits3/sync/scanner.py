"""Snapshot scanning: enumerate the regular files of a git branch."""

import logging
import stat
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Union

from dulwich.errors import NotGitRepository
from dulwich.objects import Commit, Tag, Tree
from dulwich.repo import BaseRepo, Repo

from ..exceptions import ContentReadError, SnapshotResolutionError

logger = logging.getLogger(__name__)


def decode_path(raw: bytes) -> str:
    """Decode a tree entry name.

    Git stores names as raw bytes. Names that are not valid UTF-8 are
    decoded as ISO-8859-1, which maps every byte to a character.

    Examples:
        >>> decode_path(b"caf\\xc3\\xa9.txt")
        'café.txt'
        >>> decode_path(b"caf\\xe9.txt")
        'café.txt'
    """
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        logger.debug("Tree entry name %r is not UTF-8, using ISO-8859-1", raw)
        return raw.decode("iso-8859-1")


@dataclass
class SnapshotFile:
    """Represents one tracked file of the snapshot."""

    path: str
    """Snapshot-relative path (forward slashes, equal to the object key)"""

    object_id: str
    """Git blob SHA (hex)"""

    mode: int
    """Git file mode (e.g. 0o100644)"""

    reader: Callable[[], Iterable[bytes]] = field(repr=False)
    """Returns the content as a stream of chunks"""

    def iter_chunks(self) -> Iterable[bytes]:
        """Open the content stream."""
        return self.reader()

    @classmethod
    def from_blob(
        cls, repo: BaseRepo, path: str, sha: bytes, mode: int
    ) -> "SnapshotFile":
        """Create a SnapshotFile that reads the blob lazily from the repo.

        Args:
            repo: Repository holding the blob
            path: Snapshot-relative path
            sha: Blob SHA as hex bytes
            mode: Git file mode

        Returns:
            SnapshotFile instance
        """
        return cls(
            path=path,
            object_id=sha.decode("ascii"),
            mode=mode,
            reader=lambda: repo[sha].as_raw_chunks(),
        )


class TreeWalker:
    """Walks the tree of a branch and yields its regular files.

    Directories are entered transparently. Symbolic links, submodule links
    and anything else that is not a regular file are skipped, since a flat
    object store cannot represent them.

    Examples:
        >>> walker = TreeWalker.from_path(Path("site.git"), "main")
        >>> for snapshot_file in walker.walk():
        ...     print(snapshot_file.path)
    """

    def __init__(self, repo: BaseRepo, branch: str = "master"):
        """Initialize tree walker.

        Args:
            repo: dulwich repository (on disk or in memory)
            branch: Branch name or full reference (e.g. ``main``,
                ``refs/heads/main``, ``refs/tags/v1``)
        """
        self.repo = repo
        self.branch = branch

    @classmethod
    def from_path(
        cls, path: Union[str, Path], branch: str = "master"
    ) -> "TreeWalker":
        """Open an on-disk repository (bare or with a working tree).

        Raises:
            SnapshotResolutionError: If the path is not a git repository
        """
        try:
            repo = Repo(str(path))
        except (NotGitRepository, FileNotFoundError) as e:
            raise SnapshotResolutionError(f"Not a git repository: {path}") from e
        return cls(repo, branch)

    def _candidate_refs(self) -> list[bytes]:
        name = self.branch.strip()
        if name.startswith("refs/") or name == "HEAD":
            candidates = [name]
        else:
            candidates = [
                f"refs/heads/{name}",
                f"refs/{name}",
                f"refs/tags/{name}",
            ]
        return [c.encode("utf-8") for c in candidates]

    def resolve_tree(self) -> Tree:
        """Resolve the branch to the tree of its commit.

        Returns:
            Root tree of the snapshot

        Raises:
            SnapshotResolutionError: If the reference is unknown or does not
                point to a commit
        """
        if not self.branch or not self.branch.strip():
            raise SnapshotResolutionError("No branch given")

        sha: Optional[bytes] = None
        for ref in self._candidate_refs():
            try:
                sha = self.repo.refs[ref]
            except KeyError:
                continue
            logger.debug("Resolved %s to %s", ref.decode("utf-8"), sha.decode())
            break

        if sha is None:
            raise SnapshotResolutionError(f"Unknown branch or reference: {self.branch}")

        try:
            obj = self.repo[sha]
            # Annotated tags point to the tagged object
            while isinstance(obj, Tag):
                obj = self.repo[obj.object[1]]
            if not isinstance(obj, Commit):
                raise SnapshotResolutionError(
                    f"Reference {self.branch} does not point to a commit"
                )
            tree = self.repo[obj.tree]
        except KeyError as e:
            raise SnapshotResolutionError(
                f"Object missing while resolving {self.branch}: {e}"
            ) from e

        if not isinstance(tree, Tree):
            raise SnapshotResolutionError(f"Commit of {self.branch} has no tree")
        return tree

    def walk(self, tree: Optional[Tree] = None) -> Iterator[SnapshotFile]:
        """Yield every regular file of the snapshot.

        Args:
            tree: Root tree (resolved from the branch if not given)

        Yields:
            SnapshotFile objects in tree order, depth-first
        """
        if tree is None:
            tree = self.resolve_tree()
        yield from self._walk_tree(tree, "")

    def _walk_tree(self, tree: Tree, prefix: str) -> Iterator[SnapshotFile]:
        for entry in tree.iteritems():
            name = decode_path(entry.path)
            path = f"{prefix}/{name}" if prefix else name

            # Enter directories
            if stat.S_ISDIR(entry.mode):
                try:
                    subtree = self.repo[entry.sha]
                except KeyError as e:
                    raise ContentReadError(
                        f"Cannot read directory {path} ({entry.sha.decode()}): "
                        "object missing"
                    ) from e
                yield from self._walk_tree(subtree, path)
                continue

            # Only regular files (no symlinks, no gitlinks)
            if not stat.S_ISREG(entry.mode):
                logger.debug("Skipping non-file entry %s (mode %o)", path, entry.mode)
                continue

            yield SnapshotFile.from_blob(self.repo, path, entry.sha, entry.mode)
