"""Shared fixtures: in-memory git snapshots and a fake S3 bucket."""

import hashlib
from typing import Optional
from unittest.mock import Mock

import pytest
from dulwich.objects import Blob, Commit, Tree
from dulwich.repo import MemoryRepo

from pygits3.api import S3Client
from pygits3.cloudfront import CloudFrontInvalidator
from pygits3.content_type import ContentTypeDetector
from pygits3.models import ObjectListingPage, RemoteEntry

FILE_MODE = 0o100644
EXEC_MODE = 0o100755
SYMLINK_MODE = 0o120000
GITLINK_MODE = 0o160000
DIR_MODE = 0o040000


def md5_hex(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


def _write_tree(repo: MemoryRepo, entries: dict[str, tuple[int, bytes]]) -> bytes:
    tree = Tree()
    children: dict[str, dict[str, tuple[int, bytes]]] = {}
    for path, (mode, sha) in entries.items():
        head, _, rest = path.partition("/")
        if rest:
            children.setdefault(head, {})[rest] = (mode, sha)
        else:
            tree.add(head.encode("utf-8"), mode, sha)
    for name, sub_entries in children.items():
        tree.add(name.encode("utf-8"), DIR_MODE, _write_tree(repo, sub_entries))
    repo.object_store.add_object(tree)
    return tree.id


def commit_tree(repo: MemoryRepo, tree_id: bytes, branch: str = "master") -> Commit:
    """Commit an already stored tree onto a branch."""
    commit = Commit()
    commit.tree = tree_id
    commit.author = commit.committer = b"Test User <test@example.com>"
    commit.author_time = commit.commit_time = 1700000000
    commit.author_timezone = commit.commit_timezone = 0
    commit.encoding = b"UTF-8"
    commit.message = b"Snapshot\n"
    repo.object_store.add_object(commit)
    repo.refs[f"refs/heads/{branch}".encode("utf-8")] = commit.id
    return commit


def commit_files(
    repo: MemoryRepo,
    files: dict[str, bytes],
    branch: str = "master",
    symlinks: Optional[dict[str, str]] = None,
    gitlinks: Optional[dict[str, bytes]] = None,
    executables: Optional[dict[str, bytes]] = None,
) -> Commit:
    """Commit a complete snapshot onto a branch of an in-memory repository."""
    entries: dict[str, tuple[int, bytes]] = {}
    for path, data in files.items():
        blob = Blob.from_string(data)
        repo.object_store.add_object(blob)
        entries[path] = (FILE_MODE, blob.id)
    for path, data in (executables or {}).items():
        blob = Blob.from_string(data)
        repo.object_store.add_object(blob)
        entries[path] = (EXEC_MODE, blob.id)
    for path, target in (symlinks or {}).items():
        blob = Blob.from_string(target.encode("utf-8"))
        repo.object_store.add_object(blob)
        entries[path] = (SYMLINK_MODE, blob.id)
    for path, sha in (gitlinks or {}).items():
        entries[path] = (GITLINK_MODE, sha)

    return commit_tree(repo, _write_tree(repo, entries), branch)


class FakeBucket:
    """Dictionary-backed stand-in for S3Client with paginated listings."""

    def __init__(self, name: str = "test-bucket"):
        self.name = name
        self.objects: dict[str, dict] = {}
        self.list_calls: list[Optional[str]] = []
        self.put_calls: list[str] = []
        self.delete_calls: list[str] = []

    @property
    def uri(self) -> str:
        return f"s3://{self.name}"

    def seed(self, key: str, content: bytes, etag: Optional[str] = None) -> None:
        self.objects[key] = {
            "body": content,
            "etag": md5_hex(content) if etag is None else etag,
            "content_type": "application/octet-stream",
            "acl": None,
        }

    def list_objects_page(
        self, continuation_token: Optional[str] = None, max_keys: int = 1000
    ) -> ObjectListingPage:
        self.list_calls.append(continuation_token)
        keys = sorted(self.objects)
        start = int(continuation_token) if continuation_token else 0
        chunk = keys[start : start + max_keys]
        truncated = start + max_keys < len(keys)
        return ObjectListingPage(
            entries=[
                RemoteEntry(
                    key=key,
                    fingerprint=self.objects[key]["etag"],
                    size=len(self.objects[key]["body"]),
                )
                for key in chunk
            ],
            is_truncated=truncated,
            next_continuation_token=str(start + max_keys) if truncated else None,
        )

    def put_object(self, key, body, content_md5, content_type, acl=None):
        self.put_calls.append(key)
        self.objects[key] = {
            "body": body,
            "etag": md5_hex(body),
            "content_type": content_type,
            "acl": acl,
            "content_md5": content_md5,
        }
        return {"ETag": f'"{md5_hex(body)}"'}

    def delete_object(self, key):
        self.delete_calls.append(key)
        self.objects.pop(key, None)


@pytest.fixture
def memory_repo():
    """Provide an empty in-memory git repository."""
    return MemoryRepo()


@pytest.fixture
def bucket():
    """Provide an empty fake bucket."""
    return FakeBucket()


@pytest.fixture
def mock_s3():
    """Provide a Mock S3 client."""
    client = Mock(spec=S3Client)
    client.uri = "s3://test-bucket"
    return client


@pytest.fixture
def invalidator():
    """Provide a Mock CloudFront invalidator."""
    mock = Mock(spec=CloudFrontInvalidator)
    mock.distribution_id = "E2TESTDIST"
    mock.invalidate.return_value = "I2INVALIDATION"
    return mock


@pytest.fixture
def detector():
    """Provide a content type detector that never calls libmagic."""
    mock = Mock(spec=ContentTypeDetector)
    mock.detect.return_value = "text/plain"
    return mock
