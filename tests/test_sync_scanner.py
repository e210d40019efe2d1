"""Tests for the snapshot tree walker."""

import pytest
from conftest import DIR_MODE, FILE_MODE, commit_files, commit_tree
from dulwich.objects import Blob, Commit, Tag, Tree
from dulwich.repo import Repo

from pygits3.exceptions import ContentReadError, SnapshotResolutionError
from pygits3.sync.scanner import SnapshotFile, TreeWalker, decode_path


def _paths(walker: TreeWalker) -> list[str]:
    return sorted(f.path for f in walker.walk())


class TestResolveTree:
    """Tests for resolving a branch to its tree."""

    def test_short_branch_name(self, memory_repo):
        """A short name resolves through refs/heads."""
        commit = commit_files(memory_repo, {"a.txt": b"a"}, branch="main")

        tree = TreeWalker(memory_repo, "main").resolve_tree()

        assert tree.id == commit.tree

    def test_full_reference(self, memory_repo):
        """A full reference is used as-is."""
        commit = commit_files(memory_repo, {"a.txt": b"a"}, branch="gh-pages")

        tree = TreeWalker(memory_repo, "refs/heads/gh-pages").resolve_tree()

        assert tree.id == commit.tree

    def test_annotated_tag_is_peeled(self, memory_repo):
        """An annotated tag resolves to the tree of the tagged commit."""
        commit = commit_files(memory_repo, {"a.txt": b"a"})
        tag = Tag()
        tag.name = b"v1.0"
        tag.object = (Commit, commit.id)
        tag.tagger = b"Test User <test@example.com>"
        tag.tag_time = 1700000000
        tag.tag_timezone = 0
        tag.message = b"Release 1.0\n"
        memory_repo.object_store.add_object(tag)
        memory_repo.refs[b"refs/tags/v1.0"] = tag.id

        tree = TreeWalker(memory_repo, "v1.0").resolve_tree()

        assert tree.id == commit.tree

    def test_unknown_branch(self, memory_repo):
        """An unknown branch raises SnapshotResolutionError."""
        commit_files(memory_repo, {"a.txt": b"a"})

        with pytest.raises(SnapshotResolutionError, match="Unknown branch"):
            TreeWalker(memory_repo, "does-not-exist").resolve_tree()

    @pytest.mark.parametrize("branch", ["", "   "])
    def test_blank_branch(self, memory_repo, branch):
        """A blank branch name is rejected."""
        with pytest.raises(SnapshotResolutionError, match="No branch"):
            TreeWalker(memory_repo, branch).resolve_tree()

    def test_reference_to_blob(self, memory_repo):
        """A reference that does not point to a commit is rejected."""
        blob = Blob.from_string(b"not a commit")
        memory_repo.object_store.add_object(blob)
        memory_repo.refs[b"refs/heads/odd"] = blob.id

        with pytest.raises(SnapshotResolutionError, match="does not point"):
            TreeWalker(memory_repo, "odd").resolve_tree()


class TestWalk:
    """Tests for enumerating snapshot files."""

    def test_flat_files(self, memory_repo):
        """Top-level files are yielded with their names as paths."""
        commit_files(memory_repo, {"README.md": b"# Site", "index.html": b"<html>"})

        assert _paths(TreeWalker(memory_repo)) == ["README.md", "index.html"]

    def test_nested_directories(self, memory_repo):
        """Directories are entered and paths joined with slashes."""
        commit_files(
            memory_repo,
            {
                "index.html": b"home",
                "css/site.css": b"body {}",
                "docs/api/v1/index.html": b"api",
            },
        )

        assert _paths(TreeWalker(memory_repo)) == [
            "css/site.css",
            "docs/api/v1/index.html",
            "index.html",
        ]

    def test_empty_snapshot(self, memory_repo):
        """A branch with an empty tree yields nothing."""
        commit_files(memory_repo, {})

        assert _paths(TreeWalker(memory_repo)) == []

    def test_only_regular_files(self, memory_repo):
        """Symlinks and submodules are skipped, executables are kept."""
        commit_files(
            memory_repo,
            {"index.html": b"home"},
            symlinks={"current": "index.html"},
            gitlinks={"themes/base": b"b" * 40},
            executables={"bin/build.sh": b"#!/bin/sh\n"},
        )

        assert _paths(TreeWalker(memory_repo)) == ["bin/build.sh", "index.html"]

    def test_file_content_and_metadata(self, memory_repo):
        """SnapshotFile streams the blob content."""
        content = b"line 1\nline 2\n" * 100
        commit_files(memory_repo, {"docs/notes.txt": content})

        files = list(TreeWalker(memory_repo).walk())

        assert len(files) == 1
        snapshot_file = files[0]
        assert isinstance(snapshot_file, SnapshotFile)
        assert snapshot_file.path == "docs/notes.txt"
        assert snapshot_file.mode == 0o100644
        assert snapshot_file.object_id == Blob.from_string(content).id.decode()
        assert b"".join(snapshot_file.iter_chunks()) == content

    def test_non_ascii_paths(self, memory_repo):
        """UTF-8 names are decoded."""
        commit_files(memory_repo, {"café/menü.html": b"x"})

        assert _paths(TreeWalker(memory_repo)) == ["café/menü.html"]

    def test_latin1_paths(self, memory_repo):
        """Names that are not valid UTF-8 are decoded as ISO-8859-1."""
        blob = Blob.from_string(b"x")
        memory_repo.object_store.add_object(blob)
        tree = Tree()
        tree.add(b"caf\xe9.txt", FILE_MODE, blob.id)
        memory_repo.object_store.add_object(tree)
        commit_tree(memory_repo, tree.id)

        files = list(TreeWalker(memory_repo).walk())

        assert [f.path for f in files] == ["café.txt"]
        assert b"".join(files[0].iter_chunks()) == b"x"

    def test_missing_subtree(self, memory_repo):
        """A directory absent from the object store raises ContentReadError."""
        tree = Tree()
        tree.add(b"docs", DIR_MODE, b"c" * 40)
        memory_repo.object_store.add_object(tree)
        commit_tree(memory_repo, tree.id)

        with pytest.raises(ContentReadError, match="docs"):
            list(TreeWalker(memory_repo).walk())


class TestDecodePath:
    """Tests for tree entry name decoding."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (b"index.html", "index.html"),
            ("menü.html".encode("utf-8"), "menü.html"),
            (b"caf\xe9.txt", "café.txt"),
            (b"\xff\xfe", "ÿþ"),
        ],
    )
    def test_decode_path(self, raw, expected):
        assert decode_path(raw) == expected


class TestFromPath:
    """Tests for opening on-disk repositories."""

    def test_not_a_repository(self, tmp_path):
        """A plain directory is not a repository."""
        with pytest.raises(SnapshotResolutionError, match="Not a git repository"):
            TreeWalker.from_path(tmp_path)

    def test_missing_path(self, tmp_path):
        """A missing path is not a repository."""
        with pytest.raises(SnapshotResolutionError):
            TreeWalker.from_path(tmp_path / "missing")

    def test_bare_repository(self, tmp_path):
        """A bare repository on disk can be walked."""
        repo = Repo.init_bare(str(tmp_path))
        try:
            commit_files(repo, {"index.html": b"home", "a/b.txt": b"b"})

            walker = TreeWalker.from_path(tmp_path, "master")
            try:
                assert _paths(walker) == ["a/b.txt", "index.html"]
            finally:
                walker.repo.close()
        finally:
            repo.close()
