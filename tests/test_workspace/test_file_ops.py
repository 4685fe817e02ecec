"""Unit tests for filesystem primitives (create_openfort.workspace.file_ops)."""

from __future__ import annotations

from pathlib import Path

import pytest

from conftest import read_tree, write_tree
from create_openfort.workspace.file_ops import (
    copy,
    copy_dir,
    edit_file,
    empty_dir,
    is_empty,
    remove_path,
)


class TestIsEmpty:
    @pytest.mark.unit
    def test_no_entries(self, tmp_path: Path):
        assert is_empty(tmp_path) is True

    @pytest.mark.unit
    def test_only_git_dir(self, tmp_path: Path):
        (tmp_path / ".git").mkdir()
        assert is_empty(tmp_path) is True

    @pytest.mark.unit
    def test_git_plus_file(self, tmp_path: Path):
        (tmp_path / ".git").mkdir()
        (tmp_path / "README.md").write_text("hi")
        assert is_empty(tmp_path) is False

    @pytest.mark.unit
    def test_single_file(self, tmp_path: Path):
        (tmp_path / ".gitignore").write_text("node_modules")
        assert is_empty(tmp_path) is False


class TestEmptyDir:
    @pytest.mark.unit
    def test_keeps_git(self, tmp_path: Path):
        write_tree(tmp_path, {".git/HEAD": "ref", "a.txt": "a", "src/b.ts": "b"})
        empty_dir(tmp_path)
        assert sorted(p.name for p in tmp_path.iterdir()) == [".git"]
        assert (tmp_path / ".git" / "HEAD").read_text() == "ref"

    @pytest.mark.unit
    def test_missing_dir_is_noop(self, tmp_path: Path):
        empty_dir(tmp_path / "nope")
        assert not (tmp_path / "nope").exists()


class TestRemovePath:
    @pytest.mark.unit
    def test_file_and_dir(self, tmp_path: Path):
        write_tree(tmp_path, {"f.txt": "x", "d/g.txt": "y"})
        remove_path(tmp_path / "f.txt")
        remove_path(tmp_path / "d")
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.unit
    def test_missing_is_ignored(self, tmp_path: Path):
        remove_path(tmp_path / "ghost")


class TestCopy:
    @pytest.mark.unit
    def test_copy_file_creates_parents(self, tmp_path: Path):
        src = write_tree(tmp_path / "src", {"a.txt": "A"}) / "a.txt"
        dest = tmp_path / "out" / "deep" / "a.txt"
        copy(src, dest)
        assert dest.read_text() == "A"

    @pytest.mark.unit
    def test_copy_dir_recursive_with_ignore(self, tmp_path: Path):
        src = write_tree(
            tmp_path / "src",
            {"package.json": "{}", "src/App.tsx": "app", "src/main.tsx": "main", "README.md": "r"},
        )
        dest = tmp_path / "dest"
        copy_dir(src, dest, ignore=[src / "package.json", src / "src" / "App.tsx"])
        assert read_tree(dest) == {"src/main.tsx": "main", "README.md": "r"}

    @pytest.mark.unit
    def test_overwrites_existing(self, tmp_path: Path):
        src = write_tree(tmp_path / "src", {"a.txt": "new"})
        dest = write_tree(tmp_path / "dest", {"a.txt": "old", "b.txt": "keep"})
        copy_dir(src, dest)
        assert read_tree(dest) == {"a.txt": "new", "b.txt": "keep"}


class TestEditFile:
    @pytest.mark.unit
    def test_rewrites_content(self, tmp_path: Path):
        path = tmp_path / "f.txt"
        path.write_text("hello")
        edit_file(path, str.upper)
        assert path.read_text() == "HELLO"
