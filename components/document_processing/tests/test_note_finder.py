"""Tests for markdown note enumeration."""

import os
import sys

import pytest

from ..note_finder import NoteDirectoryError, find_markdown_files, is_note_file


def test_finds_nested_markdown_files(tmp_path):
    (tmp_path / "project-a").mkdir()
    (tmp_path / "project-a" / "deep").mkdir()
    (tmp_path / "top.md").write_text("top")
    (tmp_path / "project-a" / "memory-1.md").write_text("one")
    (tmp_path / "project-a" / "deep" / "memory-2.md").write_text("two")
    (tmp_path / "project-a" / "notes.txt").write_text("ignored")

    files = find_markdown_files(tmp_path)

    assert sorted(files) == sorted(
        [
            str((tmp_path / "top.md").resolve()),
            str((tmp_path / "project-a" / "memory-1.md").resolve()),
            str((tmp_path / "project-a" / "deep" / "memory-2.md").resolve()),
        ]
    )
    assert all(os.path.isabs(f) for f in files)


def test_directory_named_like_note_is_skipped(tmp_path):
    (tmp_path / "folder.md").mkdir()
    (tmp_path / "real.md").write_text("x")

    files = find_markdown_files(tmp_path)

    assert files == [str((tmp_path / "real.md").resolve())]


@pytest.mark.skipif(sys.platform == "win32", reason="symlinks need privileges")
def test_symlinked_notes_are_skipped(tmp_path):
    outside = tmp_path / "outside.md"
    outside.write_text("x")
    brain = tmp_path / "brain"
    brain.mkdir()
    (brain / "real.md").write_text("y")
    (brain / "link.md").symlink_to(outside)

    files = find_markdown_files(brain)

    assert files == [str((brain / "real.md").resolve())]


def test_missing_root_raises(tmp_path):
    with pytest.raises(NoteDirectoryError, match="not found"):
        find_markdown_files(tmp_path / "nope")


@pytest.mark.skipif(
    sys.platform == "win32" or os.geteuid() == 0,
    reason="permission bits are not enforced",
)
def test_unreadable_subdirectory_is_skipped(tmp_path):
    locked = tmp_path / "locked"
    locked.mkdir()
    (locked / "hidden.md").write_text("x")
    (tmp_path / "visible.md").write_text("y")
    locked.chmod(0)
    try:
        files = find_markdown_files(tmp_path)
    finally:
        locked.chmod(0o755)

    assert files == [str((tmp_path / "visible.md").resolve())]


def test_is_note_file():
    assert is_note_file("/a/b/memory.md")
    assert not is_note_file("/a/b/memory.txt")
