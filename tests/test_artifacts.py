"""Tests for writing downloads to disk."""

import json
from pathlib import Path

import pytest

from adopr_helper.artifacts import (
    INSTRUCTIONS_FILE_NAME,
    MANIFEST_FILE_NAME,
    PATCH_FILE_NAME,
    LocalFileWriter,
    build_instructions,
    write_artifacts,
)
from adopr_helper.exceptions import StorageError
from adopr_helper.patches import create_unified_diff
from adopr_helper.types.pulls import FilePatch


def make_patch(file_name: str, old: str = "old\n", new: str = "new\n") -> FilePatch:
    return FilePatch(
        file_name=file_name,
        old_content=old,
        unified_diff=create_unified_diff(file_name, old, new),
    )


def test_originals_patch_and_manifest_are_written(tmp_path: Path) -> None:
    patches = [make_patch("src/a.ts"), make_patch("README.md")]

    artifacts = write_artifacts(patches, LocalFileWriter(tmp_path), tmp_path)

    assert artifacts.original_files == [tmp_path / "src" / "a.ts", tmp_path / "README.md"]
    assert artifacts.warnings == []
    assert (tmp_path / PATCH_FILE_NAME).read_text().count("Index: ") == 2
    assert json.loads((tmp_path / MANIFEST_FILE_NAME).read_text()) == ["src/a.ts", "README.md"]


def test_rerun_removes_originals_of_previous_download(tmp_path: Path) -> None:
    writer = LocalFileWriter(tmp_path)
    (tmp_path / "notes.txt").write_text("mine")

    write_artifacts([make_patch("src/a.ts"), make_patch("lib/deep/b.py")], writer, tmp_path)
    write_artifacts([make_patch("src/a.ts")], writer, tmp_path)

    assert (tmp_path / "src" / "a.ts").exists()
    assert not (tmp_path / "lib" / "deep" / "b.py").exists()
    assert not (tmp_path / "lib").exists()
    assert (tmp_path / "notes.txt").read_text() == "mine"
    assert (tmp_path / INSTRUCTIONS_FILE_NAME).read_text() == build_instructions(["src/a.ts"])


def test_repository_file_named_like_generated_file(tmp_path: Path) -> None:
    patches = [make_patch("patch.diff", old="original patch\n"), make_patch("src/a.ts")]

    artifacts = write_artifacts(patches, LocalFileWriter(tmp_path), tmp_path)

    assert len(artifacts.warnings) == 1
    assert "patch.diff" in artifacts.warnings[0]
    combined = (tmp_path / PATCH_FILE_NAME).read_text()
    assert combined.startswith("Index: patch.diff")
    assert "Index: src/a.ts" in combined
    assert (tmp_path / INSTRUCTIONS_FILE_NAME).read_text() == build_instructions(["src/a.ts"])


def test_nested_file_with_generated_name_is_kept(tmp_path: Path) -> None:
    artifacts = write_artifacts([make_patch("docs/instructions.md")], LocalFileWriter(tmp_path), tmp_path)

    assert artifacts.warnings == []
    assert (tmp_path / "docs" / "instructions.md").read_text() == "old\n"


def test_destination_that_is_a_file_is_storage_error(tmp_path: Path) -> None:
    destination = tmp_path / "occupied"
    destination.write_text("not a folder")

    with pytest.raises(StorageError):
        write_artifacts([make_patch("src/a.ts")], LocalFileWriter(destination), destination)


@pytest.mark.parametrize("path", ["../escape.txt", "src/../../escape.txt", "/", ""])
def test_paths_outside_the_folder_are_refused(tmp_path: Path, path: str) -> None:
    with pytest.raises(StorageError):
        LocalFileWriter(tmp_path / "out").write(path, "content")

    assert not (tmp_path / "escape.txt").exists()
