"""
Writing the downloaded pull request to disk.

A download produces, under one destination folder:
- each file's pre-change content at its repository-relative path
- ``patch.diff``, every file's unified diff concatenated in item order
- ``instructions.md``, a review prompt listing the patch and the files
- ``.adopr-helper-files.json``, the originals this download wrote

Re-running over the same folder overwrites the previous download. Originals
listed in the previous manifest that the new download does not produce are
removed, so the folder always matches the latest ``instructions.md``. Files
the tool did not write are left alone.
"""

import json
from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path, PurePosixPath

from adopr_helper.exceptions import StorageError
from adopr_helper.logging import get_logger
from adopr_helper.types.artifacts import ArtifactSet
from adopr_helper.types.pulls import FilePatch

DEFAULT_DOWNLOAD_FOLDER = "PR_FOLDER"
PATCH_FILE_NAME = "patch.diff"
INSTRUCTIONS_FILE_NAME = "instructions.md"
MANIFEST_FILE_NAME = ".adopr-helper-files.json"

RESERVED_FILE_NAMES = frozenset(
    name.lower() for name in (PATCH_FILE_NAME, INSTRUCTIONS_FILE_NAME, MANIFEST_FILE_NAME)
)

logger = get_logger()


class FileWriter(ABC):
    """Reads, writes and removes text files below a root folder."""

    @abstractmethod
    def write(self, relative_path: str, content: str) -> Path:
        """
        Write content to relative_path, creating parent folders first.

        Existing files are overwritten.

        Returns:
            The path that was written

        Raises:
            StorageError: If the file cannot be written
        """

    @abstractmethod
    def read(self, relative_path: str) -> str | None:
        """Return the content of relative_path, or None if it does not exist."""

    @abstractmethod
    def remove(self, relative_path: str) -> None:
        """Delete relative_path if it exists."""


class LocalFileWriter(FileWriter):
    """FileWriter for the local filesystem."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def write(self, relative_path: str, content: str) -> Path:
        target = self._resolve(relative_path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8", newline="")
        except OSError as e:
            raise StorageError(f"Cannot write {target}: {e}", path=str(target)) from e
        return target

    def read(self, relative_path: str) -> str | None:
        target = self._resolve(relative_path)
        try:
            return target.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Cannot read {target}: {e}", path=str(target)) from e

    def remove(self, relative_path: str) -> None:
        target = self._resolve(relative_path)
        try:
            target.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot remove {target}: {e}", path=str(target)) from e

        # Drop folders left empty, up to the root
        parent = target.parent
        while parent != self.root and self.root in parent.parents:
            try:
                parent.rmdir()
            except OSError:
                break
            parent = parent.parent

    def _resolve(self, relative_path: str) -> Path:
        return self.root.joinpath(*_safe_parts(relative_path))


def _safe_parts(relative_path: str) -> tuple[str, ...]:
    parts = tuple(
        part for part in PurePosixPath(relative_path.replace("\\", "/")).parts
        if part not in ("/", "", ".")
    )
    if not parts or ".." in parts:
        raise StorageError(
            f"Refusing to write outside the download folder: {relative_path!r}",
            path=relative_path,
        )
    return parts


def build_instructions(file_names: Sequence[str], patch_file_name: str = PATCH_FILE_NAME) -> str:
    """Render the review instructions document."""
    listed = "\n".join(f"- {name}" for name in file_names)
    return (
        "\n"
        "Please review the following code changes as if you were commenting on a GitHub pull request.\n"
        "Here is the unified diff file (patch):\n"
        f"- {patch_file_name}\n"
        "\n"
        "Here are the original code files (if needed for context):\n"
        f"{listed}\n"
        "\n"
        "Please generate inline review comments, suggestions, and highlight any issues, "
        "improvements, or best practices, just like a GitHub PR review.\n"
    )


def combine_patches(patches: Sequence[FilePatch]) -> str:
    """Concatenate per-file diffs in order."""
    return "\n".join(patch.unified_diff for patch in patches)


def is_reserved(file_name: str) -> bool:
    """True if a repository path would collide with a generated file."""
    return file_name.strip("/").lower() in RESERVED_FILE_NAMES


def _previous_originals(writer: FileWriter) -> list[str]:
    content = writer.read(MANIFEST_FILE_NAME)
    if not content:
        return []
    try:
        data = json.loads(content)
    except json.JSONDecodeError:
        logger.warning("Ignoring unreadable %s", MANIFEST_FILE_NAME)
        return []
    if not isinstance(data, list):
        return []
    return [str(name) for name in data]


def write_artifacts(patches: Sequence[FilePatch], writer: FileWriter, destination: Path) -> ArtifactSet:
    """
    Write originals, combined patch and instructions through writer.

    Files without previous content (new files) are written empty, so every
    path listed in the instructions exists. A repository file whose path
    equals a generated file name at the folder root is not written and is
    reported in ``ArtifactSet.warnings``; its diff is still in the patch.

    Raises:
        StorageError: If a file cannot be written or a path leaves the folder
    """
    previous = _previous_originals(writer)

    original_files: list[Path] = []
    written: list[str] = []
    warnings: list[str] = []
    for patch in patches:
        if is_reserved(patch.file_name):
            warning = (
                f"Original of {patch.file_name} not written: the name is used "
                "by a generated file in the download folder"
            )
            logger.warning(warning)
            warnings.append(warning)
            continue
        original_files.append(writer.write(patch.file_name, patch.old_content or ""))
        written.append(patch.file_name)

    current = set(written)
    for stale in previous:
        if stale not in current and not is_reserved(stale):
            writer.remove(stale)

    patch_file = writer.write(PATCH_FILE_NAME, combine_patches(patches))
    instructions_file = writer.write(
        INSTRUCTIONS_FILE_NAME,
        build_instructions(written),
    )
    writer.write(MANIFEST_FILE_NAME, json.dumps(written, indent=2) + "\n")

    return ArtifactSet(
        destination=destination,
        original_files=original_files,
        patch_file=patch_file,
        instructions_file=instructions_file,
        warnings=warnings,
    )
