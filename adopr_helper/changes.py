"""Eligibility policy for changed items."""

from collections.abc import Iterable

from adopr_helper.types.pulls import ChangedItem, ChangeType, ObjectKind

ELIGIBLE_CHANGE_TYPES = frozenset({ChangeType.ADD, ChangeType.EDIT})

# Code file extensions the download used to be restricted to. Not applied
# unless passed explicitly as ``extensions``.
SUPPORTED_EXTENSIONS = (
    ".ts",
    ".js",
    ".json",
    ".py",
    ".cs",
    ".sh",
    ".yml",
    ".yaml",
    ".html",
    ".css",
    ".scss",
    ".less",
    ".bat",
    ".ps1",
    ".sql",
    ".vue",
    ".svelte",
    ".tsx",
    ".jsx",
)


def is_eligible(item: ChangedItem, extensions: Iterable[str] | None = None) -> bool:
    """
    Decide whether a changed item gets a patch.

    Only added or edited blobs with a path qualify; deletes, renames, moves,
    folders and trees never do.

    Args:
        item: Changed item from the diff enumeration
        extensions: Optional allow-list of file suffixes (case-insensitive)
    """
    if item.change_type not in ELIGIBLE_CHANGE_TYPES:
        return False
    if item.object_kind is not ObjectKind.BLOB or item.is_folder:
        return False
    if not item.path.strip("/ "):
        return False
    if extensions is not None:
        suffixes = tuple(ext.lower() for ext in extensions)
        return item.path.lower().endswith(suffixes)
    return True


def filter_eligible(
    items: Iterable[ChangedItem],
    extensions: Iterable[str] | None = None,
) -> list[ChangedItem]:
    """Keep eligible items, preserving their order."""
    allowed = list(extensions) if extensions is not None else None
    return [item for item in items if is_eligible(item, allowed)]
