"""Download result data models."""

from dataclasses import dataclass, field
from pathlib import Path

from adopr_helper.types.pulls import FilePatch, PrIdentity


@dataclass
class ArtifactSet:
    """Files written for one pull request download."""

    destination: Path
    original_files: list[Path]
    patch_file: Path
    instructions_file: Path
    warnings: list[str] = field(default_factory=list)


@dataclass
class DownloadResult:
    """Outcome of a download action.

    ``artifacts`` is None when no eligible item was found ("nothing to do").
    """

    identity: PrIdentity
    patches: list[FilePatch] = field(default_factory=list)
    artifacts: ArtifactSet | None = None
    total_changes: int = 0

    @property
    def nothing_to_do(self) -> bool:
        return self.artifacts is None

    @property
    def warnings(self) -> list[str]:
        warnings = [warning for patch in self.patches for warning in patch.warnings]
        if self.artifacts is not None:
            warnings.extend(self.artifacts.warnings)
        return warnings
