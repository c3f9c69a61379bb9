"""Repository model.

A repository is one member of a repo-set: a git working tree listed in
the manifest's project list.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class Repository:
    """A git repository managed by the repo-set manifest.

    Attributes:
        path: Absolute path of the working tree.
        name: Display name (last component of the path).
        rel_path: Path relative to the repo-set root, as listed in the manifest.
    """

    path: Path
    name: str
    rel_path: str

    def __post_init__(self) -> None:
        """Validate repository data after initialization."""
        if not self.name:
            msg = f"Repository name cannot be empty (path: {self.path})"
            raise ValueError(msg)

    @classmethod
    def from_manifest_line(cls, base: Path, rel_path: str) -> Repository:
        """Create a repository from a project.list entry.

        Args:
            base: Folder containing the .repo directory.
            rel_path: Relative path as written in project.list.

        Returns:
            Repository rooted at ``base / rel_path``.
        """
        path = base / rel_path
        return cls(path=path, name=path.name or rel_path, rel_path=rel_path)
