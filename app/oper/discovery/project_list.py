"""Discovery of repositories checked out by the `repo` tool.

A repo-set checkout has a `.repo/` folder at its top level. The file
`.repo/project.list` lists the path of every project, one per line,
relative to the folder containing `.repo/`.
"""

import logging
from pathlib import Path

from oper.discovery.base import DiscoveryError, RepositorySource
from oper.models.repository import Repository

logger = logging.getLogger(__name__)

REPO_DIR_NAME = ".repo"
PROJECT_LIST_NAME = "project.list"


def find_repo_base_folder(start: Path) -> Path:
    """Find the folder containing `.repo/`, searching upwards from ``start``.

    Args:
        start: Path to start searching from.

    Returns:
        The closest ancestor of ``start`` (or ``start`` itself) holding `.repo/`.

    Raises:
        DiscoveryError: If no ancestor holds a `.repo/` folder.
    """
    try:
        resolved = start.resolve()
    except OSError as e:
        raise DiscoveryError(f"Cannot resolve {start}: {e}") from e

    for folder in (resolved, *resolved.parents):
        if (folder / REPO_DIR_NAME).is_dir():
            return folder
    raise DiscoveryError(f"No {REPO_DIR_NAME} folder found in {resolved} or any parent folder")


def find_project_file(start: Path) -> Path:
    """Find `.repo/project.list` of the repo-set governing ``start``.

    Raises:
        DiscoveryError: If there is no repo-set or it has no project list.
    """
    project_file = find_repo_base_folder(start) / REPO_DIR_NAME / PROJECT_LIST_NAME
    if not project_file.is_file():
        raise DiscoveryError(f"No {PROJECT_LIST_NAME} in {project_file.parent}")
    return project_file


class ProjectListSource(RepositorySource):
    """Repository source reading `.repo/project.list`."""

    def discover(self, root: Path) -> list[Repository]:
        """Return the projects listed in the governing `project.list`.

        Args:
            root: Any path inside the repo-set.

        Returns:
            Repositories in project.list order.

        Raises:
            DiscoveryError: If there is no repo-set or its list is unreadable.
        """
        project_file = find_project_file(root)
        base_folder = project_file.parent.parent

        try:
            lines = project_file.read_text(encoding="utf-8").splitlines()
        except (OSError, UnicodeDecodeError) as e:
            raise DiscoveryError(f"Failed to read {project_file}: {e}") from e

        repositories: list[Repository] = []
        for line in lines:
            rel_path = line.strip()
            if not rel_path:
                continue
            repositories.append(Repository.from_manifest_line(base_folder, rel_path))

        logger.debug("Found %d project(s) in %s", len(repositories), project_file)
        return repositories


def discover_repositories(root: Path, source: RepositorySource | None = None) -> list[Repository]:
    """Discover the repositories of the repo-set governing ``root``.

    Args:
        root: Any path inside the repo-set.
        source: Discovery strategy. Defaults to ProjectListSource.

    Returns:
        Repositories in manifest order (possibly empty).

    Raises:
        DiscoveryError: If ``root`` is not inside a readable repo-set.
    """
    return (source or ProjectListSource()).discover(root)
