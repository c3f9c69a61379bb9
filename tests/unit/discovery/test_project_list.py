"""Unit tests for project.list based discovery."""

from pathlib import Path

import pytest
from oper.discovery import DiscoveryError, ProjectListSource, discover_repositories
from oper.discovery.base import RepositorySource
from oper.discovery.project_list import find_project_file, find_repo_base_folder
from oper.models.repository import Repository


class TestFindRepoBaseFolder:
    """Tests for find_repo_base_folder function."""

    def test_finds_in_start_folder(self, repo_set: Path) -> None:
        """The start folder itself may hold .repo/."""
        assert find_repo_base_folder(repo_set) == repo_set.resolve()

    def test_searches_upwards(self, repo_set: Path) -> None:
        """Nested folders resolve to the repo-set root."""
        nested = repo_set / "platform" / "build"
        assert find_repo_base_folder(nested) == repo_set.resolve()

    def test_no_repo_folder(self, tmp_path: Path) -> None:
        """Raises DiscoveryError outside any repo-set."""
        with pytest.raises(DiscoveryError, match=r"No \.repo folder"):
            find_repo_base_folder(tmp_path)

    def test_repo_file_is_not_a_folder(self, tmp_path: Path) -> None:
        """A plain file named .repo does not count."""
        (tmp_path / ".repo").write_text("", encoding="utf-8")
        with pytest.raises(DiscoveryError):
            find_repo_base_folder(tmp_path)


class TestFindProjectFile:
    """Tests for find_project_file function."""

    def test_missing_project_list(self, tmp_path: Path) -> None:
        """A .repo/ folder without project.list is an error."""
        (tmp_path / ".repo").mkdir()
        with pytest.raises(DiscoveryError, match="No project.list"):
            find_project_file(tmp_path)

    def test_returns_project_list(self, repo_set: Path) -> None:
        """Returns the project.list path."""
        assert find_project_file(repo_set) == repo_set.resolve() / ".repo" / "project.list"


class TestProjectListSource:
    """Tests for ProjectListSource.discover."""

    def test_is_repository_source(self) -> None:
        """ProjectListSource implements RepositorySource."""
        assert isinstance(ProjectListSource(), RepositorySource)

    def test_discovers_in_manifest_order(self, repo_set: Path) -> None:
        """Projects are returned in project.list order, blank lines skipped."""
        repos = ProjectListSource().discover(repo_set)

        base = repo_set.resolve()
        assert repos == [
            Repository(path=base / "platform" / "build", name="build", rel_path="platform/build"),
            Repository(path=base / "tools" / "repo", name="repo", rel_path="tools/repo"),
        ]

    def test_discover_from_nested_folder(self, repo_set: Path) -> None:
        """Discovery from inside a project finds the same repositories."""
        repos = ProjectListSource().discover(repo_set / "tools" / "repo")
        assert [r.rel_path for r in repos] == ["platform/build", "tools/repo"]

    def test_strips_whitespace(self, repo_set: Path) -> None:
        """Surrounding whitespace in project.list lines is ignored."""
        (repo_set / ".repo" / "project.list").write_text("  platform/build  \n", encoding="utf-8")
        repos = ProjectListSource().discover(repo_set)
        assert [r.rel_path for r in repos] == ["platform/build"]

    def test_empty_project_list(self, repo_set: Path) -> None:
        """An empty project.list is valid and yields no repositories."""
        (repo_set / ".repo" / "project.list").write_text("\n\n", encoding="utf-8")
        assert ProjectListSource().discover(repo_set) == []

    def test_undecodable_project_list(self, repo_set: Path) -> None:
        """A project.list that is not UTF-8 raises DiscoveryError."""
        (repo_set / ".repo" / "project.list").write_bytes(b"\xff\xfe\xfa")
        with pytest.raises(DiscoveryError, match="Failed to read"):
            ProjectListSource().discover(repo_set)


class TestDiscoverRepositories:
    """Tests for discover_repositories function."""

    def test_uses_project_list_by_default(self, repo_set: Path) -> None:
        """Default source reads project.list."""
        assert len(discover_repositories(repo_set)) == 2

    def test_custom_source(self, tmp_path: Path) -> None:
        """A custom RepositorySource can be injected."""

        class StaticSource(RepositorySource):
            def discover(self, root: Path) -> list[Repository]:
                return [Repository(path=root / "x", name="x", rel_path="x")]

        repos = discover_repositories(tmp_path, source=StaticSource())
        assert [r.name for r in repos] == ["x"]
