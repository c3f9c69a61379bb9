"""Unit tests for shell execution utilities."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest
from oper.utils.shell import CommandResult, command_exists, run_command, spawn_detached


class TestRunCommand:
    """Tests for run_command function."""

    @patch("oper.utils.shell.subprocess.run")
    def test_returns_result(self, mock_run: MagicMock) -> None:
        """run_command wraps the completed process."""
        mock_run.return_value = MagicMock(stdout="out", stderr="err", returncode=3)

        result = run_command(["git", "status"])

        assert result == CommandResult(stdout="out", stderr="err", returncode=3)
        assert not result.success

    @patch("oper.utils.shell.subprocess.run")
    def test_decodes_leniently(self, mock_run: MagicMock) -> None:
        """Output is decoded as UTF-8 with replacement characters."""
        mock_run.return_value = MagicMock(stdout="", stderr="", returncode=0)

        run_command(["git", "log"], cwd="/r/A", timeout=5)

        kwargs = mock_run.call_args.kwargs
        assert kwargs["encoding"] == "utf-8"
        assert kwargs["errors"] == "replace"
        assert kwargs["cwd"] == "/r/A"
        assert kwargs["timeout"] == 5

    def test_raises_file_not_found(self) -> None:
        """run_command raises FileNotFoundError for missing commands."""
        with pytest.raises(FileNotFoundError):
            run_command(["nonexistent_command_xyz_12345"])


class TestCommandExists:
    """Tests for command_exists function."""

    @patch("oper.utils.shell.shutil.which", return_value="/usr/bin/git")
    def test_found(self, mock_which: MagicMock) -> None:
        """command_exists is True when the command is on PATH."""
        assert command_exists("git")

    @patch("oper.utils.shell.shutil.which", return_value=None)
    def test_not_found(self, mock_which: MagicMock) -> None:
        """command_exists is False when the command is missing."""
        assert not command_exists("gitk")


class TestSpawnDetached:
    """Tests for spawn_detached function."""

    @patch("oper.utils.shell.subprocess.Popen")
    def test_detaches_streams_and_session(self, mock_popen: MagicMock) -> None:
        """The child gets /dev/null streams and its own session."""
        mock_popen.return_value = MagicMock(pid=1234)

        pid = spawn_detached(["gitk", "--select-commit=abc"], cwd="/r/A")

        assert pid == 1234
        args, kwargs = mock_popen.call_args
        assert args[0] == ["gitk", "--select-commit=abc"]
        assert kwargs["cwd"] == "/r/A"
        assert kwargs["stdin"] is subprocess.DEVNULL
        assert kwargs["stdout"] is subprocess.DEVNULL
        assert kwargs["stderr"] is subprocess.DEVNULL
        assert kwargs["start_new_session"] is True

    @patch("oper.utils.shell.subprocess.Popen")
    def test_does_not_wait(self, mock_popen: MagicMock) -> None:
        """spawn_detached returns without waiting for the child."""
        spawn_detached(["gitk"])
        mock_popen.return_value.wait.assert_not_called()
        mock_popen.return_value.communicate.assert_not_called()

    def test_missing_executable(self) -> None:
        """Missing executables raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            spawn_detached(["nonexistent_command_xyz_12345"])
