"""Unit tests for console formatting helpers."""

import pytest
from oper.utils.formatting import pluralize, print_error, print_warning


class TestPluralize:
    """Tests for pluralize function."""

    @pytest.mark.parametrize(
        ("count", "expected"),
        [(0, "0 records"), (1, "1 record"), (2, "2 records")],
    )
    def test_regular_plural(self, count: int, expected: str) -> None:
        """Nouns get an "s" unless the count is exactly one."""
        assert pluralize(count, "record") == expected

    def test_irregular_plural(self) -> None:
        """An explicit plural form is used as given."""
        assert pluralize(1, "repository", "repositories") == "1 repository"
        assert pluralize(4, "repository", "repositories") == "4 repositories"


class TestPrintHelpers:
    """Tests for the themed print helpers."""

    def test_error_goes_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Errors are prefixed and written to stderr."""
        print_error("no .repo folder")

        captured = capsys.readouterr()
        assert "Error: no .repo folder" in captured.err
        assert captured.out == ""

    def test_warning_goes_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Warnings are prefixed and written to stderr."""
        print_warning("repo unreadable")

        assert "Warning: repo unreadable" in capsys.readouterr().err
