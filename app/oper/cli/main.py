"""Main CLI application entry point.

Defines the Typer application. oper has no subcommands: it discovers the
repo-set, fetches and merges the history, then either writes a report or
opens the interactive browser.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.logging import RichHandler

from oper import __version__
from oper.cli.display import fetch_progress, print_fetch_failures
from oper.core.config import ConfigError, load_config
from oper.core.diff import DiffRenderer
from oper.core.dispatch import CommandDispatcher
from oper.core.history import build_history
from oper.core.report import ReportError, write_report
from oper.discovery import DiscoveryError, discover_repositories
from oper.models.filters import FilterCriteria
from oper.tui.app import run_tui
from oper.utils.formatting import (
    err_console,
    pluralize,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from oper.vcs.client import GitClient

app = typer.Typer(
    name="oper",
    help="Browse the merged commit history of a repo-set.",
    add_completion=False,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"oper version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route log records to stderr through Rich.

    Args:
        verbose: Log debug records instead of errors only.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.ERROR,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.command()
def main(
    days: Annotated[
        int,
        typer.Option(
            "--days",
            "-d",
            min=0,
            help="Include history of the last <n> days.",
        ),
    ] = 10,
    author: Annotated[
        str | None,
        typer.Option(
            "--author",
            "-a",
            help="Only show commits whose author contains this text (case-insensitive).",
        ),
    ] = None,
    message: Annotated[
        str | None,
        typer.Option(
            "--message",
            "-m",
            help="Only show commits whose message contains this text (case-insensitive).",
        ),
    ] = None,
    cwd: Annotated[
        Path,
        typer.Option(
            "--cwd",
            "-C",
            help="Start looking for the repo-set in this directory.",
        ),
    ] = Path("."),
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            help="Configuration file (default: ~/.config/oper/config.toml).",
        ),
    ] = None,
    report: Annotated[
        Path | None,
        typer.Option(
            "--report",
            "-r",
            help="Write the history to a .csv, .ods or .xlsx file instead of opening the browser.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
) -> None:
    """oper - commit history across all repositories of a repo-set.

    Lists the commits of every repository managed by the `repo` manifest
    in one time-ordered feed. Select a commit and press [bold]enter[/bold]
    to see its diff, [bold]esc[/bold] to go back, [bold]q[/bold] to quit.

    Examples:
        oper                        # Last 10 days
        oper --days 30              # Last 30 days
        oper --author alice         # Only commits authored by alice
        oper --message "fix"        # Only commits mentioning "fix"
        oper --report history.csv   # Export instead of browsing
    """
    configure_logging(verbose)
    criteria = FilterCriteria(days=days, author=author or None, message=message or None)

    try:
        repositories = discover_repositories(cwd)
    except DiscoveryError as e:
        print_error(str(e))
        print_info("Run oper inside a repo checkout (a folder containing .repo/) or pass -C.")
        raise typer.Exit(code=1) from e

    try:
        config = load_config(config_path)
    except ConfigError as e:
        print_error(f"Failed to load configuration: {e}")
        raise typer.Exit(code=1) from e

    client = GitClient()
    if not client.is_available():
        print_warning(f"'{client.executable}' not found in PATH, no history can be read")

    with fetch_progress(len(repositories)) as advance:
        history = build_history(repositories, criteria, client=client, on_progress=advance)
    print_fetch_failures(history)

    if report is not None:
        try:
            written = write_report(history, report)
        except ReportError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e
        print_success(f"Wrote {pluralize(written, 'record')} to {report}")
        return

    renderer = DiffRenderer(client, capacity=config.diff_cache_size)
    dispatcher = CommandDispatcher(config.commands)
    run_tui(history, renderer, dispatcher, days=days)


if __name__ == "__main__":
    app()
