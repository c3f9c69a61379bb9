"""CLI package for oper.

This package contains the Typer application.
"""

from oper.cli.main import app

__all__ = ["app"]
