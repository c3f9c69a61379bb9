"""Repo-set discovery.

This module exports the sources that map a path to the repositories of
the manifest governing it.
"""

from oper.discovery.base import DiscoveryError, RepositorySource
from oper.discovery.project_list import ProjectListSource, discover_repositories

__all__ = ["DiscoveryError", "ProjectListSource", "RepositorySource", "discover_repositories"]
