"""Bundled data files for oper (default theme and configuration)."""
