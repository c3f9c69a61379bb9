"""oper - browse the merged commit history of a repo-set."""

__version__ = "0.3.0"
