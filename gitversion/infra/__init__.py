"""
Infrastructure layer for gitversion.

Contains abstractions for external systems:
- GitClient: git command execution and repository discovery
- Repository: read-only handle for one resolution pass

These provide clean interfaces that can be mocked for testing.
"""

from .git_client import GitClient, Repository

__all__ = [
    'GitClient',
    'Repository',
]
