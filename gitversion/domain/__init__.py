"""
Domain layer for gitversion.

Contains pure domain objects and functions with no I/O:
- Tag: A git tag peeled to its commit, plus versioned-tag matching
- Commit: A node of the history DAG
- VersionSpec: Resolved version information for a build
- Version comparison, name formatting and code encoding
"""

from .tag import Tag, matches_tag, strip_prefix, tag_pattern
from .commit import Commit, DEFAULT_ABBREV
from .version import (
    VersionSpec,
    parse_version,
    compare_versions,
    highest_version,
    encode_version_code,
    format_version_name,
    UNKNOWN_VERSION,
    UNKNOWN_CODE,
    DEFAULT_RELEASE_BRANCHES,
    MAX_VERSION_CODE,
)

__all__ = [
    'Tag',
    'matches_tag',
    'strip_prefix',
    'tag_pattern',
    'Commit',
    'DEFAULT_ABBREV',
    'VersionSpec',
    'parse_version',
    'compare_versions',
    'highest_version',
    'encode_version_code',
    'format_version_name',
    'UNKNOWN_VERSION',
    'UNKNOWN_CODE',
    'DEFAULT_RELEASE_BRANCHES',
    'MAX_VERSION_CODE',
]
