"""
Service layer for gitversion.

Contains the logic that orchestrates domain objects and infrastructure:
- find_nearest_tags: nearest tagged ancestor of HEAD
- VersionService: one resolution pass, version name and code

Services are the primary API for commands to use.
"""

from .resolver import NearestTag, find_nearest_tags, index_tags, count_touching
from .version_service import (
    VersionService,
    resolve_version_spec,
    resolve_version_name,
    resolve_version_code,
)

__all__ = [
    'NearestTag',
    'find_nearest_tags',
    'index_tags',
    'count_touching',
    'VersionService',
    'resolve_version_spec',
    'resolve_version_name',
    'resolve_version_code',
]
