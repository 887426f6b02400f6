"""
Tag domain object for gitversion.

A tag is a named pointer to a commit. Only "versioned" tags take part
in resolution: the full tag name must be the configured prefix followed
by a digit, e.g. with prefix "v":

    v1.2.3      -> versioned, version "1.2.3"
    v10         -> versioned, version "10"
    vnext       -> ignored
    release-1.0 -> ignored

The prefix is always matched literally, so "app.v" only matches tags
starting with exactly "app.v" and never "appXv".
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Pattern


@dataclass(frozen=True)
class Tag:
    """
    A git tag peeled to the commit it points at.

    Attributes:
        name: Tag name without the refs/tags/ prefix (e.g., "v1.2.3")
        target: Full hex id of the tagged commit
    """

    name: str
    target: str

    def is_versioned(self, prefix: str = "") -> bool:
        """Check whether this tag matches '<prefix>[0-9]...'."""
        return matches_tag(self.name, prefix)

    def version(self, prefix: str = "") -> str:
        """Tag name with the prefix removed."""
        return strip_prefix(self.name, prefix)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'target': self.target,
        }

    def __str__(self) -> str:
        return self.name


@lru_cache(maxsize=32)
def tag_pattern(prefix: str = "") -> Pattern[str]:
    """Compile the versioned-tag pattern for a literal prefix."""
    return re.compile('^' + re.escape(prefix) + '[0-9].*$', re.DOTALL)


def matches_tag(name: str, prefix: str = "") -> bool:
    """
    Check if a tag name is a versioned tag for the given prefix.

    Args:
        name: Full tag name, prefix included
        prefix: Literal prefix expected before the version number

    Returns:
        True if name is prefix + digit + anything, False otherwise
    """
    if not name:
        return False
    return tag_pattern(prefix).match(name) is not None


def strip_prefix(name: str, prefix: str = "") -> str:
    """Remove a leading prefix from a tag name."""
    if prefix and name.startswith(prefix):
        return name[len(prefix):]
    return name
